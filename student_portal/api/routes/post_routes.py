"""
Post Routes - social feed

POST /posts - Create a post (COMPANY, USER)
GET /posts/feed - Paginated feed (?type=daily for the last 24 hours)
GET /posts/user/{user_id} - Posts by one author
PUT /posts/{post_id} - Edit own post (COMPANY, USER)
DELETE /posts/{post_id} - Delete own post (COMPANY, USER)
GET /posts/{post_id}/likes - Users who liked a post
POST /posts/{post_id}/like - Like toggle (USER)
POST /posts/{post_id}/save - Save toggle (USER)
POST /posts/{post_id}/comments - Add comment (USER)
GET /posts/{post_id}/comments - Comments, newest first
POST /posts/{post_id}/share - Repost (USER)
GET /posts/{post_id}/shares - Who shared a post (author only)
"""

from datetime import timedelta
from typing import Optional

from fastapi import APIRouter, HTTPException, Depends, Query, Request

from student_portal.core.auth import get_current_user, require_roles
from student_portal.db.mongodb import get_collection, COLLECTIONS
from student_portal.schemas.schemas import CommentCreate, LinkPreview, MessageResponse, PostCreate
from student_portal.services.activity_service import log_activity
from student_portal.services.mongo_service import (
    serialize_doc, serialize_docs, get_users_by_ids, populate_users
)
from student_portal.utils.common import parse_object_id, total_pages, utcnow

router = APIRouter(prefix="/posts", tags=["Posts"])

AUTHOR_FIELDS = {"name": 1, "email": 1, "role": 1, "profile_image": 1}
authors_only = require_roles("COMPANY", "USER")
students_only = require_roles("USER")


def _clean_link_preview(preview: Optional[LinkPreview]) -> Optional[dict]:
    if not preview or not preview.url:
        return None
    return {
        "url": preview.url,
        "title": preview.title or None,
        "description": preview.description or None,
        "image": preview.image or None,
    }


def _get_post_or_404(post_id: str, message: str = "Post not found") -> dict:
    post = get_collection(COLLECTIONS["posts"]).find_one({"_id": parse_object_id(post_id, "postId")})
    if not post:
        raise HTTPException(status_code=404, detail=message)
    return post


def _assert_author(post: dict, user: dict) -> None:
    if post["author"] != user["_id"]:
        raise HTTPException(status_code=403, detail="Not authorized to modify this post")


def _card(post: dict) -> dict:
    """Feed representation of a post."""
    return {
        "id": post["_id"],
        "author": post.get("author"),
        "previewlink": post.get("link_preview"),
        "description": post.get("text"),
        "likes_count": len(post.get("likes", [])),
        "comments_count": post.get("comments_count", 0),
        "share_count": post.get("share_count", 0),
        "shared_from": post.get("shared_from"),
        "created_at": post.get("created_at"),
    }


def _paged_posts(query: dict, page: int, limit: int) -> dict:
    collection = get_collection(COLLECTIONS["posts"])
    total = collection.count_documents(query)
    posts = list(collection.find(query).sort([("created_at", -1), ("_id", -1)]).skip((page - 1) * limit).limit(limit))
    populate_users(posts, "author", AUTHOR_FIELDS)
    data = serialize_docs(_card(p) for p in posts)
    return {
        "success": True,
        "page": page,
        "pages": total_pages(total, limit),
        "count": len(data),
        "total": total,
        "data": data,
    }


def _new_post(author: dict, text: Optional[str], link_preview: Optional[dict], shared_from=None) -> dict:
    now = utcnow()
    post = {
        "author": author["_id"],
        "text": text or None,
        "link_preview": link_preview,
        "likes": [],
        "saves": [],
        "comments_count": 0,
        "share_count": 0,
        "shared_from": shared_from,
        "shares": [],
        "created_at": now,
        "updated_at": now,
    }
    post["_id"] = get_collection(COLLECTIONS["posts"]).insert_one(post).inserted_id
    return post


def _toggle(request: Request, post_id: str, user: dict, field: str, on_action: str, off_action: str, verb: str):
    post = _get_post_or_404(post_id)
    already = user["_id"] in post.get(field, [])
    op = "$pull" if already else "$addToSet"

    collection = get_collection(COLLECTIONS["posts"])
    collection.update_one({"_id": post["_id"]}, {op: {field: user["_id"]}})
    count = len(collection.find_one({"_id": post["_id"]}, {field: 1}).get(field, []))

    log_activity(
        request, user, off_action if already else on_action, "POST", post["_id"],
        f"User un{verb} a post" if already else f"User {verb} a post", {}
    )
    return not already, count


# ============================================================
# POSTS
# ============================================================

@router.post("", status_code=201)
async def create_post(body: PostCreate, request: Request, user: dict = Depends(authors_only)):
    link_preview = _clean_link_preview(body.link_preview)
    if not body.text and not link_preview:
        raise HTTPException(status_code=400, detail="Post must have text or link_preview.url")

    post = _new_post(user, body.text, link_preview)

    log_activity(
        request, user, "POST_CREATE", "POST", post["_id"], "User created a post",
        {"has_link_preview": link_preview is not None}
    )
    return {
        "success": True,
        "data": serialize_doc({
            "id": post["_id"],
            "author": {"id": user["_id"], "name": user.get("name"), "email": user.get("email"), "role": user.get("role")},
            "previewlink": post["link_preview"],
            "description": post["text"],
        }),
    }


@router.get("/feed")
async def get_feed(
    feed_type: Optional[str] = Query(None, alias="type", description="daily = last 24 hours"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=50),
    user: dict = Depends(get_current_user)
):
    query = {}
    if feed_type == "daily":
        query["created_at"] = {"$gte": utcnow() - timedelta(hours=24)}
    return _paged_posts(query, page, limit)


@router.get("/user/{user_id}")
async def get_user_posts(
    user_id: str,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=50),
    user: dict = Depends(get_current_user)
):
    return _paged_posts({"author": parse_object_id(user_id, "userId")}, page, limit)


@router.put("/{post_id}")
async def update_post(post_id: str, body: PostCreate, request: Request, user: dict = Depends(authors_only)):
    post = _get_post_or_404(post_id)
    _assert_author(post, user)

    changes = body.model_dump(exclude_unset=True)
    updates = {}
    if "text" in changes:
        updates["text"] = body.text or None
    if "link_preview" in changes:
        updates["link_preview"] = _clean_link_preview(body.link_preview)

    merged = {**post, **updates}
    if not merged.get("text") and not merged.get("link_preview"):
        raise HTTPException(status_code=400, detail="Post must have text or link_preview.url")

    updates["updated_at"] = utcnow()
    get_collection(COLLECTIONS["posts"]).update_one({"_id": post["_id"]}, {"$set": updates})
    post.update(updates)

    log_activity(request, user, "POST_UPDATE", "POST", post["_id"], "User updated a post", {})
    return {"success": True, "data": serialize_doc(_card(post))}


@router.delete("/{post_id}", response_model=MessageResponse)
async def delete_post(post_id: str, request: Request, user: dict = Depends(authors_only)):
    post = _get_post_or_404(post_id)
    _assert_author(post, user)

    get_collection(COLLECTIONS["posts"]).delete_one({"_id": post["_id"]})
    get_collection(COLLECTIONS["post_comments"]).delete_many({"post": post["_id"]})

    log_activity(request, user, "POST_DELETE", "POST", post["_id"], "User deleted a post", {})
    return MessageResponse(message="Post deleted")


# ============================================================
# LIKES / SAVES
# ============================================================

@router.get("/{post_id}/likes")
async def get_likes(post_id: str, user: dict = Depends(get_current_user)):
    post = _get_post_or_404(post_id)
    users = get_users_by_ids(post.get("likes", []), {"name": 1, "email": 1, "role": 1})
    data = []
    for uid in post.get("likes", []):
        u = users.get(uid)
        if u:
            data.append(serialize_doc({"id": u["_id"], "name": u.get("name"), "email": u.get("email"), "role": u.get("role")}))
    return {"success": True, "count": len(data), "data": data}


@router.post("/{post_id}/like")
async def toggle_like(post_id: str, request: Request, user: dict = Depends(students_only)):
    liked, count = _toggle(request, post_id, user, "likes", "POST_LIKE", "POST_UNLIKE", "liked")
    return {"success": True, "liked": liked, "likes_count": count}


@router.post("/{post_id}/save")
async def toggle_save(post_id: str, request: Request, user: dict = Depends(students_only)):
    saved, count = _toggle(request, post_id, user, "saves", "POST_SAVE", "POST_UNSAVE", "saved")
    return {"success": True, "saved": saved, "saves_count": count}


# ============================================================
# COMMENTS
# ============================================================

@router.post("/{post_id}/comments", status_code=201)
async def add_comment(post_id: str, body: CommentCreate, request: Request, user: dict = Depends(students_only)):
    if not body.body:
        raise HTTPException(status_code=400, detail="Comment body is required")
    post = _get_post_or_404(post_id)

    now = utcnow()
    comment = {"post": post["_id"], "author": user["_id"], "body": body.body, "created_at": now, "updated_at": now}
    comment["_id"] = get_collection(COLLECTIONS["post_comments"]).insert_one(comment).inserted_id
    get_collection(COLLECTIONS["posts"]).update_one({"_id": post["_id"]}, {"$inc": {"comments_count": 1}})

    log_activity(request, user, "POST_COMMENT", "POST", post["_id"], "User commented on a post", {})
    return {"success": True, "data": serialize_doc(comment)}


@router.get("/{post_id}/comments")
async def get_comments(
    post_id: str,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=50),
    user: dict = Depends(get_current_user)
):
    query = {"post": parse_object_id(post_id, "postId")}
    collection = get_collection(COLLECTIONS["post_comments"])
    total = collection.count_documents(query)
    comments = list(collection.find(query).sort([("created_at", -1), ("_id", -1)]).skip((page - 1) * limit).limit(limit))
    populate_users(comments, "author", {"name": 1, "email": 1, "role": 1})

    return {
        "success": True,
        "page": page,
        "pages": total_pages(total, limit),
        "count": len(comments),
        "total": total,
        "data": serialize_docs(comments),
    }


# ============================================================
# SHARES
# ============================================================

@router.post("/{post_id}/share", status_code=201)
async def share_post(post_id: str, request: Request, body: Optional[PostCreate] = None,
                     user: dict = Depends(students_only)):
    """Repost with optional text; the original link preview is reused when none is given."""
    original = _get_post_or_404(post_id, "Original post not found")
    body = body or PostCreate()

    link_preview = _clean_link_preview(body.link_preview) or original.get("link_preview")
    shared = _new_post(user, body.text, link_preview, shared_from=original["_id"])

    get_collection(COLLECTIONS["posts"]).update_one(
        {"_id": original["_id"]},
        {
            "$push": {"shares": {"user": user["_id"], "shared_post": shared["_id"], "created_at": utcnow()}},
            "$inc": {"share_count": 1},
        }
    )

    log_activity(request, user, "POST_SHARE", "POST", original["_id"], "User shared a post", {})
    return {"success": True, "data": serialize_doc(shared)}


@router.get("/{post_id}/shares")
async def get_shares(post_id: str, user: dict = Depends(authors_only)):
    post = _get_post_or_404(post_id)
    _assert_author(post, user)

    shares = [dict(s) for s in post.get("shares", [])]
    populate_users(shares, "user", {"name": 1, "email": 1, "role": 1})
    return {"success": True, "count": len(shares), "data": serialize_docs(shares)}
