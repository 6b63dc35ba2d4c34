"""
Authentication Routes

POST /auth/register - Register a USER or COMPANY account
POST /auth/login - Login (email + password, or phone) and get JWT token
GET /auth/me - Get current user info
"""

from fastapi import APIRouter, HTTPException, Depends, Request

from student_portal.core.auth import hash_password, verify_password, create_access_token, get_current_user
from student_portal.core.config import get_settings
from student_portal.db.mongodb import get_collection, COLLECTIONS
from student_portal.schemas.schemas import AuthResponse, LoginRequest, RegisterRequest
from student_portal.services.activity_service import log_activity
from student_portal.services.mongo_service import serialize_doc, user_summary
from student_portal.services.user_service import get_user_service

settings = get_settings()

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/register", response_model=AuthResponse, status_code=201)
async def register(body: RegisterRequest, request: Request):
    """
    Register a new account and return a token.

    COMPANY accounts also get a pending company profile. Students (USER) that
    send email + qualification get a Student record for job alerts.
    """
    service = get_user_service()

    if body.email and service.email_taken(body.email):
        raise HTTPException(status_code=400, detail="Email already registered")
    if service.phone_taken(body.phone):
        raise HTTPException(status_code=400, detail="Phone already registered")

    data = body.model_dump()
    if body.password:
        data["password"] = hash_password(body.password)
    user = service.create_user(data)

    if user["role"] == "COMPANY":
        service.create_company_profile(user, body.company_name)

    if user["role"] == "USER" and user.get("email"):
        if body.qualification:
            service.create_student_record(user, body.qualification)
        service.upsert_user_profile(user)

    token = create_access_token(data={"sub": str(user["_id"]), "role": user["role"]})

    log_activity(
        request, user, "REGISTER", "AUTH", user["_id"],
        f"User registered: {user['name']} ({user['role']})",
        {"email": user.get("email"), "phone": user["phone"]}
    )

    return AuthResponse(token=token, user=user_summary(user))


@router.post("/login", response_model=AuthResponse)
async def login(body: LoginRequest, request: Request):
    """
    Login and receive JWT access token.

    Include token in requests: Authorization: Bearer <token>
    """
    users = get_collection(COLLECTIONS["users"])

    if body.email and body.password:
        user = users.find_one({"email": body.email})
        if not user or not verify_password(body.password, user.get("password")):
            raise HTTPException(status_code=401, detail="Invalid email or password")
        method = "email"
    elif body.phone:
        if not settings.allow_phone_login:
            raise HTTPException(status_code=400, detail="Phone login is disabled")
        user = users.find_one({"phone": body.phone.strip()})
        if not user:
            raise HTTPException(status_code=401, detail="Invalid phone number")
        # accounts with a password (staff, companies) must use it
        if user.get("password") or user.get("role") != "USER":
            raise HTTPException(status_code=401, detail="Use email and password to log in")
        method = "phone"
    else:
        raise HTTPException(status_code=400, detail="Provide email+password or phone")

    token = create_access_token(data={"sub": str(user["_id"]), "role": user["role"]})

    log_activity(
        request, user, "LOGIN", "AUTH", user["_id"],
        f"User logged in: {user['name']} ({user['role']})",
        {"email": user.get("email"), "phone": user.get("phone"), "login_method": method}
    )

    return AuthResponse(token=token, user=user_summary(user))


@router.get("/me")
async def get_me(user: dict = Depends(get_current_user)):
    """Get current user info."""
    return {"success": True, "user": serialize_doc(user)}
