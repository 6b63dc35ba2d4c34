"""
College Predictor Routes

POST /predict - Colleges whose category cutoff admits the given rank
"""

from fastapi import APIRouter, Depends, Request

from student_portal.core.auth import get_current_user
from student_portal.db.mongodb import get_collection, COLLECTIONS
from student_portal.schemas.schemas import PredictRequest
from student_portal.services.activity_service import log_activity
from student_portal.services.mongo_service import serialize_docs

router = APIRouter(prefix="/predict", tags=["College Predictor"])

MAX_RESULTS = 100


@router.post("")
async def predict_colleges(body: PredictRequest, request: Request, user: dict = Depends(get_current_user)):
    """
    A rank qualifies for a college when rank <= cutoff for the category.
    Results are ordered by that cutoff, tightest first.
    """
    cutoff_key = f"cutoff_ranks.{body.category}"
    query = {"state": body.state, cutoff_key: {"$gte": body.rank}}
    if body.district:
        query["district"] = body.district

    colleges = list(
        get_collection(COLLECTIONS["colleges"])
        .find(query, {"name": 1, "district": 1, "cutoff_ranks": 1, "reviews": 1})
        .sort(cutoff_key, 1)
        .limit(MAX_RESULTS)
    )

    log_activity(
        request, user, "COLLEGE_PREDICT", "PREDICTOR", None,
        f"{user.get('name')} predicted colleges",
        {"rank": body.rank, "category": body.category, "state": body.state,
         "district": body.district, "result_count": len(colleges)}
    )
    return {"success": True, "count": len(colleges), "data": serialize_docs(colleges)}
