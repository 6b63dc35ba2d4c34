"""
API Routes - Combines all route modules into single router.
"""

from fastapi import APIRouter

from student_portal.api.routes.auth_routes import router as auth_router
from student_portal.api.routes.admin_job_routes import router as admin_job_router
from student_portal.api.routes.student_routes import router as student_router
from student_portal.api.routes.doc_routes import router as doc_router
from student_portal.api.routes.ticket_routes import router as ticket_router
from student_portal.api.routes.chat_routes import router as chat_router
from student_portal.api.routes.company_routes import router as company_router
from student_portal.api.routes.predict_routes import router as predict_router
from student_portal.api.routes.payment_routes import router as payment_router
from student_portal.api.routes.post_routes import router as post_router
from student_portal.api.routes.follow_routes import router as follow_router
from student_portal.api.routes.user_routes import router as user_router
from student_portal.api.routes.search_routes import router as search_router
from student_portal.api.routes.profile_routes import router as profile_router
from student_portal.api.routes.activity_routes import router as activity_router

# Main API router
api_router = APIRouter()

# Include all sub-routers
api_router.include_router(auth_router)
api_router.include_router(admin_job_router)
api_router.include_router(student_router)
api_router.include_router(doc_router)
api_router.include_router(ticket_router)
api_router.include_router(chat_router)
api_router.include_router(company_router)
api_router.include_router(predict_router)
api_router.include_router(payment_router)
api_router.include_router(post_router)
api_router.include_router(follow_router)
api_router.include_router(user_router)
api_router.include_router(search_router)
api_router.include_router(profile_router)
api_router.include_router(activity_router)
