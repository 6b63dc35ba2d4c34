"""
Student Portal - Main Application

FastAPI backend with:
- MongoDB for every collection (users, jobs, notifications, documents, posts...)
- JWT authentication with role-gated routes
- Job posting -> student notification fan-out
- Approval workflows for documents, tickets and companies

Run: uvicorn student_portal.main:app --reload
"""

import logging
import os

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from student_portal import __version__
from student_portal.api.routes import api_router
from student_portal.core.config import get_settings
from student_portal.db.mongodb import init_mongo_indexes, test_mongo_connection
from student_portal.services.workflow import InvalidTransition

settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Student Portal",
    description="""
    Multi-role backend for students, recruiters and staff.

    ## Features
    - **Authentication**: JWT auth for USER, COMPANY, SUPPORT, ADMIN, SUPER_ADMIN
    - **Jobs**: Admin job postings with qualification-targeted notifications
    - **Documents**: Upload -> super admin approval -> state-wide listing
    - **Tickets & Chat**: Support workflow with role-scoped channels
    - **Social**: Posts, likes, saves, comments, shares, follows
    - **Predictor**: College lookup by rank and reservation category
    - **Payments**: Razorpay webhook tier upgrades
    """,
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    debug=settings.debug,
)

# CORS middleware (allow all for development)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================
# ERROR ENVELOPE: {"success": false, "error": "..."}
# ============================================================

@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    messages = []
    for err in exc.errors():
        location = ".".join(str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path"))
        messages.append(f"{location}: {err.get('msg')}" if location else err.get("msg"))
    return JSONResponse(status_code=400, content={"success": False, "error": "; ".join(messages)})


@app.exception_handler(InvalidTransition)
async def invalid_transition_handler(request: Request, exc: InvalidTransition):
    return JSONResponse(status_code=400, content={"success": False, "error": exc.message})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"success": False, "error": "Internal Server Error"})


# Include API routes
app.include_router(api_router, prefix="/api")

# Serve locally stored uploads
os.makedirs(settings.upload_dir, exist_ok=True)
app.mount(settings.upload_base_url, StaticFiles(directory=settings.upload_dir), name="uploads")


# Startup event
@app.on_event("startup")
async def startup_event():
    """Initialize MongoDB indexes on startup."""
    try:
        init_mongo_indexes()
        logger.info("MongoDB indexes initialized")
    except Exception as e:
        logger.warning("MongoDB index initialization failed: %s", e)


@app.get("/", tags=["Health"])
async def root():
    return {"status": "healthy", "app": "Student Portal", "version": __version__}


@app.get("/health", tags=["Health"])
async def health_check():
    """Detailed health check."""
    return {
        "status": "healthy",
        "mongodb": "connected" if test_mongo_connection() else "disconnected",
    }
