"""
Authentication Utility - JWT, password hashing and role gates.

Provides:
- Password hashing with bcrypt
- JWT token creation/verification
- FastAPI dependencies for protected routes (per-role gates)
"""

from datetime import datetime, timedelta
from typing import Optional
from bson import ObjectId
from bson.errors import InvalidId
from jose import JWTError, jwt
from passlib.context import CryptContext
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from student_portal.core.config import get_settings
from student_portal.db.mongodb import get_collection, COLLECTIONS

settings = get_settings()

# Password hashing
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# Bearer token extractor; missing headers are reported as 401 below
bearer_scheme = HTTPBearer(auto_error=False)


def hash_password(password: str) -> str:
    """Hash password with bcrypt."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify password against hash."""
    if not hashed_password:
        return False
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create JWT access token."""
    to_encode = data.copy()
    expire = datetime.utcnow() + (expires_delta or timedelta(minutes=settings.jwt_expire_minutes))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> Optional[dict]:
    """Decode and verify JWT token."""
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)
) -> dict:
    """
    FastAPI dependency - Get current authenticated user document.

    Usage:
        @router.get("/protected")
        async def route(user: dict = Depends(get_current_user)):
            return user
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Not authorized to access this route",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if credentials is None:
        raise credentials_exception

    payload = decode_token(credentials.credentials)
    if not payload:
        raise credentials_exception

    try:
        user_id = ObjectId(payload.get("sub"))
    except (InvalidId, TypeError):
        raise credentials_exception

    user = get_collection(COLLECTIONS["users"]).find_one({"_id": user_id}, {"password": 0})
    if not user:
        raise credentials_exception

    return user


def require_roles(*roles: str):
    """
    Dependency factory - allow only the given roles.

    Usage:
        admin: dict = Depends(require_roles("ADMIN", "SUPER_ADMIN"))
    """
    async def role_checker(user: dict = Depends(get_current_user)) -> dict:
        if user.get("role") not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Role {user.get('role')} is not authorized"
            )
        return user

    return role_checker


async def get_current_student(user: dict = Depends(require_roles("USER"))) -> dict:
    """Dependency - Require USER role and attach the Student record (matched by email)."""
    student = None
    if user.get("email"):
        student = get_collection(COLLECTIONS["students"]).find_one({"email": user["email"]})

    if not student:
        raise HTTPException(status_code=404, detail="Student profile not found")

    user["student"] = student
    return user


get_current_admin = require_roles("ADMIN", "SUPER_ADMIN")
get_current_super_admin = require_roles("SUPER_ADMIN")
get_current_support = require_roles("SUPPORT")
get_current_company = require_roles("COMPANY")
