"""
Auth endpoints: registration, login, password reset, profile.

Flow:
  1) POST /auth/register  -> account with bcrypt-hashed password
  2) POST /auth/login     -> {user, token}; send token as Authorization header
  3) GET  /auth/user-auth | /auth/admin-auth -> {ok: true} for route guards
"""

import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from db_models import User
from deps import require_admin, require_signin
from middleware.auth import issue_access_token
from middleware.rate_limit import rate_limit
from models import ForgotPasswordRequest, LoginRequest, ProfileUpdateRequest, RegisterRequest
from services import auth_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    request: RegisterRequest,
    db: AsyncSession = Depends(get_db),
    _rate=Depends(rate_limit(max_requests=10, window_seconds=60)),
):
    user = await auth_service.register(
        db,
        name=request.name,
        email=request.email,
        password=request.password,
        phone=request.phone,
        address=request.address,
        answer=request.answer,
    )
    if user is None:
        return JSONResponse(
            status_code=status.HTTP_200_OK,
            content={"success": False, "message": "Already registered, please login"},
        )
    await db.commit()
    return {
        "success": True,
        "message": "User registered successfully",
        "user": auth_service.serialize_user(user),
    }


@router.post("/login")
async def login(
    request: LoginRequest,
    db: AsyncSession = Depends(get_db),
    _rate=Depends(rate_limit(max_requests=20, window_seconds=60)),
):
    user = await auth_service.authenticate(db, email=request.email, password=request.password)
    token = issue_access_token(user_id=user.id, role=user.role)
    logger.info(f"Login: user id={user.id} role={user.role}")
    return {
        "success": True,
        "message": "Login successful",
        "user": auth_service.serialize_user(user),
        "token": token,
    }


@router.post("/forgot-password")
async def forgot_password(
    request: ForgotPasswordRequest,
    db: AsyncSession = Depends(get_db),
    _rate=Depends(rate_limit(max_requests=5, window_seconds=60)),
):
    await auth_service.reset_password(
        db,
        email=request.email,
        answer=request.answer,
        new_password=request.new_password,
    )
    await db.commit()
    return {"success": True, "message": "Password reset successfully"}


@router.get("/test")
async def admin_test(_admin: User = Depends(require_admin)):
    return {"success": True, "message": "Protected route"}


@router.get("/user-auth")
async def user_auth(_user: User = Depends(require_signin)):
    return {"ok": True}


@router.get("/admin-auth")
async def admin_auth(_admin: User = Depends(require_admin)):
    return {"ok": True}


@router.put("/profile")
async def update_profile(
    request: ProfileUpdateRequest,
    user: User = Depends(require_signin),
    db: AsyncSession = Depends(get_db),
):
    user = await auth_service.update_profile(
        db,
        user,
        name=request.name,
        password=request.password,
        phone=request.phone,
        address=request.address,
    )
    await db.commit()
    return {
        "success": True,
        "message": "Profile updated successfully",
        "updatedUser": auth_service.serialize_user(user),
    }
