"""
Shared FastAPI dependencies.

Routers import from here: DB session, auth guards, the payment gateway,
pagination.
"""

from __future__ import annotations

from fastapi import Depends, Path, Request
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from db_models import User
from domain.errors import GatewayError, PermissionDeniedError, UnauthorizedError
from middleware.auth import require_token_subject
from services.payment_gateway import PaymentGateway


async def require_signin(
    user_id: int = Depends(require_token_subject),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Require a valid access token for an existing user."""
    user = await db.get(User, user_id)
    if not user:
        raise UnauthorizedError("Account for this token no longer exists.")
    return user


async def require_admin(user: User = Depends(require_signin)) -> User:
    """Require that the signed-in user has the admin role."""
    if not user.is_admin:
        raise PermissionDeniedError("Admin role required for this endpoint.")
    return user


def get_payment_gateway(request: Request) -> PaymentGateway:
    """
    The gateway built at startup (see main.lifespan).

    Tests override this dependency with a fake.
    """
    gateway = getattr(request.app.state, "payment_gateway", None)
    if gateway is None:
        raise GatewayError("Payment gateway not configured", details={"message": "gateway unavailable"})
    return gateway


def page_param(page: int = Path(..., ge=1, le=10_000)) -> int:
    return page
