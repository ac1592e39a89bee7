"""
Auth service: accounts, bcrypt credentials, password reset.
"""

import logging

import bcrypt
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from db_models import User
from domain.constants import BCRYPT_ROUNDS, PASSWORD_MIN_LENGTH
from domain.enums import UserRole
from domain.errors import NotFoundError, UnauthorizedError, ValidationError
from services.async_executor import run_blocking

logger = logging.getLogger(__name__)


def _secret(password: str) -> bytes:
    # bcrypt only reads the first 72 bytes
    return password.encode("utf-8")[:72]


async def hash_password(password: str) -> str:
    hashed = await run_blocking(bcrypt.hashpw, _secret(password), bcrypt.gensalt(rounds=BCRYPT_ROUNDS))
    return hashed.decode("utf-8")


async def verify_password(password: str, password_hash: str) -> bool:
    try:
        return await run_blocking(bcrypt.checkpw, _secret(password), password_hash.encode("utf-8"))
    except ValueError:
        # Stored hash is not a bcrypt hash
        return False


def _normalize_email(email: str) -> str:
    return email.strip().lower()


def serialize_user(user: User) -> dict:
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "phone": user.phone,
        "address": user.address,
        "role": user.role,
    }


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    res = await db.execute(select(User).where(func.lower(User.email) == _normalize_email(email)))
    return res.scalar_one_or_none()


async def register(
    db: AsyncSession,
    *,
    name: str,
    email: str,
    password: str,
    phone: str,
    address: str,
    answer: str,
) -> User | None:
    """Create a shopper account. Returns None if the email is already registered."""
    if await get_user_by_email(db, email):
        return None
    user = User(
        name=name.strip(),
        email=_normalize_email(email),
        password_hash=await hash_password(password),
        phone=phone,
        address=address,
        answer=answer,
    )
    db.add(user)
    await db.flush()
    logger.info(f"User registered: id={user.id}")
    return user


async def authenticate(db: AsyncSession, *, email: str, password: str) -> User:
    user = await get_user_by_email(db, email)
    if not user or not await verify_password(password, user.password_hash):
        raise UnauthorizedError("Invalid email or password.")
    return user


async def reset_password(db: AsyncSession, *, email: str, answer: str, new_password: str) -> User:
    user = await get_user_by_email(db, email)
    if not user or user.answer != answer:
        raise NotFoundError("User", "wrong email or answer")
    user.password_hash = await hash_password(new_password)
    await db.flush()
    logger.info(f"Password reset for user id={user.id}")
    return user


async def update_profile(
    db: AsyncSession,
    user: User,
    *,
    name: str | None = None,
    password: str | None = None,
    phone: str | None = None,
    address: str | None = None,
) -> User:
    """Update only the provided fields."""
    if password is not None:
        if len(password) < PASSWORD_MIN_LENGTH:
            raise ValidationError(
                f"Password must be at least {PASSWORD_MIN_LENGTH} characters long",
                field="password",
            )
        user.password_hash = await hash_password(password)
    if name is not None:
        user.name = name.strip()
    if phone is not None:
        user.phone = phone
    if address is not None:
        user.address = address
    await db.flush()
    return user


async def promote_to_admin(db: AsyncSession, *, email: str) -> User:
    user = await get_user_by_email(db, email)
    if not user:
        raise NotFoundError("User", email)
    user.role = UserRole.ADMIN.value
    await db.flush()
    logger.info(f"User id={user.id} promoted to admin")
    return user
