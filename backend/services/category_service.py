"""
Category service: admin-managed catalog categories.
"""

import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from db_models import Category, Product
from domain.errors import ConflictError, NotFoundError
from utils.validators import slugify

logger = logging.getLogger(__name__)


def serialize_category(category: Category) -> dict:
    return {"id": category.id, "name": category.name, "slug": category.slug}


async def get_by_name(db: AsyncSession, name: str) -> Category | None:
    res = await db.execute(select(Category).where(func.lower(Category.name) == name.strip().lower()))
    return res.scalar_one_or_none()


async def get_by_slug(db: AsyncSession, slug: str) -> Category | None:
    res = await db.execute(select(Category).where(Category.slug == slug))
    return res.scalar_one_or_none()


async def create_category(db: AsyncSession, *, name: str) -> Category | None:
    """Returns None if a category with this name already exists."""
    name = name.strip()
    if await get_by_name(db, name):
        return None
    slug = slugify(name)
    if await get_by_slug(db, slug):
        raise ConflictError(f"Category slug already in use: {slug}")
    category = Category(name=name, slug=slug)
    db.add(category)
    await db.flush()
    logger.info(f"Category created: {category.slug}")
    return category


async def update_category(db: AsyncSession, *, category_id: int, name: str) -> Category:
    category = await db.get(Category, category_id)
    if not category:
        raise NotFoundError("Category", str(category_id))
    name = name.strip()
    existing = await get_by_name(db, name)
    if existing and existing.id != category.id:
        raise ConflictError(f"Category already exists: {name}")
    slug = slugify(name)
    clash = await get_by_slug(db, slug)
    if clash and clash.id != category.id:
        raise ConflictError(f"Category slug already in use: {slug}")
    category.name = name
    category.slug = slug
    await db.flush()
    return category


async def list_categories(db: AsyncSession) -> list[Category]:
    res = await db.execute(select(Category).order_by(Category.name))
    return list(res.scalars().all())


async def delete_category(db: AsyncSession, *, category_id: int) -> None:
    category = await db.get(Category, category_id)
    if not category:
        raise NotFoundError("Category", str(category_id))
    in_use = await db.scalar(select(func.count(Product.id)).where(Product.category_id == category_id))
    if in_use:
        raise ConflictError(
            "Category still has products",
            details={"products": in_use},
        )
    await db.delete(category)
    await db.flush()
    logger.info(f"Category deleted: {category.slug}")
