"""
Product service: catalog CRUD and shopper-facing queries.

Listings never load photo bytes; the photo is served on its own endpoint.
"""

import logging
from datetime import datetime
from decimal import Decimal

from sqlalchemy import func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import defer

from config import settings
from db_models import Category, OrderItem, Product
from domain.constants import PRODUCT_LIST_LIMIT, PRODUCT_PAGE_SIZE, RELATED_PRODUCTS_LIMIT
from domain.errors import ConflictError, NotFoundError
from utils.validators import slugify, validate_photo

logger = logging.getLogger(__name__)


def _listing():
    return (
        select(Product)
        .options(defer(Product.photo_data))
        .execution_options(populate_existing=True)
    )


def serialize_product(product: Product) -> dict:
    category = product.category
    return {
        "id": product.id,
        "name": product.name,
        "slug": product.slug,
        "description": product.description,
        "price": str(product.price),
        "quantity": product.quantity,
        "shipping": product.shipping,
        "category": (
            {"id": category.id, "name": category.name, "slug": category.slug}
            if category else {"id": product.category_id}
        ),
        "hasPhoto": product.photo_content_type is not None,
        "createdAt": product.created_at.isoformat() if product.created_at else None,
        "updatedAt": product.updated_at.isoformat() if product.updated_at else None,
    }


async def _require_category(db: AsyncSession, category_id: int) -> Category:
    category = await db.get(Category, category_id)
    if not category:
        raise NotFoundError("Category", str(category_id))
    return category


async def _ensure_slug_free(db: AsyncSession, slug: str, product_id: int | None = None) -> None:
    res = await db.execute(select(Product.id).where(Product.slug == slug))
    owner = res.scalar_one_or_none()
    if owner is not None and owner != product_id:
        raise ConflictError(f"Product slug already in use: {slug}")


async def create_product(
    db: AsyncSession,
    *,
    name: str,
    description: str,
    price: Decimal,
    category_id: int,
    quantity: int,
    shipping: bool = False,
    photo: str | None = None,
    photo_content_type: str | None = None,
) -> Product:
    await _require_category(db, category_id)
    slug = slugify(name)
    await _ensure_slug_free(db, slug)

    product = Product(
        name=name.strip(),
        slug=slug,
        description=description,
        price=price,
        category_id=category_id,
        quantity=quantity,
        shipping=shipping,
    )
    if photo:
        product.photo_data = validate_photo(photo, settings.photo_max_bytes)
        product.photo_content_type = photo_content_type
    db.add(product)
    await db.flush()
    await db.refresh(product, attribute_names=["category"])
    logger.info(f"Product created: {product.slug} price={product.price}")
    return product


async def update_product(
    db: AsyncSession,
    *,
    product_id: int,
    name: str,
    description: str,
    price: Decimal,
    category_id: int,
    quantity: int,
    shipping: bool = False,
    photo: str | None = None,
    photo_content_type: str | None = None,
) -> Product:
    """Replace a product's fields. The existing photo is kept unless a new one is sent."""
    product = await db.get(Product, product_id)
    if not product:
        raise NotFoundError("Product", str(product_id))
    await _require_category(db, category_id)
    slug = slugify(name)
    await _ensure_slug_free(db, slug, product_id=product.id)

    product.name = name.strip()
    product.slug = slug
    product.description = description
    product.price = price
    product.category_id = category_id
    product.quantity = quantity
    product.shipping = shipping
    if photo:
        product.photo_data = validate_photo(photo, settings.photo_max_bytes)
        product.photo_content_type = photo_content_type
    product.updated_at = datetime.utcnow()
    await db.flush()
    await db.refresh(product, attribute_names=["category"])
    return product


async def delete_product(db: AsyncSession, *, product_id: int) -> None:
    product = await db.get(Product, product_id)
    if not product:
        raise NotFoundError("Product", str(product_id))
    # Order history keeps its snapshot; only the catalog link goes
    await db.execute(
        update(OrderItem).where(OrderItem.product_id == product_id).values(product_id=None)
    )
    await db.delete(product)
    await db.flush()
    logger.info(f"Product deleted: {product.slug}")


async def list_products(db: AsyncSession, limit: int = PRODUCT_LIST_LIMIT) -> list[Product]:
    res = await db.execute(_listing().order_by(Product.created_at.desc(), Product.id.desc()).limit(limit))
    return list(res.scalars().all())


async def get_by_slug(db: AsyncSession, slug: str) -> Product:
    res = await db.execute(_listing().where(Product.slug == slug))
    product = res.scalar_one_or_none()
    if not product:
        raise NotFoundError("Product", slug)
    return product


async def get_photo(db: AsyncSession, product_id: int) -> tuple[bytes, str]:
    res = await db.execute(
        select(Product.photo_data, Product.photo_content_type).where(Product.id == product_id)
    )
    row = res.one_or_none()
    if row is None or row.photo_data is None:
        raise NotFoundError("Product photo", str(product_id))
    return row.photo_data, row.photo_content_type or "application/octet-stream"


async def filter_products(
    db: AsyncSession,
    *,
    category_ids: list[int],
    price_range: list[Decimal],
) -> list[Product]:
    """Products in any of `category_ids` (all if empty) within [min, max] (inclusive)."""
    query = _listing()
    if category_ids:
        query = query.where(Product.category_id.in_(category_ids))
    if price_range:
        low, high = price_range
        query = query.where(Product.price >= low, Product.price <= high)
    res = await db.execute(query.order_by(Product.created_at.desc(), Product.id.desc()))
    return list(res.scalars().all())


async def count_products(db: AsyncSession) -> int:
    return await db.scalar(select(func.count(Product.id))) or 0


async def list_page(db: AsyncSession, *, page: int, per_page: int = PRODUCT_PAGE_SIZE) -> list[Product]:
    res = await db.execute(
        _listing()
        .order_by(Product.created_at.desc(), Product.id.desc())
        .offset((page - 1) * per_page)
        .limit(per_page)
    )
    return list(res.scalars().all())


async def search(db: AsyncSession, keyword: str) -> list[Product]:
    pattern = f"%{keyword.strip()}%"
    res = await db.execute(
        _listing()
        .where(or_(Product.name.ilike(pattern), Product.description.ilike(pattern)))
        .order_by(Product.created_at.desc(), Product.id.desc())
    )
    return list(res.scalars().all())


async def related(db: AsyncSession, *, product_id: int, category_id: int) -> list[Product]:
    res = await db.execute(
        _listing()
        .where(Product.category_id == category_id, Product.id != product_id)
        .order_by(Product.created_at.desc(), Product.id.desc())
        .limit(RELATED_PRODUCTS_LIMIT)
    )
    return list(res.scalars().all())


async def list_by_category_slug(db: AsyncSession, slug: str) -> tuple[Category, list[Product]]:
    res = await db.execute(select(Category).where(Category.slug == slug))
    category = res.scalar_one_or_none()
    if not category:
        raise NotFoundError("Category", slug)
    products = await db.execute(
        _listing()
        .where(Product.category_id == category.id)
        .order_by(Product.created_at.desc(), Product.id.desc())
    )
    return category, list(products.scalars().all())
