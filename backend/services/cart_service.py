"""
Cart service: verifies a client-submitted cart against the catalog.

The client sends product references with the price it believes it is paying.
Only the catalog price is trusted: a cart is accepted only if every line
resolves to a product in stock at exactly the claimed price. The quote
total is computed from catalog prices.
"""

import logging
from decimal import Decimal

from sqlalchemy import or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from db_models import Product
from domain.errors import (
    EmptyCartError,
    ItemNotFoundError,
    PersistenceError,
    PriceMismatchError,
    UnavailableItemError,
)
from models import CartLine

logger = logging.getLogger(__name__)


async def _fetch_products(db: AsyncSession, lines: list[CartLine]) -> list[Product]:
    """One batch lookup for every id and slug referenced by the cart."""
    ids = {l.product_id for l in lines if l.product_id is not None}
    slugs = {l.slug for l in lines if l.product_id is None}
    conditions = []
    if ids:
        conditions.append(Product.id.in_(ids))
    if slugs:
        conditions.append(Product.slug.in_(slugs))
    try:
        res = await db.execute(select(Product).where(or_(*conditions)))
    except SQLAlchemyError as e:
        logger.error(f"Catalog lookup failed: {e}")
        raise PersistenceError("Catalog lookup failed", details={"message": str(e)})
    return list(res.scalars().all())


def _resolve(line: CartLine, by_id: dict, by_slug: dict) -> Product | None:
    if line.product_id is not None:
        return by_id.get(line.product_id)
    return by_slug.get(line.slug)


async def build_quote(db: AsyncSession, lines: list[CartLine]) -> dict:
    """
    Verify `lines` and price them from the catalog.

    Raises (all CatalogMismatchError, HTTP 400):
        EmptyCartError        no lines
        ItemNotFoundError     nothing in the cart exists in the catalog
        UnavailableItemError  some lines do not resolve, repeat a product, or
                              exceed stock on hand
        PriceMismatchError    a claimed price differs from the catalog price

    Returns:
        {"items": [{product_id, slug, name, quantity, unit_price}], "total": Decimal}
    """
    if not lines:
        raise EmptyCartError()

    products = await _fetch_products(db, lines)
    if not products:
        raise ItemNotFoundError([l.ref for l in lines])

    by_id = {p.id: p for p in products}
    by_slug = {p.slug: p for p in products}

    resolved: list[tuple[CartLine, Product]] = []
    missing: list[str] = []
    for line in lines:
        product = _resolve(line, by_id, by_slug)
        if product is None:
            missing.append(line.ref)
        else:
            resolved.append((line, product))
    if missing:
        raise UnavailableItemError(missing)

    # Each line must name a distinct product
    seen: set[int] = set()
    repeated: list[str] = []
    for line, product in resolved:
        if product.id in seen:
            repeated.append(line.ref)
        seen.add(product.id)
    if repeated:
        raise UnavailableItemError(repeated)

    out_of_stock = [
        line.ref
        for line, product in resolved
        if line.quantity > (product.quantity or 0)
    ]
    if out_of_stock:
        raise UnavailableItemError(out_of_stock)

    mismatches = [
        {"item": line.ref, "claimed": str(line.price), "price": str(product.price)}
        for line, product in resolved
        if Decimal(line.price) != Decimal(product.price)
    ]
    if mismatches:
        logger.warning(f"Cart price mismatch on {len(mismatches)} line(s): {mismatches}")
        raise PriceMismatchError(mismatches)

    total = Decimal("0")
    items: list[dict] = []
    for line, product in resolved:
        unit_price = Decimal(product.price)
        total += unit_price * line.quantity
        items.append(
            {
                "product_id": product.id,
                "slug": product.slug,
                "name": product.name,
                "quantity": line.quantity,
                "unit_price": unit_price,
            }
        )

    return {"items": items, "total": total}
