"""
Order service: order creation, history queries, and admin status updates.

Orders are created only by checkout_service after the gateway accepted the
charge. Status moves freely between the five OrderStatus values; the ORM
validator on Order.status rejects anything else.
"""

from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from db_models import Order, OrderItem


async def create_order(
    db: AsyncSession,
    *,
    buyer_id: int,
    quote: dict,
    payment: dict,
) -> Order:
    order = Order(
        buyer_id=buyer_id,
        payment=payment,
        amount=quote["total"],
        created_at=datetime.utcnow(),
    )
    for position, item in enumerate(quote["items"]):
        order.items.append(
            OrderItem(
                product_id=item["product_id"],
                position=position,
                slug=item["slug"],
                name=item["name"],
                unit_price=item["unit_price"],
                quantity=item["quantity"],
            )
        )
    db.add(order)
    await db.flush()
    return order


def _orders():
    # Reload buyer and items even for orders already in the session
    return select(Order).execution_options(populate_existing=True)


async def get_order(db: AsyncSession, order_id: int) -> Order | None:
    res = await db.execute(_orders().where(Order.id == order_id))
    return res.scalar_one_or_none()


async def list_buyer_orders(db: AsyncSession, *, buyer_id: int) -> list[Order]:
    res = await db.execute(
        _orders()
        .where(Order.buyer_id == buyer_id)
        .order_by(Order.created_at.desc(), Order.id.desc())
    )
    return list(res.scalars().all())


async def list_all_orders(db: AsyncSession) -> list[Order]:
    res = await db.execute(_orders().order_by(Order.created_at.desc(), Order.id.desc()))
    return list(res.scalars().all())


async def update_status(db: AsyncSession, *, order_id: int, status: str) -> Order | None:
    """
    Set an order's status.

    Returns None when the order does not exist. Writing the current status
    again leaves the order untouched.

    Raises:
        ValueError if `status` is not one of the OrderStatus values
    """
    order = await get_order(db, order_id)
    if order is None:
        return None
    if order.status == status:
        return order
    order.status = status
    order.updated_at = datetime.utcnow()
    await db.flush()
    return order


def serialize_order(order: Order) -> dict:
    buyer = order.buyer
    return {
        "id": order.id,
        "status": order.status,
        "amount": str(order.amount),
        "payment": order.payment,
        "buyer": {"id": buyer.id, "name": buyer.name} if buyer else {"id": order.buyer_id},
        "products": [
            {
                "productId": item.product_id,
                "slug": item.slug,
                "name": item.name,
                "price": str(item.unit_price),
                "quantity": item.quantity,
            }
            for item in order.items
        ],
        "createdAt": order.created_at.isoformat() if order.created_at else None,
        "updatedAt": order.updated_at.isoformat() if order.updated_at else None,
    }
