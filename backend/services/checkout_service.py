"""
Checkout service: verify cart, charge, record the order.

    build_quote ──► gateway.sale ──► create_order + commit

Nothing is charged unless the cart matched the catalog, and no order is
written unless the charge succeeded. The three steps are not one
transaction. If the order cannot be persisted after a successful charge, the
charge is voided at the gateway before PersistenceError is raised.
Stock is not decremented (concurrent checkouts may oversell).
"""

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from db_models import Order
from domain.errors import GatewayError, PersistenceError
from models import CartLine
from services import cart_service, order_service
from services.payment_gateway import PaymentGateway

logger = logging.getLogger(__name__)


async def _void_charge(gateway: PaymentGateway, payment: dict) -> bool:
    tx_id = (payment.get("transaction") or {}).get("id")
    if not tx_id:
        logger.error("Cannot void charge: payment record has no transaction id")
        return False
    try:
        await gateway.void(tx_id)
        return True
    except GatewayError as e:
        # The customer stays charged with no order; needs manual follow-up.
        logger.critical(f"Void of tx={tx_id} failed after order persistence failure: {e.details}")
        return False


async def process_payment(
    db: AsyncSession,
    gateway: PaymentGateway,
    *,
    buyer_id: int,
    nonce: str,
    cart: list[CartLine],
) -> Order:
    quote = await cart_service.build_quote(db, cart)

    payment = await gateway.sale(amount=quote["total"], nonce=nonce)

    try:
        order = await order_service.create_order(db, buyer_id=buyer_id, quote=quote, payment=payment)
        await db.commit()
    except SQLAlchemyError as e:
        logger.error(f"Order persistence failed after charge for buyer={buyer_id}: {e}", exc_info=True)
        await db.rollback()
        voided = await _void_charge(gateway, payment)
        raise PersistenceError(
            "Order could not be recorded",
            details={"voided": voided},
        )

    logger.info(
        f"Order {order.id} created for buyer={buyer_id}: "
        f"{len(quote['items'])} line(s), total={quote['total']}"
    )
    return order
