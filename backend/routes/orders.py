"""
Order endpoints: buyer history and admin status management.
"""

import logging

from fastapi import APIRouter, Depends, Path
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from db_models import User
from deps import require_admin, require_signin
from domain.responses import error_body
from models import OrderStatusRequest
from services import order_service

logger = logging.getLogger(__name__)
router = APIRouter(tags=["orders"])


@router.get("/orders")
async def my_orders(
    user: User = Depends(require_signin),
    db: AsyncSession = Depends(get_db),
):
    orders = await order_service.list_buyer_orders(db, buyer_id=user.id)
    return [order_service.serialize_order(o) for o in orders]


@router.get("/orders/all")
async def all_orders(
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    orders = await order_service.list_all_orders(db)
    return [order_service.serialize_order(o) for o in orders]


@router.put("/order/{order_id}/status")
async def update_order_status(
    request: OrderStatusRequest,
    order_id: int = Path(..., ge=1),
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Full order JSON after the update, or null for an unknown id."""
    try:
        order = await order_service.update_status(db, order_id=order_id, status=request.status)
        if order is None:
            return None
        await db.commit()
    except (ValueError, SQLAlchemyError) as e:
        await db.rollback()
        logger.error(f"Status update failed for order {order_id}: {e}")
        return JSONResponse(
            status_code=500,
            content=error_body("order_update_failed", "Error while updating order", {"message": str(e)}),
        )
    return order_service.serialize_order(order)
