"""
Checkout endpoints: gateway client token and payment processing.

Flow:
  1) GET  /payment/token    -> {clientToken} for the client-side payment form
  2) Client tokenizes the card and gets a single-use nonce
  3) POST /payment/process  -> verify cart, charge nonce, record order
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from db_models import User
from deps import get_payment_gateway, require_signin
from middleware.rate_limit import rate_limit
from models import ClientTokenResponse, PaymentRequest
from services import checkout_service
from services.payment_gateway import PaymentGateway

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/payment", tags=["payment"])


@router.get("/token", response_model=ClientTokenResponse, response_model_by_alias=True)
async def client_token(gateway: PaymentGateway = Depends(get_payment_gateway)):
    token = await gateway.generate_client_token()
    return ClientTokenResponse(client_token=token)


@router.post("/process")
async def process_payment(
    request: PaymentRequest,
    user: User = Depends(require_signin),
    db: AsyncSession = Depends(get_db),
    gateway: PaymentGateway = Depends(get_payment_gateway),
    _rate=Depends(rate_limit(max_requests=10, window_seconds=60)),
):
    await checkout_service.process_payment(
        db,
        gateway,
        buyer_id=user.id,
        nonce=request.nonce,
        cart=request.cart,
    )
    return {"ok": True}
