"""
Payment gateway: thin async wrapper around the Braintree SDK.

Keeps low-level SDK usage out of routes and services. One instance is built
at startup (PaymentGateway.from_settings) and handed to request handlers
through deps.get_payment_gateway.

Every SDK call goes through `_call`, which turns both kinds of gateway
failure into GatewayError:
  - the SDK returned a result with is_success == False
  - the SDK raised (network error, auth error, bad configuration, ...)
The gateway's error payload is passed through in GatewayError.details.
Calls are attempted exactly once.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Callable

import braintree

from domain.errors import GatewayError
from services.async_executor import run_blocking

logger = logging.getLogger(__name__)

_ENVIRONMENTS = {
    "sandbox": braintree.Environment.Sandbox,
    "production": braintree.Environment.Production,
}


def _error_payload(result: Any) -> dict:
    """Extract the gateway's error record from an unsuccessful result."""
    payload: dict[str, Any] = {"success": False, "message": getattr(result, "message", None)}
    errors = getattr(result, "errors", None)
    deep_errors = getattr(errors, "deep_errors", None) or []
    payload["errors"] = [
        {
            "code": getattr(e, "code", None),
            "attribute": getattr(e, "attribute", None),
            "message": getattr(e, "message", None),
        }
        for e in deep_errors
    ]
    transaction = getattr(result, "transaction", None)
    if transaction is not None:
        payload["transaction"] = {
            "id": getattr(transaction, "id", None),
            "status": getattr(transaction, "status", None),
            "processorResponseCode": getattr(transaction, "processor_response_code", None),
            "processorResponseText": getattr(transaction, "processor_response_text", None),
        }
    return payload


def _transaction_record(transaction: Any) -> dict:
    amount = getattr(transaction, "amount", None)
    return {
        "id": transaction.id,
        "status": getattr(transaction, "status", None),
        "type": getattr(transaction, "type", None),
        "amount": str(amount) if amount is not None else None,
        "currencyIsoCode": getattr(transaction, "currency_iso_code", None),
    }


class PaymentGateway:
    """Awaitable facade over a braintree.BraintreeGateway (or anything shaped like it)."""

    def __init__(self, sdk: Any):
        self._sdk = sdk

    @classmethod
    def from_settings(cls, settings) -> "PaymentGateway":
        environment = _ENVIRONMENTS.get(settings.braintree_environment.lower())
        if environment is None:
            raise ValueError(f"Unknown BRAINTREE_ENVIRONMENT: {settings.braintree_environment}")
        sdk = braintree.BraintreeGateway(
            braintree.Configuration(
                environment=environment,
                merchant_id=settings.braintree_merchant_id,
                public_key=settings.braintree_public_key,
                private_key=settings.braintree_private_key,
            )
        )
        return cls(sdk)

    async def _call(self, operation: str, func: Callable[..., Any], *args: Any) -> Any:
        try:
            result = await run_blocking(func, *args)
        except Exception as e:
            logger.error(f"Gateway {operation} raised {type(e).__name__}: {e}")
            raise GatewayError(
                f"Payment gateway {operation} failed",
                details={"success": False, "message": str(e), "type": type(e).__name__},
            )

        if getattr(result, "is_success", True) is False:
            payload = _error_payload(result)
            logger.warning(f"Gateway {operation} rejected: {payload.get('message')}")
            raise GatewayError(f"Payment gateway {operation} failed", details=payload)
        return result

    async def generate_client_token(self) -> str:
        """Token the client-side payment form is initialized with."""
        return await self._call("client_token", self._sdk.client_token.generate, {})

    async def sale(self, *, amount: Decimal, nonce: str) -> dict:
        """
        Charge `amount` against the tokenized payment method `nonce`.

        Returns the payment record stored on the order:
            {"success": True, "transaction": {"id": ..., "status": ..., ...}}
        """
        params = {
            "amount": f"{Decimal(amount):.2f}",
            "payment_method_nonce": nonce,
            "options": {"submit_for_settlement": True},
        }
        result = await self._call("sale", self._sdk.transaction.sale, params)
        record = {"success": True, "transaction": _transaction_record(result.transaction)}
        logger.info(f"Gateway sale accepted: tx={record['transaction']['id']} amount={params['amount']}")
        return record

    async def void(self, transaction_id: str) -> dict:
        """Cancel an unsettled transaction."""
        result = await self._call("void", self._sdk.transaction.void, transaction_id)
        logger.info(f"Gateway transaction voided: tx={transaction_id}")
        return {"success": True, "transaction": _transaction_record(result.transaction)}
