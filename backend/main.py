"""
Storefront Backend: FastAPI Application

Catalog browsing, Braintree checkout with server-side price verification,
account auth, and admin order management.
"""
import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi import HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import settings
from domain.responses import error_body
from routes import auth, category, health, orders, payment, product

# ── Logging ─────────────────────────────────────────────────────────

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


# ── Lifespan ────────────────────────────────────────────────────────

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: create DB tables, build the payment gateway. Shutdown: stop the thread pool."""
    # Ensure data/ directory exists for SQLite
    os.makedirs("data", exist_ok=True)

    settings.validate_production_settings()

    from database import init_db
    await init_db()
    logger.info("Database initialized")

    app.state.payment_gateway = None
    if settings.braintree_configured:
        try:
            from services.payment_gateway import PaymentGateway
            app.state.payment_gateway = PaymentGateway.from_settings(settings)
            logger.info(f"Payment gateway ready ({settings.braintree_environment})")
        except ValueError as e:
            logger.warning(f"Payment gateway not available (non-fatal): {e}")
    else:
        logger.warning("Payment gateway not configured; checkout endpoints will return 502")

    yield  # app runs here

    from services.async_executor import shutdown_executor
    shutdown_executor()

    logger.info("Shutting down")


# ── App Factory ─────────────────────────────────────────────────────

app = FastAPI(
    title="Storefront API",
    description="Catalog, checkout and order management for the storefront",
    version=settings.app_version,
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ── Routes ──────────────────────────────────────────────────────────

app.include_router(health.router)
app.include_router(auth.router)
app.include_router(category.router)
app.include_router(product.router)
app.include_router(payment.router)
app.include_router(orders.router)

# ── Exception Handlers ──────────────────────────────────────────────


@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """
    Catch-all for unhandled exceptions.

    Never returns raw exception details to clients; the full traceback is
    logged server-side.
    """
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content=error_body("internal_server_error", "Internal server error"),
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request, exc: RequestValidationError):
    """Malformed or missing body/path fields → 400 in the common envelope."""
    return JSONResponse(
        status_code=400,
        content=error_body(
            "validation_error",
            "Invalid request",
            {"errors": jsonable_encoder(exc.errors())},
        ),
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request, exc: HTTPException):
    """
    Standardize HTTPException responses for frontend consumers.

    Keeps the HTTP status code, but wraps the payload.
    """
    headers = getattr(exc, "headers", None)

    # DomainError carries a stable code plus structured details
    if hasattr(exc, "message") and hasattr(exc, "details"):
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(getattr(exc, "code", "domain_error"), exc.message, exc.details),
            headers=headers,
        )

    detail = exc.detail
    message = detail if isinstance(detail, str) else "Request failed"
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body("http_error", message, detail if not isinstance(detail, str) else None),
        headers=headers,
    )


# ── Entrypoint ──────────────────────────────────────────────────────

if __name__ == "__main__":
    import uvicorn
    port = int(os.environ.get("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port, log_level="info")
