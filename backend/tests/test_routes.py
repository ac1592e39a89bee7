"""
Tests for app-level behaviour: health, error envelope, settings checks.
"""
import pytest

from config import Settings


class TestHealth:

    @pytest.mark.api
    async def test_health(self, client):
        resp = await client.get("/health")
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "healthy"
        assert body["database"] is True
        assert body["version"]


class TestErrorEnvelope:

    @pytest.mark.api
    async def test_domain_error_shape(self, client):
        resp = await client.get("/product/get-product/does-not-exist")
        assert resp.status_code == 404
        assert resp.json() == {
            "success": False,
            "error": {
                "code": "not_found",
                "message": "Product not found: does-not-exist",
                "details": {},
            },
        }

    @pytest.mark.api
    async def test_gateway_not_configured(self, db_session):
        from httpx import ASGITransport, AsyncClient

        from database import get_db
        from main import app

        async def override_get_db():
            yield db_session

        app.dependency_overrides[get_db] = override_get_db
        app.state.payment_gateway = None
        try:
            async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
                resp = await ac.get("/payment/token")
        finally:
            app.dependency_overrides.clear()
        assert resp.status_code == 502
        assert resp.json()["error"]["code"] == "gateway_failure"


class TestProductionSettings:

    @pytest.mark.unit
    def test_wildcard_cors_rejected(self):
        s = Settings(environment="production", cors_origins="*", jwt_secret="x",
                     braintree_environment="production", braintree_merchant_id="m",
                     braintree_public_key="p", braintree_private_key="k")
        with pytest.raises(ValueError):
            s.validate_production_settings()

    @pytest.mark.unit
    def test_missing_gateway_credentials_rejected(self):
        s = Settings(environment="production", cors_origins="https://shop.example.com", jwt_secret="x",
                     braintree_merchant_id="", braintree_public_key="", braintree_private_key="")
        with pytest.raises(ValueError):
            s.validate_production_settings()

    @pytest.mark.unit
    def test_complete_production_settings(self):
        s = Settings(environment="production", cors_origins="https://shop.example.com", jwt_secret="x",
                     braintree_environment="production", braintree_merchant_id="m",
                     braintree_public_key="p", braintree_private_key="k")
        s.validate_production_settings()

    @pytest.mark.unit
    def test_development_only_warns(self):
        Settings(environment="development", jwt_secret="").validate_production_settings()
