"""
Tests for Pydantic request models.

Tests: field validation, aliases, cross-field validators.
"""
from decimal import Decimal

import pytest
from pydantic import ValidationError

from models import CartLine, PaymentRequest, ProductFilterRequest, ProductRequest, RegisterRequest


class TestCartLine:

    @pytest.mark.unit
    def test_by_product_id(self):
        line = CartLine.model_validate({"productId": 3, "price": "9.99"})
        assert line.product_id == 3
        assert line.quantity == 1
        assert line.ref == "3"

    @pytest.mark.unit
    def test_by_slug(self):
        line = CartLine.model_validate({"slug": "novel", "price": 14.99, "quantity": 2})
        assert line.ref == "novel"
        assert line.price == Decimal("14.99")

    @pytest.mark.unit
    def test_needs_a_reference(self):
        with pytest.raises(ValidationError):
            CartLine.model_validate({"price": "1.00"})

    @pytest.mark.unit
    @pytest.mark.parametrize("quantity", [0, -1, 101])
    def test_quantity_bounds(self, quantity):
        with pytest.raises(ValidationError):
            CartLine.model_validate({"slug": "novel", "price": "1.00", "quantity": quantity})

    @pytest.mark.unit
    def test_negative_price(self):
        with pytest.raises(ValidationError):
            CartLine.model_validate({"slug": "novel", "price": "-1"})


class TestPaymentRequest:

    @pytest.mark.unit
    def test_nonce_required(self):
        with pytest.raises(ValidationError):
            PaymentRequest.model_validate({"cart": []})

    @pytest.mark.unit
    def test_empty_cart_is_valid_shape(self):
        req = PaymentRequest.model_validate({"nonce": "n", "cart": []})
        assert req.cart == []


class TestProductRequest:

    @pytest.mark.unit
    def test_category_alias(self):
        req = ProductRequest.model_validate({
            "name": "Atlas", "description": "Maps", "price": "45.00", "category": 2, "quantity": 1,
        })
        assert req.category_id == 2
        assert req.shipping is False
        assert req.photo is None

    @pytest.mark.unit
    def test_negative_quantity(self):
        with pytest.raises(ValidationError):
            ProductRequest.model_validate({
                "name": "Atlas", "description": "Maps", "price": "45.00", "category": 2, "quantity": -1,
            })


class TestProductFilterRequest:

    @pytest.mark.unit
    def test_defaults(self):
        req = ProductFilterRequest.model_validate({})
        assert req.checked == [] and req.radio == []

    @pytest.mark.unit
    def test_range_must_be_pair(self):
        with pytest.raises(ValidationError):
            ProductFilterRequest.model_validate({"radio": [1, 2, 3]})


class TestRegisterRequest:

    @pytest.mark.unit
    def test_rejects_malformed_email(self):
        with pytest.raises(ValidationError):
            RegisterRequest.model_validate({
                "name": "A", "email": "not-an-email", "password": "p", "phone": "1", "address": "x", "answer": "y",
            })
