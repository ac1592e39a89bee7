"""
Pydantic models for request validation.
"""
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ApiModel(BaseModel):
    """Shared base: allows construction by Python name or alias."""
    model_config = ConfigDict(populate_by_name=True, from_attributes=True)


# ── Auth ────────────────────────────────────────────────────────────

class RegisterRequest(ApiModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., min_length=3, max_length=254, pattern=r"^[^@\s]+@[^@\s]+$")
    password: str = Field(..., min_length=1, max_length=72)
    phone: str = Field(..., min_length=1, max_length=30)
    address: str = Field(..., min_length=1, max_length=500)
    answer: str = Field(..., min_length=1, max_length=200)


class LoginRequest(ApiModel):
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class ForgotPasswordRequest(ApiModel):
    email: str = Field(..., min_length=1)
    answer: str = Field(..., min_length=1)
    new_password: str = Field(..., alias="newPassword", min_length=1, max_length=72)


class ProfileUpdateRequest(ApiModel):
    """Partial profile update; omitted fields keep their current value."""
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    password: Optional[str] = Field(default=None, max_length=72)
    phone: Optional[str] = Field(default=None, min_length=1, max_length=30)
    address: Optional[str] = Field(default=None, min_length=1, max_length=500)


# ── Catalog ─────────────────────────────────────────────────────────

class CategoryRequest(ApiModel):
    name: str = Field(..., min_length=1, max_length=100)


class ProductRequest(ApiModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1, max_length=5000)
    price: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)
    category_id: int = Field(..., alias="category", gt=0)
    quantity: int = Field(..., ge=0)
    shipping: bool = False
    photo: Optional[str] = Field(
        default=None,
        description="Base64-encoded image bytes",
    )
    photo_content_type: Optional[str] = Field(default=None, alias="photoContentType", max_length=100)

    @model_validator(mode="after")
    def _photo_needs_content_type(self):
        if self.photo and not self.photo_content_type:
            raise ValueError("photoContentType is required when photo is provided")
        return self


class ProductFilterRequest(ApiModel):
    checked: List[int] = Field(default_factory=list, description="Category ids")
    radio: List[Decimal] = Field(default_factory=list, description="[min, max] price range")

    @model_validator(mode="after")
    def _radio_is_range(self):
        if self.radio and len(self.radio) != 2:
            raise ValueError("radio must be an empty list or [min, max]")
        return self


# ── Checkout ────────────────────────────────────────────────────────

class CartLine(ApiModel):
    """One client-submitted cart line. The price here is a claim, not a fact."""
    product_id: Optional[int] = Field(default=None, alias="productId", gt=0)
    slug: Optional[str] = Field(default=None, min_length=1, max_length=220)
    price: Decimal = Field(..., ge=0)
    quantity: int = Field(1, ge=1, le=100)

    @model_validator(mode="after")
    def _needs_reference(self):
        if self.product_id is None and not self.slug:
            raise ValueError("cart line needs productId or slug")
        return self

    @property
    def ref(self) -> str:
        return str(self.product_id) if self.product_id is not None else self.slug


class PaymentRequest(ApiModel):
    nonce: str = Field(..., min_length=1, max_length=512)
    cart: List[CartLine]


class ClientTokenResponse(ApiModel):
    client_token: str = Field(..., alias="clientToken")


# ── Orders ──────────────────────────────────────────────────────────

class OrderStatusRequest(ApiModel):
    # Not restricted to the enum here; the ORM validates the value.
    status: str = Field(..., min_length=1, max_length=30)
