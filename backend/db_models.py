"""
SQLAlchemy ORM models for the Storefront backend.

Tables:
    users       : shoppers and admins
    categories  : catalog categories (unique name + slug)
    products    : catalog items; price here is the only trusted price
    orders      : checkout results with the gateway payment record
    order_items : per-order snapshot of the purchased products
"""
from datetime import datetime

from sqlalchemy import (
    Column, Integer, String, Boolean, DateTime, Text, Numeric, LargeBinary, JSON,
    ForeignKey, Index,
)
from sqlalchemy.orm import relationship, validates

from database import Base
from domain.enums import OrderStatus, UserRole


class User(Base):
    """Registered shoppers and admins."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    email = Column(String(254), unique=True, nullable=False, index=True)
    password_hash = Column(String(100), nullable=False)
    phone = Column(String(30), nullable=False)
    address = Column(Text, nullable=False)
    answer = Column(String(200), nullable=False)  # security answer for password reset
    role = Column(String(20), nullable=False, default=UserRole.USER.value)  # "user" | "admin"
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    orders = relationship("Order", back_populates="buyer", lazy="select", passive_deletes=True)

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value


class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), unique=True, nullable=False)
    slug = Column(String(120), unique=True, nullable=False, index=True)

    products = relationship("Product", back_populates="category", lazy="select", passive_deletes=True)


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False)
    slug = Column(String(220), unique=True, nullable=False, index=True)
    description = Column(Text, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False, index=True)
    quantity = Column(Integer, nullable=False, default=0)  # on hand
    photo_data = Column(LargeBinary, nullable=True)
    photo_content_type = Column(String(100), nullable=True)
    shipping = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    category = relationship("Category", back_populates="products", lazy="selectin")

    __table_args__ = (
        # For filters: category checkboxes + price range
        Index("ix_products_category_price", "category_id", "price"),
    )


class Order(Base):
    """
    One successful checkout.

    Created only after the gateway accepted the charge; `payment` is the
    gateway's success record stored as returned.
    """
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, autoincrement=True)
    buyer_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    status = Column(String(30), nullable=False, default=OrderStatus.NOT_PROCESSED.value, index=True)
    payment = Column(JSON, nullable=False, default=dict)
    amount = Column(Numeric(10, 2), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    buyer = relationship("User", back_populates="orders", lazy="selectin")
    items = relationship(
        "OrderItem",
        back_populates="order",
        lazy="selectin",
        order_by="OrderItem.position",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        # For buyer order history: filter by buyer_id, order by created_at DESC
        Index("ix_orders_buyer_created", "buyer_id", "created_at"),
    )

    @validates("status")
    def _validate_status(self, key, value):
        allowed = {s.value for s in OrderStatus}
        if value not in allowed:
            raise ValueError(f"Invalid order status '{value}'. Allowed: {sorted(allowed)}")
        return value


class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)
    # nullable: the product may be deleted from the catalog later
    product_id = Column(Integer, ForeignKey("products.id", ondelete="SET NULL"), nullable=True, index=True)
    position = Column(Integer, nullable=False, default=0)
    slug = Column(String(220), nullable=False)
    name = Column(String(200), nullable=False)
    unit_price = Column(Numeric(10, 2), nullable=False)
    quantity = Column(Integer, nullable=False, default=1)

    order = relationship("Order", back_populates="items")
