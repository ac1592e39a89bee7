"""
Domain enums shared by models, services and routes.
"""

from enum import Enum


class OrderStatus(str, Enum):
    NOT_PROCESSED = "Not Processed"
    PROCESSING = "Processing"
    SHIPPED = "Shipped"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"


class UserRole(str, Enum):
    USER = "user"
    ADMIN = "admin"
