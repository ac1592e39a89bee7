"""
Domain constants used across services/routers.
"""

# Catalog listing sizes
PRODUCT_LIST_LIMIT = 12
PRODUCT_PAGE_SIZE = 6
RELATED_PRODUCTS_LIMIT = 3

# Credentials
BCRYPT_ROUNDS = 10
PASSWORD_MIN_LENGTH = 6
