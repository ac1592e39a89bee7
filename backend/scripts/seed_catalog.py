"""
Seed users, categories and products from a JSON file.

File layout:
    {
      "users":      [{"name", "email", "password", "phone", "address", "answer", "role"?}],
      "categories": [{"name"}],
      "products":   [{"name", "description", "price", "category", "quantity", "shipping"?}]
    }

`category` on a product is the category name or slug. Existing users and
categories (by email / name) and products (by slug) are skipped, so the
script can be re-run.

Run from the backend/ directory:
    python scripts/seed_catalog.py path/to/seed.json
"""
import argparse
import asyncio
import json
import os
import sys
from decimal import Decimal

# Add backend/ to path so we can import config
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy import select

from database import async_session, init_db
from db_models import Product
from domain.enums import UserRole
from services import auth_service, category_service, product_service
from utils.validators import slugify


async def _seed_users(db, users: list[dict]) -> int:
    created = 0
    for u in users:
        user = await auth_service.register(
            db,
            name=u["name"],
            email=u["email"],
            password=u["password"],
            phone=u.get("phone", ""),
            address=u.get("address", ""),
            answer=u.get("answer", ""),
        )
        if user is None:
            print(f"   ↷ user {u['email']} exists")
            continue
        if u.get("role") == UserRole.ADMIN.value:
            user.role = UserRole.ADMIN.value
        created += 1
    return created


async def _seed_categories(db, categories: list[dict]) -> int:
    created = 0
    for c in categories:
        if await category_service.create_category(db, name=c["name"]):
            created += 1
        else:
            print(f"   ↷ category {c['name']} exists")
    return created


async def _seed_products(db, products: list[dict]) -> int:
    created = 0
    for p in products:
        slug = slugify(p["name"])
        res = await db.execute(select(Product.id).where(Product.slug == slug))
        if res.scalar_one_or_none() is not None:
            print(f"   ↷ product {slug} exists")
            continue
        category = (
            await category_service.get_by_name(db, p["category"])
            or await category_service.get_by_slug(db, p["category"])
        )
        if category is None:
            print(f"   ⚠️  product {slug}: unknown category {p['category']!r}, skipped")
            continue
        await product_service.create_product(
            db,
            name=p["name"],
            description=p["description"],
            price=Decimal(str(p["price"])),
            category_id=category.id,
            quantity=int(p.get("quantity", 0)),
            shipping=bool(p.get("shipping", False)),
        )
        created += 1
    return created


async def seed(path: str) -> None:
    with open(path, encoding="utf-8") as f:
        data = json.load(f)

    await init_db()
    async with async_session() as db:
        users = await _seed_users(db, data.get("users", []))
        categories = await _seed_categories(db, data.get("categories", []))
        products = await _seed_products(db, data.get("products", []))
        await db.commit()

    print(f"✅ Seeded {users} user(s), {categories} categorie(s), {products} product(s)")


def main():
    parser = argparse.ArgumentParser(description="Seed the storefront catalog from JSON")
    parser.add_argument("path", help="Path to the seed JSON file")
    args = parser.parse_args()
    os.makedirs("data", exist_ok=True)
    asyncio.run(seed(args.path))


if __name__ == "__main__":
    main()
