"""
Promote an existing account to the admin role.

Run from the backend/ directory:
    python scripts/create_admin.py user@example.com
"""
import argparse
import asyncio
import os
import sys

# Add backend/ to path so we can import config
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from database import async_session, init_db
from domain.errors import NotFoundError
from services import auth_service


async def promote(email: str) -> int:
    await init_db()
    async with async_session() as db:
        try:
            user = await auth_service.promote_to_admin(db, email=email)
        except NotFoundError:
            print(f"❌ No account registered with {email}")
            return 1
        await db.commit()
    print(f"✅ {user.email} (id={user.id}) is now an admin")
    return 0


def main():
    parser = argparse.ArgumentParser(description="Grant the admin role to a registered user")
    parser.add_argument("email")
    args = parser.parse_args()
    sys.exit(asyncio.run(promote(args.email)))


if __name__ == "__main__":
    main()
