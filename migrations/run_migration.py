#!/usr/bin/env python3
"""
Create the CRM tables and, optionally, the first super admin account.

    DATABASE_URL=postgresql+asyncpg://... python migrations/run_migration.py
    ADMIN_EMAIL=owner@acme.io ADMIN_PASSWORD=... python migrations/run_migration.py
"""

import os
import sys
import asyncio

from dotenv import load_dotenv

load_dotenv()

from synergy_crm.database import connect_database, close_database, create_tables, engine


async def run_migration():
    """Create every table, then seed the super admin when credentials are given."""
    print(f"Connecting to database ({engine.url.render_as_string(hide_password=True)})")

    try:
        await connect_database()
        await create_tables()
        print("✅ Tables created")

        admin_email = os.getenv("ADMIN_EMAIL")
        admin_password = os.getenv("ADMIN_PASSWORD")
        if admin_email and admin_password:
            from synergy_crm.services.user_service import user_service

            admin = await user_service.ensure_super_admin(
                admin_email, admin_password, os.getenv("ADMIN_NAME", "Administrator")
            )
            print(f"👤 Super admin ready: {admin['email']}")

        print("\n🎉 Migration completed!")
    except Exception as e:
        print(f"❌ Migration failed: {e}")
        sys.exit(1)
    finally:
        await close_database()


if __name__ == "__main__":
    asyncio.run(run_migration())
