"""
Seed the subscription plan catalog.
Run this script once per environment; existing plans (matched by name) are
updated in place.
"""

import asyncio
import logging
import os
import sys
from decimal import Decimal

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy import select

from digitalhub.core.config import Settings
from digitalhub.core.logging import configure_logging
from digitalhub.db import Database
from digitalhub.models.catalog import SubscriptionPlan

logger = logging.getLogger("seed_plans")

PLANS = [
    # Free tier never expires in practice
    {"name": "Free Plan", "price_minor": 0, "duration_months": 1200, "commission_rate": Decimal("0.20")},
    {"name": "Monthly", "price_minor": 250_000, "duration_months": 1, "commission_rate": Decimal("0.30")},
    {"name": "6-Month Plan", "price_minor": 550_000, "duration_months": 6, "commission_rate": Decimal("0.40")},
    {"name": "Annual Plan", "price_minor": 700_000, "duration_months": 12, "commission_rate": Decimal("0.50")},
]


async def seed_plans(database: Database) -> None:
    async with database.sessionmaker() as db:
        for fields in PLANS:
            result = await db.execute(
                select(SubscriptionPlan).where(SubscriptionPlan.name == fields["name"])
            )
            plan = result.scalar_one_or_none()
            if plan is None:
                db.add(SubscriptionPlan(**fields))
                logger.info(f"Created plan {fields['name']}")
            else:
                for field, value in fields.items():
                    setattr(plan, field, value)
                logger.info(f"Updated plan {fields['name']}")
        await db.commit()


async def main() -> None:
    settings = Settings.from_env()
    configure_logging(environment=settings.environment, log_level=settings.log_level)
    database = Database(settings.database_url)
    try:
        await seed_plans(database)
    finally:
        await database.dispose()


if __name__ == "__main__":
    asyncio.run(main())
