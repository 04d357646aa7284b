#!/usr/bin/env python3
"""
Load a handful of demo ads so the results page has something to show.
Only seeds an empty table.

Run from backend/: python -m scripts.seed_ads
"""
import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

DEMO_ADS = [
    ("home loans", {
        "title": "Low Rate Home Loans",
        "displayUrl": "www.example-lender.com/home-loans",
        "finalUrl": "https://www.example-lender.com/home-loans",
        "description": "Compare fixed and variable rates. Pre-approval in minutes.",
        "description2": "No application fees. Talk to a lending specialist today.",
        "priority": 3,
        "utmCampaign": "home_loans_q1",
    }),
    ("home loans", {
        "title": "First Home Buyer Guide",
        "displayUrl": "www.example-lender.com/first-home",
        "finalUrl": "https://www.example-lender.com/first-home?ref=search",
        "description": "Everything you need for your first home purchase.",
        "priority": 2,
    }),
    ("running shoes", {
        "title": "Running Shoes Sale",
        "displayUrl": "www.example-store.com/running",
        "finalUrl": "https://www.example-store.com/running",
        "description": "Top brands up to 40% off. Free shipping on orders over $50.",
        "description2": "Easy 60-day returns.",
        "utmCampaign": "spring_sale",
    }),
]


async def main():
    from sqlalchemy import select, func
    from fakesearch.database import async_session, init_db
    from fakesearch.models import Ad
    from fakesearch.schemas import AdPayload
    from fakesearch.services.ad_service import create_ad

    await init_db()
    async with async_session() as db:
        r = await db.execute(select(func.count()).select_from(Ad))
        count = r.scalar() or 0
        if count > 0:
            print(f"Ads already exist ({count}). Seeding only runs on an empty table.")
            sys.exit(0)

        for keyword, data in DEMO_ADS:
            await create_ad(db, keyword, AdPayload.model_validate(data))
        await db.commit()
        print(f"Seeded {len(DEMO_ADS)} demo ads.")


if __name__ == "__main__":
    asyncio.run(main())
