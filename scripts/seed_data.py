#!/usr/bin/env python3
"""
Database Seed Script

Installs the reference data the aggregation engine needs.

USAGE:
    # From the project root with the venv activated
    python scripts/seed_data.py

    # Wipe outlets, critics, reviews and statistics first
    python scripts/seed_data.py --clear

This script:
1. Creates missing tables (use Alembic in production)
2. Installs the default rating scales (Five-star, Percent, Ten-point, Thumbs)
3. Creates the reference outlets and their critics

Reviews are never generated here; they arrive through the ledger.
"""

import argparse
import logging
import sys
from datetime import date
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from bittermelon.database import SessionLocal, create_tables, unit_of_work
from bittermelon.log import configure_logging
from bittermelon.models import (
    Critic,
    CriticStats,
    Outlet,
    OutletStats,
    Review,
    TitleStats,
)
from bittermelon.schemas.catalog import CriticCreate, OutletCreate
from bittermelon.services.catalog import create_critic, create_outlet
from bittermelon.services.scales import seed_rating_scales

logger = logging.getLogger(__name__)

# name, country, url, [(critic, top critic, joined)]
OUTLETS = [
    ("Daily Planet", "US", "https://dp.example.com", [
        ("Lois Lane", True, date(2010, 5, 1)),
        ("Clark Kent", False, date(2012, 3, 18)),
        ("Perry White", False, date(2005, 7, 11)),
        ("Cat Grant", False, date(2016, 2, 9)),
    ]),
    ("Gotham Gazette", "US", "https://gg.example.com", [
        ("Vicki Vale", True, date(2014, 11, 11)),
        ("Alexander Knox", False, date(2017, 8, 5)),
        ("Julia Pennyworth", False, date(2019, 6, 22)),
        ("Jack Ryder", False, date(2020, 1, 15)),
    ]),
    ("Metropolis Times", "CA", "https://mt.ca", [
        ("Jimmy Olsen", True, date(2013, 4, 12)),
        ("Ron Troupe", False, date(2014, 5, 7)),
        ("Lana Lang", False, date(2018, 3, 1)),
        ("Steve Lombard", False, date(2019, 12, 30)),
    ]),
    ("Wakanda Chronicle", "KE", "https://wc.example.com", [
        ("Shuri Udaku", True, date(2021, 7, 7)),
        ("Nakia", False, date(2020, 3, 14)),
        ("Okoye", False, date(2019, 9, 19)),
        ("Everett Ross", False, date(2018, 10, 10)),
    ]),
    ("Sokovia Sentinel", "CZ", "https://ss.cz", [
        ("Wanda Maximoff", True, date(2019, 5, 5)),
        ("Pietro Maximoff", False, date(2019, 5, 5)),
        ("Vision", False, date(2021, 1, 1)),
        ("Darcy Lewis", False, date(2021, 2, 15)),
    ]),
    ("Asgard Observer", "NO", "https://ao.no", [
        ("Thor Odinson", True, date(2018, 6, 1)),
        ("Loki Laufeyson", False, date(2018, 6, 2)),
        ("Heimdall", False, date(2018, 6, 3)),
        ("Sif", False, date(2018, 6, 4)),
    ]),
    ("Latveria Herald", "LV", "https://lh.lv", [
        ("Victor Von Doom", True, date(2000, 1, 1)),
        ("Kristoff Vernard", False, date(2014, 10, 10)),
        ("Boris Bullski", False, date(2016, 4, 4)),
        ("Lucia Von Bardas", False, date(2017, 7, 7)),
    ]),
    ("Kamar-Taj Review", "NP", "https://ktr.np", [
        ("Stephen Strange", True, date(2016, 11, 4)),
        ("Wong", False, date(2016, 11, 5)),
        ("Mordo", False, date(2016, 11, 6)),
        ("Christine Palmer", False, date(2016, 11, 7)),
    ]),
    ("Knowhere Post", "SG", "https://kp.sg", [
        ("Peter Quill", True, date(2014, 9, 1)),
        ("Gamora", False, date(2014, 9, 2)),
        ("Drax", False, date(2014, 9, 3)),
        ("Rocket Raccoon", False, date(2014, 9, 4)),
    ]),
    ("Titan Tribune", "AU", "https://tt.au", [
        ("Thanos", True, date(2012, 12, 12)),
        ("Nebula", False, date(2014, 3, 3)),
        ("Eros", False, date(2015, 5, 5)),
        ("Proxima Midnight", False, date(2016, 6, 6)),
    ]),
]


def clear_data(db: Session) -> None:
    """Remove statistics, reviews, critics and outlets."""
    logger.info("Clearing existing data...")
    with unit_of_work(db):
        for model in (TitleStats, CriticStats, OutletStats, Review, Critic, Outlet):
            db.execute(delete(model))
    logger.info("Data cleared.")


def create_outlets_and_critics(db: Session) -> tuple[int, int]:
    """Create the reference outlets and critics that are missing."""
    existing = set(db.scalars(select(Outlet.name)))
    outlets = critics = 0
    for name, country, url, roster in OUTLETS:
        if name in existing:
            continue
        outlet = create_outlet(db, OutletCreate(name=name, country=country, url=url))
        outlets += 1
        for display_name, is_top, joined in roster:
            create_critic(
                db,
                CriticCreate(
                    display_name=display_name,
                    outlet_id=outlet.id,
                    is_top_critic=is_top,
                    joined_date=joined,
                ),
            )
            critics += 1
    return outlets, critics


def seed_database(clear_existing: bool = False) -> None:
    """
    Seed the reference data.

    Args:
        clear_existing: If True, clears outlets, critics and reviews first.
    """
    logger.info("Starting database seed...")
    create_tables()

    db = SessionLocal()
    try:
        if clear_existing:
            clear_data(db)

        scales = seed_rating_scales(db)
        outlets, critics = create_outlets_and_critics(db)

        logger.info("Database seeding completed:")
        logger.info(f"  - Rating scales: {scales}")
        logger.info(f"  - Outlets: {outlets}")
        logger.info(f"  - Critics: {critics}")
    finally:
        db.close()


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Seed reference data")
    parser.add_argument(
        "--clear",
        action="store_true",
        help="Delete outlets, critics, reviews and statistics before seeding"
    )
    args = parser.parse_args()

    configure_logging()
    seed_database(clear_existing=args.clear)


if __name__ == "__main__":
    main()
