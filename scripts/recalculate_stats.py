#!/usr/bin/env python3
"""
Statistics Rebuild Script

Recomputes every title, critic and outlet statistics row from the reviews
table, or only reports rows that disagree with a fresh recompute.

Usage:
    # From project root with venv activated:
    python scripts/recalculate_stats.py

    # Report drift without writing (exit status 1 when drift is found):
    python scripts/recalculate_stats.py --check
"""

import argparse
import logging
import sys
from pathlib import Path

# Add project root to path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from bittermelon.database import SessionLocal, unit_of_work
from bittermelon.log import configure_logging
from bittermelon.services.aggregation import AggregationEngine

logger = logging.getLogger(__name__)


def recalculate(check_only: bool = False) -> int:
    """
    Rebuild or verify the statistics caches.

    Args:
        check_only: If True, only report drift

    Returns:
        Number of drifting rows found (0 after a rebuild)
    """
    db = SessionLocal()
    try:
        engine = AggregationEngine(db)
        if check_only:
            drift = engine.find_drift()
            db.rollback()
            logger.info(f"Rows out of sync: {len(drift)}")
            return len(drift)

        with unit_of_work(db):
            keys = engine.rebuild_all()
        logger.info("=" * 50)
        logger.info("Rebuild complete!")
        logger.info(f"Titles: {len(keys.titles)}")
        logger.info(f"Critics: {len(keys.critics)}")
        logger.info(f"Outlets: {len(keys.outlets)}")
        return 0
    finally:
        db.close()


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Recompute review statistics from the reviews table"
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Only report rows that differ from a fresh recompute"
    )
    args = parser.parse_args()

    configure_logging()
    drift = recalculate(check_only=args.check)
    sys.exit(1 if drift else 0)


if __name__ == "__main__":
    main()
