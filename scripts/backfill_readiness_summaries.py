#!/usr/bin/env python3
"""
Backfill script for estate readiness summaries.

Recomputes readiness for every estate (or one estate) and writes the
`readiness_summary` column used by estate list badges.

Usage:
    python scripts/backfill_readiness_summaries.py [--estate-id ESTATE_ID] [--status STATUS] [--dry-run]

Options:
    --estate-id: Optional estate UUID to backfill only that estate
    --status: Only backfill estates with this status (e.g. ACTIVE)
    --dry-run: Compute and log scores without writing
"""

import argparse
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from legate.core.estate_access import InvalidEstateIdError, parse_estate_id
from legate.core.logging import get_logger
from legate.core.readiness.score import get_estate_readiness
from legate.core.readiness_cache import update_all_readiness_summaries, update_readiness_summary
from legate.db.estate_records import get_estate_records_repository

logger = get_logger(__name__)


def backfill_one(estate_id: str, dry_run: bool = False) -> bool:
    """Recompute and store the summary for a single estate."""
    estate_uuid = parse_estate_id(estate_id)
    readiness = get_estate_readiness(estate_uuid, get_estate_records_repository())

    logger.info(
        f"Estate {estate_uuid}: score={readiness.score} "
        f"missing={len(readiness.signals.missing)} at_risk={len(readiness.signals.at_risk)}"
    )

    if dry_run:
        return True
    return update_readiness_summary(estate_uuid, readiness)


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Backfill estate readiness summaries")
    parser.add_argument(
        "--estate-id",
        type=str,
        help="Optional estate UUID to backfill (default: all estates)",
    )
    parser.add_argument(
        "--status",
        type=str,
        default=None,
        help="Only backfill estates with this status",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Compute scores without writing summaries",
    )

    args = parser.parse_args()

    logger.info("=" * 60)
    logger.info("READINESS SUMMARY BACKFILL")
    logger.info("=" * 60)

    try:
        if args.estate_id:
            ok = backfill_one(args.estate_id, dry_run=args.dry_run)
            if not ok:
                logger.error(f"Failed to write summary for estate {args.estate_id}")
                sys.exit(1)
        elif args.dry_run:
            logger.info("--dry-run requires --estate-id")
            sys.exit(2)
        else:
            result = update_all_readiness_summaries(get_estate_records_repository(), status=args.status)
            for error in result["errors"]:
                logger.warning(f"Estate {error['estate_id']}: {error['error']}")

            logger.info("=" * 60)
            logger.info(
                f"BACKFILL COMPLETE - Updated {result['updated']} estates, {len(result['errors'])} errors"
            )
            logger.info("=" * 60)

    except InvalidEstateIdError as e:
        logger.error(str(e))
        sys.exit(2)
    except Exception as e:
        logger.error(f"Backfill failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
