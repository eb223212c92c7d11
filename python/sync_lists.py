#!/usr/bin/env python3
"""
Watchlist Sync command line

Synchronizes one sanctions list, or all of them concurrently, into the
configured database and prints the outcome.

Usage:
    python sync_lists.py {ofac,un,eu,interpol,all} [--config PATH] [--create-tables] [-v]

Exit status is 0 when the sync succeeded and 1 otherwise.
"""

import sys
import argparse
import logging
from pathlib import Path
from typing import List, Optional

# Add parent to path
sys.path.insert(0, str(Path(__file__).parent))

from config_manager import ConfigManager, ConfigurationError
from database.connection import DatabaseSettings, init_db, close_db
from database.store import SanctionsStore
from ingestion.coordinator import FanOutCoordinator
from ingestion.registry import SOURCES
from logging_config import setup_logging

logger = logging.getLogger(__name__)

SOURCE_CHOICES = [definition.config_key for definition in SOURCES.values()]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Synchronize sanctions lists into the Watchlist Sync database")
    parser.add_argument("source", choices=SOURCE_CHOICES + ["all"], help="List to synchronize, or all")
    parser.add_argument("--config", help="Path to config.yaml")
    parser.add_argument("--create-tables", action="store_true", help="Create missing tables before syncing")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point"""
    args = build_parser().parse_args(argv)

    try:
        config = ConfigManager(args.config)
    except ConfigurationError as e:
        print(f"✗ Configuration error: {e}", file=sys.stderr)
        return 1

    setup_logging(config.logging, level="DEBUG" if args.verbose else None)

    logger.info("=" * 50)
    logger.info(f"Watchlist Sync: {args.source.upper()}")
    logger.info("=" * 50)

    try:
        provider = init_db(DatabaseSettings.from_config(config.database))
        if args.create_tables:
            provider.create_tables()

        store = SanctionsStore(provider, batch_size=config.sync.batch_size)
        coordinator = FanOutCoordinator(store, config=config, logger=logging.getLogger("watchlist_sync"))

        if args.source == "all":
            result = coordinator.run_all_blocking()
            print(result.message)
            for line in result.details:
                print(f"  - {line}")
        else:
            source = next(s for s, d in SOURCES.items() if d.config_key == args.source)
            result = coordinator.run_source(source)
            print(result.message)

    except Exception as e:
        logger.error(f"✗ Sync aborted: {e}")
        return 1
    finally:
        close_db()

    return 0 if result.success else 1


if __name__ == "__main__":
    sys.exit(main())
