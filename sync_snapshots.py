#!/usr/bin/env python3
"""
UCL Replacement-Slot Race snapshot sync CLI

Fetches standings, fixtures and club coefficients and writes the JSON
snapshots read by the race dashboard.

The standings job writes data/race.json; the fixture and European jobs read it back.

Usage:
    python sync_snapshots.py coefficients
    python sync_snapshots.py standings --season 2025
    python sync_snapshots.py domestic-fixtures
    python sync_snapshots.py european-active
    python sync_snapshots.py all --verbose
"""

import argparse
import logging
import sys
from pathlib import Path

from uclrace import (
    RaceSyncError,
    load_config,
    setup_logging,
    sync_coefficients,
    sync_domestic_fixtures,
    sync_european_active_teams,
    sync_standings,
)

JOBS = {
    'coefficients': [sync_coefficients],
    'standings': [sync_standings],
    'domestic-fixtures': [sync_domestic_fixtures],
    'european-active': [sync_european_active_teams],
    # European fields on the race come from the previous activity snapshot
    'all': [sync_coefficients, sync_standings, sync_european_active_teams, sync_domestic_fixtures],
}

# Jobs that call the football API somewhere in their run
FOOTBALL_JOBS = {'standings', 'domestic-fixtures', 'european-active', 'all'}


def main(argv=None):
    parser = argparse.ArgumentParser(description="UCL replacement-slot race snapshot sync")
    parser.add_argument(
        "job",
        choices=sorted(JOBS),
        help="Which snapshot to sync",
    )
    parser.add_argument(
        "--season", "-y",
        type=int,
        default=None,
        help="Season start year (defaults to SEASON or the current season)",
    )
    parser.add_argument(
        "--output-dir", "-o",
        default=None,
        help="Directory for snapshot files (defaults to OUTPUT_DIR or data/)",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to race_config.json (defaults to RACE_CONFIG_PATH or data/race_config.json)",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Log every upstream request",
    )
    parser.add_argument(
        "--log-dir",
        default=None,
        help="Directory for log files (defaults to logs/)",
    )
    parser.add_argument(
        "--no-log-file",
        action="store_true",
        help="Log to the console only",
    )

    args = parser.parse_args(argv)

    logger = setup_logging(
        job=args.job,
        log_dir=Path(args.log_dir) if args.log_dir else None,
        level=logging.DEBUG if args.verbose else logging.INFO,
        log_to_file=not args.no_log_file,
    )

    try:
        config = load_config(
            settings_path=args.config,
            season=args.season,
            output_dir=Path(args.output_dir) if args.output_dir else None,
        )
        logger.info(f"Season {config.season}, output to {config.output_dir}")
        if args.job in FOOTBALL_JOBS:
            config.require_football_key()

        for job in JOBS[args.job]:
            logger.info(f"Running {job.__name__}")
            job(config)
    except RaceSyncError as e:
        logger.error(f"{type(e).__name__}: {e}")
        sys.exit(1)
    except OSError as e:
        # Includes failed snapshot writes and requests connection errors
        logger.error(f"{type(e).__name__}: {e}")
        sys.exit(1)

    logger.info("Done")


if __name__ == "__main__":
    main()
