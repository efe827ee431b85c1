#!/usr/bin/env python3
"""
Command line entry points to run a Zelty sync outside the schedule
(backfills, recovery after an outage).

    python cli.py sync:restaurants
    python cli.py sync:dishes
    python cli.py sync:orders [fromDate] [toDate]
"""

import argparse
import logging
import sys
from typing import List, Optional
from services import SyncService
from utils import parse_date_arg

logger = logging.getLogger(__name__)

def _date_argument(value: str):
    try:
        return parse_date_arg(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid date '{value}', expected YYYY-MM-DD")

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Synchronize data from the Zelty API")
    commands = parser.add_subparsers(dest='command', required=True)

    commands.add_parser('sync:restaurants', help="Synchronize the restaurants from the Zelty API")
    commands.add_parser('sync:dishes', help="Synchronize the dishes from the Zelty API")

    orders = commands.add_parser('sync:orders', help="Synchronize the orders from the Zelty API")
    orders.add_argument('from_date', nargs='?', type=_date_argument, default=None,
                        help="Start date in YYYY-MM-DD format (default: start of current month minus 1 day)")
    orders.add_argument('to_date', nargs='?', type=_date_argument, default=None,
                        help="End date in YYYY-MM-DD format (default: end of current month)")

    return parser

def main(argv: Optional[List[str]] = None, sync_service: Optional[SyncService] = None):
    """Parse the command and run the matching sync"""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == 'sync:orders' and args.from_date and args.to_date and args.from_date > args.to_date:
        parser.error("fromDate must not be after toDate")

    service = sync_service or SyncService()

    logger.debug(f"Executing {args.command} command...")

    if args.command == 'sync:restaurants':
        result = service.sync_restaurants()
    elif args.command == 'sync:dishes':
        result = service.sync_dishes()
    else:
        result = service.sync_orders(args.from_date, args.to_date)

    logger.info(f"Result: {result['records_synced']} {result['resource']} synced (batch {result['batch_id']})")
    logger.debug("Command executed successfully.")
    return result

if __name__ == "__main__":
    try:
        main()
    except Exception as e:
        logger.error(f"Fatal error in sync command: {e}")
        sys.exit(1)
