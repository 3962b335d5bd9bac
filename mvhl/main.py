"""
Main CLI entry point for the virtual hockey league transaction service.
"""

import argparse
import logging
import sys
from pathlib import Path

import uvicorn

from . import config
from .api.api_server import app, set_league_context
from .league.league_context import LeagueContext
from .scheduler import LeagueClock


def setup_logging(verbose: bool = False):
    """
    Configure logging for the application.

    Args:
        verbose: Enable verbose (DEBUG) logging
    """
    level = logging.DEBUG if verbose else getattr(logging, config.LOG_LEVEL)
    logging.basicConfig(
        level=level,
        format=config.LOG_FORMAT,
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )


def parse_arguments(argv=None):
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description='Virtual Hockey League transaction service',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Run the API with the demo league
  python -m mvhl.main --serve

  # Keep transaction history across restarts
  python -m mvhl.main --serve --transactions-file data/transactions/season.jsonl

  # Export transaction history to CSV
  python -m mvhl.main --transactions-file data/transactions/season.jsonl \\
      --export-transactions data/exports/transactions.csv
        """
    )

    parser.add_argument(
        '--serve',
        action='store_true',
        help='Run the HTTP API and the background league clock'
    )

    parser.add_argument(
        '--host',
        type=str,
        default=config.API_HOST,
        help=f'API bind address (default: {config.API_HOST})'
    )

    parser.add_argument(
        '--port',
        type=int,
        default=config.API_PORT,
        help=f'API port (default: {config.API_PORT})'
    )

    parser.add_argument(
        '--transactions-file',
        type=Path,
        default=None,
        help='JSONL file for the transaction log (default: in-memory only)'
    )

    parser.add_argument(
        '--export-transactions',
        type=Path,
        default=None,
        metavar='PATH',
        help='Write the transaction log to a CSV file and exit'
    )

    parser.add_argument(
        '--seed',
        type=int,
        default=42,
        help='Random seed for the demo league (default: 42)'
    )

    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable verbose (DEBUG) logging'
    )

    return parser.parse_args(argv)


def run_export(args) -> int:
    """Export the transaction log to CSV."""
    logger = logging.getLogger(__name__)

    if not args.transactions_file:
        logger.error("--export-transactions requires --transactions-file")
        return 1

    context = LeagueContext.demo(transactions_file=args.transactions_file, seed=args.seed)
    count = context.log.export_to_csv(args.export_transactions)
    logger.info(f"Exported {count} transactions")
    return 0


def run_server(args) -> int:
    """Run the API with the league clock until interrupted."""
    logger = logging.getLogger(__name__)

    context = LeagueContext.demo(transactions_file=args.transactions_file, seed=args.seed)
    set_league_context(context)

    clock = LeagueClock(context)
    clock.start()
    try:
        logger.info(f"Serving league API on http://{args.host}:{args.port}")
        uvicorn.run(app, host=args.host, port=args.port, log_config=None)
    except KeyboardInterrupt:
        logger.info("\nServer interrupted by user")
    finally:
        clock.stop()
    return 0


def main(argv=None):
    """Main execution function with mode branching."""
    args = parse_arguments(argv)

    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    if args.export_transactions:
        sys.exit(run_export(args))
    elif args.serve:
        sys.exit(run_server(args))
    else:
        logger.error("Nothing to do: pass --serve or --export-transactions")
        sys.exit(2)


if __name__ == '__main__':
    main()
