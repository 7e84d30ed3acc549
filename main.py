"""
Flight Schedule Service - Entry Point

Serve the HTTP API:
    python main.py serve --port 8000

Collect one month for an airport:
    python main.py collect-month CEB 2024-02

Environment variables:
    PROVIDER_API_KEY: RapidAPI key for AeroDataBox
    AUTH_API_TOKENS: Comma-separated API tokens accepted by the HTTP API
    STORE_PATH / DB_PATH: SQLite files for schedules and collection runs
"""

import argparse
import sys

from src.utils.logger import setup_logger, logger
from src.utils.exceptions import FlightServiceError
from src.config import settings


def main():
    """Main entry point for the service."""
    parser = argparse.ArgumentParser(
        description="Flight Schedule Ingestion & Query Service"
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Log level (default: from settings)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    collect_parser = subparsers.add_parser("collect-month", help="Collect one month for an airport")
    collect_parser.add_argument("departure_iata", help="Departure airport IATA code, e.g. ICN")
    collect_parser.add_argument("month", help="Month to collect, YYYY-MM")

    args = parser.parse_args()

    # Configure logging
    log_level = args.log_level or settings.logging.level
    setup_logger(
        log_level=log_level,
        log_dir=settings.logging.log_dir,
        log_file=settings.logging.log_file,
        rotation=settings.logging.rotation,
        retention=settings.logging.retention,
    )

    logger.info("=" * 60)
    logger.info("FLIGHT SCHEDULE SERVICE")
    logger.info("=" * 60)
    logger.info(f"Environment: {settings.environment}")

    if args.command == "serve":
        import uvicorn

        uvicorn.run("src.api.app:app", host=args.host, port=args.port, log_level=log_level.lower())
        return

    from src.ingestion import run_collect_month

    try:
        summary = run_collect_month(args.departure_iata, args.month)
    except FlightServiceError as e:
        logger.error(f"Collection aborted: {e.message}")
        sys.exit(1)

    logger.info(f"Saved: {summary.total_saved}")
    logger.info(f"Days: {summary.total_days}")
    logger.info(f"API calls: {summary.total_api_calls}")
    if summary.failed_dates:
        logger.warning(f"Skipped days: {', '.join(summary.failed_dates)}")


if __name__ == "__main__":
    main()
