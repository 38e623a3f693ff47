"""
jobflow - command line entry point.

Subcommands:
- serve: run the FastAPI server with uvicorn
- init-db: create the SQLite schema
- seed-technicians: insert the default technicians (idempotent)
"""

import argparse
import logging
import sys
from typing import Optional

from dotenv import load_dotenv

from jobflow.infra.config import Settings, ensure_data_directories, resolve_path
from jobflow.infra.logging_config import setup_logging
from jobflow.lifecycle.errors import LifecycleError
from jobflow.lifecycle.service import LifecycleService


# Load environment variables
load_dotenv()

logger = logging.getLogger("jobflow.cli")


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="jobflow - service job lifecycle core",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Create the database schema
  python main.py init-db

  # Seed the default technicians
  python main.py seed-technicians

  # Run the API server
  python main.py serve --host 0.0.0.0 --port 8000
        """
    )
    parser.add_argument(
        "--db-path",
        type=str,
        default=None,
        help="SQLite database path. Default: JOBFLOW_DB_PATH or data/jobflow.db"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        help="Logging level. Default: JOBFLOW_LOG_LEVEL or INFO"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the API server")
    serve.add_argument("--host", type=str, default=None, help="Bind host")
    serve.add_argument("--port", type=int, default=None, help="Bind port")
    serve.add_argument("--reload", action="store_true", default=False, help="Auto-reload on code change")

    subparsers.add_parser("init-db", help="Create the database schema")
    subparsers.add_parser("seed-technicians", help="Insert the default technicians")

    return parser.parse_args(argv)


def load_settings(args: argparse.Namespace) -> Settings:
    """Environment settings with command line overrides applied."""
    settings = Settings.from_env()
    if args.db_path:
        settings.db_path = resolve_path(args.db_path)
    if args.log_level:
        settings.log_level = args.log_level.upper()
    return settings


def run_serve(settings: Settings, args: argparse.Namespace) -> None:
    import os
    import uvicorn

    # The app's lifespan reads its settings from the environment
    os.environ["JOBFLOW_DB_PATH"] = str(settings.db_path)

    host = args.host or settings.api_host
    port = args.port or settings.api_port
    logger.info(f"Starting API server on {host}:{port} (database: {settings.db_path})")
    uvicorn.run(
        "jobflow.api.main:app",
        host=host,
        port=port,
        reload=args.reload,
        log_level=settings.log_level.lower(),
    )


def run_init_db(settings: Settings) -> None:
    LifecycleService.create(settings.db_path, busy_timeout=settings.busy_timeout)
    logger.info(f"Database ready: {settings.db_path}")


def run_seed_technicians(settings: Settings) -> None:
    service = LifecycleService.create(settings.db_path, busy_timeout=settings.busy_timeout)
    created = service.technicians.seed_defaults()
    for technician in created:
        logger.info(f"  + {technician.name} <{technician.email}> ({technician.technician_id})")
    if not created:
        logger.info("Default technicians already present, nothing to seed")


def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)
    settings = load_settings(args)

    setup_logging(settings.log_level, log_dir=settings.log_dir, to_file=settings.log_to_file)
    ensure_data_directories(settings)

    try:
        if args.command == "serve":
            run_serve(settings, args)
        elif args.command == "init-db":
            run_init_db(settings)
        elif args.command == "seed-technicians":
            run_seed_technicians(settings)
    except LifecycleError as e:
        logger.error(f"{args.command} failed [{e.kind.value}]: {e.message}")
        return 1

    return 0


def cli() -> None:
    sys.exit(main())


if __name__ == "__main__":
    cli()
