#!/usr/bin/env python3
"""
Server entry point.

Serves the API with the background scheduler by default. ``--run-job``
runs one scheduled job against the configured database and exits, for
hosts that drive the jobs from an external cron instead.
"""

import sys
import asyncio
import argparse

from overseas_tracker.config.loader import ConfigLoader, load_config_for_environment
from overseas_tracker.config.settings import Settings

JOBS = ("status-transition", "daily-summary")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Overseas Access Tracker")
    parser.add_argument(
        "--env",
        choices=["development", "staging", "production", "testing"],
        default=None,
        help="Environment to load (default: ENVIRONMENT env var or development)"
    )
    parser.add_argument("--host", default=None, help="Bind address (overrides config)")
    parser.add_argument("--port", type=int, default=None, help="Bind port (overrides config)")
    parser.add_argument("--debug", action="store_true", help="Enable debug mode")
    parser.add_argument(
        "--no-scheduler",
        action="store_true",
        help="Serve the API without the background jobs"
    )
    parser.add_argument(
        "--run-job",
        choices=JOBS,
        default=None,
        help="Run a single job now and exit instead of serving"
    )
    parser.add_argument(
        "--list-envs",
        action="store_true",
        help="List the .env.<environment> files found"
    )
    return parser


async def run_job(settings: Settings, job: str) -> dict:
    from overseas_tracker.core.clock import Clock
    from overseas_tracker.core.db import Database
    from overseas_tracker.services.daily_summary_service import DailySummaryService
    from overseas_tracker.services.mail_sender import MailSender
    from overseas_tracker.services.status_transition_job import run_status_transition_once

    database = Database.from_settings(settings.database)
    clock = Clock(settings.get_zoneinfo())
    try:
        await database.create_all()
        if job == "status-transition":
            return await run_status_transition_once(database.session_factory, clock)
        async with database.session() as db:
            return await DailySummaryService(db, clock, MailSender(settings.mail)).send_daily_summary()
    finally:
        await database.dispose()


def serve(settings: Settings) -> None:
    import uvicorn
    from overseas_tracker.main import create_app

    print(f"Starting {settings.app_name} v{settings.app_version} ({settings.environment.value})")
    print(f"   Listening on {settings.host}:{settings.port}")
    print(f"   Calendar timezone: {settings.timezone}")
    print(f"   Scheduler: {'on' if settings.scheduler.enabled else 'off'}")

    # One process only, otherwise every worker would run the daily jobs
    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.value.lower(),
        access_log=False,
    )


def main():
    args = build_parser().parse_args()

    if args.list_envs:
        print("Available environment configurations:")
        for env in ConfigLoader.get_available_environments():
            print(f"  - {env}")
        return

    try:
        settings = load_config_for_environment(args.env)
    except Exception as e:
        print(f"Failed to load configuration: {e}", file=sys.stderr)
        sys.exit(1)

    if args.host:
        settings.host = args.host
    if args.port:
        settings.port = args.port
    if args.debug:
        settings.debug = True
    if args.no_scheduler:
        settings.scheduler.enabled = False

    if args.run_job:
        from overseas_tracker.core.logging import configure_logging

        configure_logging(settings.log_level.value, settings.log_format)
        result = asyncio.run(run_job(settings, args.run_job))
        print(result)
        if result.get("status") == "error":
            sys.exit(1)
        return

    serve(settings)


if __name__ == "__main__":
    main()
