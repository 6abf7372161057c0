"""Command line entry point."""

from __future__ import annotations

import argparse
import asyncio
import signal
import sys
from collections.abc import Sequence
from contextlib import suppress

from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from news_aggregator.clients.registry import ClientRegistry
from news_aggregator.config import Settings
from news_aggregator.db.session import create_engine, create_session_factory
from news_aggregator.errors import StorageUnavailableError
from news_aggregator.logging import configure_logging, get_logger
from news_aggregator.monitoring import configure_sentry
from news_aggregator.services.aggregator import AggregationOrchestrator, AggregationStats
from news_aggregator.services.health import HealthServer

EXIT_OK = 0
EXIT_STORAGE_UNAVAILABLE = 1
EXIT_INVALID_CONFIG = 2


def build_orchestrator(
    settings: Settings,
    session_factory: async_sessionmaker[AsyncSession],
) -> AggregationOrchestrator:
    return AggregationOrchestrator(
        settings=settings.aggregation,
        session_factory=session_factory,
        registry=ClientRegistry(settings.providers),
    )


def format_stats(stats: AggregationStats) -> list[str]:
    lines = [
        f"Fetched: {stats.fetched} articles",
        f"Saved: {stats.saved} new articles",
        f"Skipped: {stats.skipped} duplicates",
    ]
    if stats.errors:
        lines.append(f"Errors: {stats.errors}")
    for report in stats.providers:
        line = f"  {report.identifier}: {report.status.value} fetched={report.fetched} saved={report.saved}"
        if report.error:
            line += f" error={report.error}"
        lines.append(line)
    return lines


async def _fetch(settings: Settings) -> int:
    log = get_logger(__name__)
    engine = create_engine(settings.database_url)
    orchestrator = build_orchestrator(settings, create_session_factory(engine))
    try:
        stats = await orchestrator.run_once()
    except StorageUnavailableError as exc:
        log.error("fetch.storage_unavailable", error=str(exc))
        print(f"Storage unavailable: {exc}", file=sys.stderr)
        return EXIT_STORAGE_UNAVAILABLE
    finally:
        await engine.dispose()

    for line in format_stats(stats):
        print(line)
    if stats.fetched == 0:
        log.warning("fetch.nothing_fetched")
    return EXIT_OK


async def stop_loop(
    orchestrator: AggregationOrchestrator,
    loop_task: asyncio.Task[None],
    *,
    grace_seconds: float,
) -> None:
    """Ask the loop to stop and wait for the article in flight to commit.

    ``wait_for`` cancels the task only once the grace period runs out.
    """
    orchestrator.request_stop()
    try:
        await asyncio.wait_for(loop_task, timeout=grace_seconds)
    except asyncio.TimeoutError:
        get_logger(__name__).warning("serve.shutdown_timeout", grace_seconds=grace_seconds)


async def _serve(settings: Settings) -> int:
    engine = create_engine(settings.database_url)
    orchestrator = build_orchestrator(settings, create_session_factory(engine))
    health_server = HealthServer(settings.health, status_provider=orchestrator.status)

    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        with suppress(NotImplementedError):
            loop.add_signal_handler(sig, stop.set)

    await health_server.start()
    loop_task = asyncio.create_task(orchestrator.run_forever())
    try:
        await stop.wait()
    finally:
        await stop_loop(
            orchestrator,
            loop_task,
            grace_seconds=settings.aggregation.shutdown_grace_seconds,
        )
        await health_server.stop()
        await engine.dispose()
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="news-aggregator",
        description="Fetch and store news articles from all configured providers.",
    )
    subparsers = parser.add_subparsers(dest="command")
    subparsers.add_parser("fetch", help="run one aggregation pass (default)")
    subparsers.add_parser("serve", help="aggregate periodically and serve /health and /metrics")
    return parser


async def _run(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        settings = Settings()
    except ValidationError as exc:
        print("Invalid configuration:", file=sys.stderr)
        print(exc, file=sys.stderr)
        return EXIT_INVALID_CONFIG

    configure_logging(settings.log_level)
    configure_sentry(dsn=settings.sentry_dsn)
    get_logger(__name__).info("boot", command=args.command or "fetch", settings=settings.public_dict())

    if args.command == "serve":
        return await _serve(settings)
    return await _fetch(settings)


def main(argv: Sequence[str] | None = None) -> int:
    return asyncio.run(_run(argv))


if __name__ == "__main__":
    raise SystemExit(main())
