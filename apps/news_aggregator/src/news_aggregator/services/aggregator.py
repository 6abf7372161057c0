"""News aggregation run: fetch every provider, dedup, resolve and store."""

from __future__ import annotations

import asyncio
import enum
from collections.abc import Callable
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any

import httpx
from sqlalchemy.exc import InterfaceError, OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from news_aggregator.clients.base import NormalizedArticle, SourceClient
from news_aggregator.clients.registry import ClientRegistry
from news_aggregator.config import AggregationSettings
from news_aggregator.errors import (
    ConfigurationGapError,
    DuplicateArticleError,
    PersistenceError,
    StorageUnavailableError,
)
from news_aggregator.logging import get_logger, run_context
from news_aggregator.monitoring import add_sentry_breadcrumb, capture_sentry_exception
from news_aggregator.repositories.sources import SourceRepository
from news_aggregator.services.dedup import Deduplicator
from news_aggregator.services.entities import EntityResolver
from news_aggregator.services.metrics import metrics
from news_aggregator.services.writer import ArticleWriter

# asyncpg surfaces refused connections as plain OSError
STORAGE_ERRORS = (OperationalError, InterfaceError, OSError)

HttpClientFactory = Callable[[], httpx.AsyncClient]


class RunState(enum.StrEnum):
    IDLE = "IDLE"
    RUNNING = "RUNNING"
    COMPLETED = "COMPLETED"


class FetchStatus(enum.StrEnum):
    OK = "ok"
    EMPTY = "empty"
    FAILED = "failed"
    SOURCE_MISSING = "source_missing"
    STORAGE_FAILED = "storage_failed"
    CANCELLED = "cancelled"


class ArticleOutcome(enum.StrEnum):
    SAVED = "saved"
    SKIPPED = "skipped"
    FAILED = "failed"
    STORAGE_FAILED = "storage_failed"


@dataclass(slots=True)
class ProviderReport:
    identifier: str
    status: FetchStatus = FetchStatus.OK
    fetched: int = 0
    saved: int = 0
    skipped: int = 0
    errors: int = 0
    stopped_early: bool = False
    error: str | None = None
    storage_ok: int = 0
    storage_failures: int = 0

    def record(self, outcome: ArticleOutcome) -> None:
        if outcome == ArticleOutcome.SAVED:
            self.saved += 1
            self.storage_ok += 1
        elif outcome == ArticleOutcome.SKIPPED:
            self.skipped += 1
            self.storage_ok += 1
        elif outcome == ArticleOutcome.STORAGE_FAILED:
            self.errors += 1
            self.storage_failures += 1
        else:
            self.errors += 1


@dataclass(slots=True)
class AggregationStats:
    fetched: int = 0
    saved: int = 0
    skipped: int = 0
    errors: int = 0
    providers: list[ProviderReport] = field(default_factory=list)
    stopped_early: bool = False
    started_at: datetime | None = None
    finished_at: datetime | None = None

    @classmethod
    def from_reports(cls, reports: list[ProviderReport]) -> AggregationStats:
        stats = cls(providers=list(reports))
        for report in reports:
            stats.fetched += report.fetched
            stats.saved += report.saved
            stats.skipped += report.skipped
            stats.errors += report.errors
            stats.stopped_early = stats.stopped_early or report.stopped_early
        return stats

    @property
    def storage_unreachable(self) -> bool:
        failures = sum(report.storage_failures for report in self.providers)
        successes = sum(report.storage_ok for report in self.providers)
        return failures > 0 and successes == 0

    def summary(self) -> dict[str, int]:
        return {
            "fetched": self.fetched,
            "saved": self.saved,
            "skipped": self.skipped,
            "errors": self.errors,
        }

    def as_dict(self) -> dict[str, Any]:
        data = self.summary()
        data["stopped_early"] = self.stopped_early
        data["started_at"] = self.started_at.isoformat() if self.started_at else None
        data["finished_at"] = self.finished_at.isoformat() if self.finished_at else None
        data["providers"] = [asdict(report) for report in self.providers]
        return data


class AggregationOrchestrator:
    def __init__(
        self,
        *,
        settings: AggregationSettings,
        session_factory: async_sessionmaker[AsyncSession],
        registry: ClientRegistry,
        source_repo: SourceRepository | None = None,
        deduplicator: Deduplicator | None = None,
        resolver: EntityResolver | None = None,
        writer: ArticleWriter | None = None,
        http_factory: HttpClientFactory | None = None,
    ) -> None:
        self._settings = settings
        self._session_factory = session_factory
        self._registry = registry
        self._sources = source_repo or SourceRepository()
        self._dedup = deduplicator or Deduplicator()
        self._resolver = resolver or EntityResolver()
        self._writer = writer or ArticleWriter(max_slug_attempts=settings.slug_max_attempts)
        self._http_factory = http_factory or self._default_http_client
        self._run_lock = asyncio.Lock()
        self._stop = asyncio.Event()
        self._state = RunState.IDLE
        self._last_stats: AggregationStats | None = None
        self._log = get_logger(__name__)

    @property
    def state(self) -> RunState:
        return self._state

    @property
    def last_stats(self) -> AggregationStats | None:
        return self._last_stats

    def status(self) -> dict[str, Any]:
        return {
            "state": self._state.value,
            "last_run": self._last_stats.as_dict() if self._last_stats else None,
        }

    def request_stop(self) -> None:
        """Stop issuing fetches and writes; in-flight transactions still finish.

        The stop stays in force for standalone ``run_once`` calls until
        ``run_forever`` returns, which clears it so the orchestrator can be
        started again.
        """
        self._stop.set()

    async def run_forever(self) -> None:
        try:
            while not self._stop.is_set():
                try:
                    await self.run_once()
                except asyncio.CancelledError:
                    raise
                except Exception:
                    self._log.exception("aggregation.loop_error")
                    add_sentry_breadcrumb(
                        category="aggregation",
                        message="aggregation loop error",
                        level="error",
                    )
                try:
                    await asyncio.wait_for(
                        self._stop.wait(),
                        timeout=self._settings.poll_interval_seconds,
                    )
                except asyncio.TimeoutError:
                    continue
        finally:
            self._stop.clear()

    async def run_once(self) -> AggregationStats:
        async with self._run_lock:
            with run_context():
                return await self._run_locked()

    async def _run_locked(self) -> AggregationStats:
        self._state = RunState.RUNNING
        started_at = datetime.now(timezone.utc)
        deadline = None
        if self._settings.run_timeout_seconds:
            deadline = asyncio.get_running_loop().time() + self._settings.run_timeout_seconds
        try:
            reports = await self._run_clients(deadline)
        finally:
            self._state = RunState.COMPLETED

        stats = AggregationStats.from_reports(reports)
        stats.started_at = started_at
        stats.finished_at = datetime.now(timezone.utc)
        self._last_stats = stats
        self._publish_metrics(stats)

        if stats.storage_unreachable:
            self._log.error("aggregation.storage_unreachable", **stats.summary())
            error = StorageUnavailableError("storage unreachable for every attempt of the run")
            capture_sentry_exception(error, context=stats.summary())
            raise error

        log_method = self._log.warning if stats.errors else self._log.info
        log_method(
            "aggregation.run_summary",
            providers=len(stats.providers),
            stopped_early=stats.stopped_early,
            **stats.summary(),
        )
        return stats

    async def _run_clients(self, deadline: float | None) -> list[ProviderReport]:
        async with self._http_factory() as http:
            clients = self._registry.active_clients(http)
            if not clients:
                self._log.warning("aggregation.no_active_providers")
                return []
            limit = self._settings.max_concurrent_fetches or len(clients)
            semaphore = asyncio.Semaphore(limit)
            return list(
                await asyncio.gather(
                    *(self._run_client(client, semaphore, deadline) for client in clients)
                )
            )

    async def _run_client(
        self,
        client: SourceClient,
        semaphore: asyncio.Semaphore,
        deadline: float | None,
    ) -> ProviderReport:
        report = ProviderReport(identifier=client.identifier)
        async with semaphore:
            try:
                await self._process_client(client, report, deadline)
            except asyncio.CancelledError:
                raise
            except Exception as exc:
                report.status = FetchStatus.FAILED
                report.errors += 1
                report.error = str(exc)
                self._log.exception("aggregation.provider_crashed", provider=client.identifier)
                capture_sentry_exception(exc, context={"provider": client.identifier})
        metrics.inc_counter(
            "aggregation_fetch_total",
            labels={"provider": report.identifier, "status": report.status.value},
        )
        return report

    async def _process_client(
        self,
        client: SourceClient,
        report: ProviderReport,
        deadline: float | None,
    ) -> None:
        if self._should_stop(deadline):
            report.status = FetchStatus.CANCELLED
            report.stopped_early = True
            return

        result = await client.fetch()
        if result.failed:
            report.status = FetchStatus.FAILED
            report.errors += 1
            report.error = str(result.error)
            self._log.warning(
                "aggregation.fetch_failed",
                provider=client.identifier,
                error=report.error,
            )
            add_sentry_breadcrumb(
                category="aggregation",
                message="provider fetch failed",
                level="warning",
                data={"provider": client.identifier, "error": report.error},
            )
            return

        report.fetched = len(result.articles)
        if not result.articles:
            report.status = FetchStatus.EMPTY
            return

        try:
            source_id = await self._lookup_source_id(client.identifier)
        except ConfigurationGapError as exc:
            # the lookup itself reached storage
            report.storage_ok += 1
            report.status = FetchStatus.SOURCE_MISSING
            report.error = str(exc)
            self._log.warning("aggregation.source_missing", provider=client.identifier)
            return
        except STORAGE_ERRORS as exc:
            report.status = FetchStatus.STORAGE_FAILED
            report.errors += 1
            report.storage_failures += 1
            report.error = str(exc)
            self._log.error(
                "aggregation.source_lookup_failed",
                provider=client.identifier,
                error=str(exc),
            )
            return
        report.storage_ok += 1

        for article in result.articles:
            if self._should_stop(deadline):
                report.stopped_early = True
                self._log.info(
                    "aggregation.stopped",
                    provider=client.identifier,
                    remaining=report.fetched - report.saved - report.skipped - report.errors,
                )
                break
            # a started transaction runs to commit or rollback even if the run is cancelled
            outcome = await asyncio.shield(
                self._process_article(client.identifier, article, source_id)
            )
            report.record(outcome)
            metrics.inc_counter(
                "aggregation_articles_total",
                labels={"provider": client.identifier, "outcome": outcome.value},
            )

    async def _lookup_source_id(self, identifier: str) -> int:
        async with self._session_factory() as session:
            async with session.begin():
                source = await self._sources.get_by_api_identifier(session, identifier)
        if source is None:
            raise ConfigurationGapError(identifier)
        return source.id

    async def _process_article(
        self,
        provider: str,
        article: NormalizedArticle,
        source_id: int,
    ) -> ArticleOutcome:
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    if await self._dedup.exists(session, article.url):
                        return ArticleOutcome.SKIPPED
                    author = await self._resolver.resolve_author(
                        session,
                        article.author_name,
                        article.author_email,
                    )
                    category = await self._resolver.resolve_category(session, article.category_label)
                    stored = await self._writer.write(
                        session,
                        article,
                        source_id=source_id,
                        author=author,
                        category=category,
                    )
        except DuplicateArticleError:
            self._log.info("aggregation.duplicate_on_write", provider=provider, url=article.url)
            return ArticleOutcome.SKIPPED
        except STORAGE_ERRORS as exc:
            self._log.error(
                "aggregation.storage_error",
                provider=provider,
                url=article.url,
                error=str(exc),
            )
            return ArticleOutcome.STORAGE_FAILED
        except (PersistenceError, SQLAlchemyError) as exc:
            self._log.error(
                "aggregation.save_failed",
                provider=provider,
                url=article.url,
                title=article.title,
                error=str(exc),
            )
            capture_sentry_exception(exc, context={"provider": provider, "url": article.url})
            return ArticleOutcome.FAILED
        except Exception as exc:
            self._log.exception(
                "aggregation.save_crashed",
                provider=provider,
                url=article.url,
                title=article.title,
            )
            capture_sentry_exception(exc, context={"provider": provider, "url": article.url})
            return ArticleOutcome.FAILED

        self._log.debug(
            "aggregation.article_saved",
            provider=provider,
            article_id=stored.id,
            url=article.url,
        )
        return ArticleOutcome.SAVED

    def _should_stop(self, deadline: float | None) -> bool:
        if self._stop.is_set():
            return True
        return deadline is not None and asyncio.get_running_loop().time() >= deadline

    def _default_http_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self._settings.request_timeout_seconds,
            follow_redirects=True,
            headers={"User-Agent": self._settings.user_agent},
        )

    @staticmethod
    def _publish_metrics(stats: AggregationStats) -> None:
        metrics.inc_counter("aggregation_runs_total")
        for name, value in stats.summary().items():
            metrics.set_gauge(f"aggregation_last_run_{name}", float(value))
        if stats.finished_at is not None:
            metrics.set_gauge("aggregation_last_run_timestamp", stats.finished_at.timestamp())
