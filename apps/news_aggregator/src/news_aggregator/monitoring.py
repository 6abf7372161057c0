"""Sentry integration helpers.

All helpers degrade to no-ops when ``sentry_sdk`` is not installed or no DSN
was configured, so call sites never need to guard them.
"""

from __future__ import annotations

from collections.abc import Mapping

from news_aggregator.logging import get_logger

_sentry_enabled = False


def configure_sentry(*, dsn: str | None, environment: str | None = None) -> bool:
    global _sentry_enabled
    if not dsn:
        return False

    try:
        import sentry_sdk
    except ModuleNotFoundError:
        get_logger(__name__).warning("sentry_sdk_not_installed")
        return False

    sentry_sdk.init(dsn=dsn, environment=environment, traces_sample_rate=0.0)
    _sentry_enabled = True
    get_logger(__name__).info("sentry_initialized", environment=environment)
    return True


def add_sentry_breadcrumb(
    *,
    category: str,
    message: str,
    level: str = "info",
    data: Mapping[str, object] | None = None,
) -> None:
    if not _sentry_enabled:
        return
    import sentry_sdk

    sentry_sdk.add_breadcrumb(
        category=category,
        message=message,
        level=level,
        data=dict(data or {}),
    )


def capture_sentry_exception(exc: BaseException, *, context: Mapping[str, object] | None = None) -> None:
    if not _sentry_enabled:
        return
    import sentry_sdk

    with sentry_sdk.new_scope() as scope:
        for key, value in (context or {}).items():
            scope.set_extra(str(key), value)
        sentry_sdk.capture_exception(exc)
