from __future__ import annotations

import asyncio
import logging

import pytest
import structlog

from news_aggregator.logging import configure_logging, level_value, run_context


def test_level_value_accepts_names_and_falls_back_to_info() -> None:
    assert level_value("debug") == logging.DEBUG
    assert level_value(" WARNING ") == logging.WARNING
    assert level_value("chatty") == logging.INFO


def test_http_client_loggers_stay_quiet_at_debug() -> None:
    configure_logging("DEBUG")

    assert logging.getLogger("httpx").level == logging.WARNING
    assert logging.getLogger("httpcore").level == logging.WARNING


@pytest.mark.asyncio
async def test_run_context_reaches_spawned_tasks() -> None:
    async def read_run_id() -> object:
        return structlog.contextvars.get_contextvars().get("run_id")

    with run_context("run-1") as run_id:
        inside = await asyncio.gather(read_run_id(), read_run_id())

    assert run_id == "run-1"
    assert inside == ["run-1", "run-1"]
    assert "run_id" not in structlog.contextvars.get_contextvars()


def test_run_context_generates_id() -> None:
    with run_context() as run_id:
        assert len(run_id) == 12
