from __future__ import annotations

import pytest

from news_aggregator.main import EXIT_INVALID_CONFIG, _run, build_parser, format_stats
from news_aggregator.services.aggregator import AggregationStats, FetchStatus, ProviderReport


def test_format_stats_prints_summary_lines() -> None:
    stats = AggregationStats.from_reports(
        [
            ProviderReport(identifier="newsapi", fetched=3, saved=2, skipped=1),
            ProviderReport(identifier="nytimes", status=FetchStatus.FAILED, errors=1, error="nytimes: HTTP 401"),
        ]
    )

    lines = format_stats(stats)

    assert lines[:4] == [
        "Fetched: 3 articles",
        "Saved: 2 new articles",
        "Skipped: 1 duplicates",
        "Errors: 1",
    ]
    assert lines[4] == "  newsapi: ok fetched=3 saved=2"
    assert lines[5] == "  nytimes: failed fetched=0 saved=0 error=nytimes: HTTP 401"


def test_format_stats_omits_zero_errors() -> None:
    lines = format_stats(AggregationStats())

    assert lines == ["Fetched: 0 articles", "Saved: 0 new articles", "Skipped: 0 duplicates"]


def test_parser_defaults_to_fetch() -> None:
    assert build_parser().parse_args([]).command is None
    assert build_parser().parse_args(["serve"]).command == "serve"


@pytest.mark.asyncio
async def test_invalid_configuration_exits_with_code_2(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    monkeypatch.delenv("DATABASE_URL", raising=False)

    code = await _run(["fetch"])

    assert code == EXIT_INVALID_CONFIG
    assert "Invalid configuration" in capsys.readouterr().err
