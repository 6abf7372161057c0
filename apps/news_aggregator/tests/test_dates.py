from __future__ import annotations

from datetime import datetime, timedelta, timezone

from news_aggregator.utils.dates import parse_timestamp


def test_parse_iso_zulu() -> None:
    assert parse_timestamp("2024-05-01T10:00:00Z") == datetime(2024, 5, 1, 10, 0, tzinfo=timezone.utc)


def test_parse_offset_is_converted_to_utc() -> None:
    parsed = parse_timestamp("2024-05-01T12:00:00+02:00")

    assert parsed == datetime(2024, 5, 1, 10, 0, tzinfo=timezone.utc)
    assert parsed.utcoffset() == timedelta(0)


def test_parse_naive_value_is_utc() -> None:
    assert parse_timestamp("2024-05-01 10:00:00") == datetime(2024, 5, 1, 10, 0, tzinfo=timezone.utc)


def test_parse_rfc2822() -> None:
    assert parse_timestamp("Wed, 01 May 2024 10:00:00 GMT") == datetime(
        2024, 5, 1, 10, 0, tzinfo=timezone.utc
    )


def test_parse_datetime_passthrough() -> None:
    value = datetime(2024, 5, 1, 10, 0)

    assert parse_timestamp(value) == datetime(2024, 5, 1, 10, 0, tzinfo=timezone.utc)


def test_unparseable_values_are_none() -> None:
    assert parse_timestamp(None) is None
    assert parse_timestamp("") is None
    assert parse_timestamp("   ") is None
    assert parse_timestamp("garbage") is None
