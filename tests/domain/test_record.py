from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from lib_log_slack.domain.record import LogRecord, epoch_seconds, parse_time, render_timestamp


def test_from_mapping_splits_reserved_fields_from_bindings() -> None:
    record = LogRecord.from_mapping({"msg": "hi", "time": 5, "level": 40, "b": 2, "a": 1})

    assert (record.message, record.time, record.level) == ("hi", 5, 40)
    assert list(record.bindings) == ["b", "a"]


def test_from_mapping_honours_custom_message_key() -> None:
    record = LogRecord.from_mapping({"message": "custom", "msg": "plain"}, message_key="message")

    assert record.message == "custom"
    assert record.bindings == {"msg": "plain"}


def test_from_mapping_tolerates_missing_reserved_fields() -> None:
    record = LogRecord.from_mapping({"user": "a"})

    assert record.message is None
    assert record.time is None
    assert record.level is None


@pytest.mark.parametrize("value", ["text", 42, None, ["a"]])
def test_from_mapping_rejects_non_mappings(value: object) -> None:
    with pytest.raises(TypeError, match="must be a mapping"):
        LogRecord.from_mapping(value)  # type: ignore[arg-type]


def test_parse_time_reads_epoch_milliseconds() -> None:
    assert parse_time(1700000000000) == datetime(2023, 11, 14, 22, 13, 20, tzinfo=timezone.utc)


def test_parse_time_reads_iso_strings_with_zulu_suffix() -> None:
    assert parse_time("2023-11-14T22:13:20Z") == datetime(2023, 11, 14, 22, 13, 20, tzinfo=timezone.utc)


def test_parse_time_normalises_datetimes_to_utc() -> None:
    naive = datetime(2024, 1, 1, 12, 0)
    offset = datetime(2024, 1, 1, 14, 0, tzinfo=timezone(timedelta(hours=2)))

    assert parse_time(naive) == datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
    assert parse_time(offset) == datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize("value", [None, True, float("nan"), float("inf"), 10**30, "yesterday", {"t": 1}])
def test_parse_time_returns_none_for_invalid_values(value: object) -> None:
    assert parse_time(value) is None


def test_epoch_seconds_floors_milliseconds() -> None:
    assert epoch_seconds(1700000000999) == 1700000000
    assert epoch_seconds(1700000000999.5) == 1700000000
    assert epoch_seconds(-1) == -1


def test_render_timestamp_embeds_slack_date_token() -> None:
    assert render_timestamp(1700000000000) == (
        "<!date^1700000000^Posted {date_pretty} at {time_secs}|Posted Tue Nov 14 2023 22:13:20 UTC>"
    )


def test_render_timestamp_without_valid_time_omits_token() -> None:
    assert render_timestamp("garbage") == "Posted Invalid Date"
    assert render_timestamp(None) == "Posted Invalid Date"
