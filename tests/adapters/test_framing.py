from __future__ import annotations

import pytest

from lib_log_slack.adapters import framing
from lib_log_slack.adapters.framing import FrameSplitter


def test_single_newline_ndjson() -> None:
    batch = FrameSplitter().feed(b'{"a": 1}\n{"a": 2}\n')

    assert batch.records == [{"a": 1}, {"a": 2}]
    assert batch.rejected == []


def test_blank_line_separated_frames() -> None:
    batch = FrameSplitter().feed(b'{"a": 1}\n\n{"a": 2}\n\n')

    assert batch.records == [{"a": 1}, {"a": 2}]


def test_crlf_line_endings() -> None:
    assert FrameSplitter().feed(b'{"a": 1}\r\n{"a": 2}\r\n').records == [{"a": 1}, {"a": 2}]


def test_pretty_printed_record_spanning_lines() -> None:
    splitter = FrameSplitter()

    first = splitter.feed(b'{\n  "msg": "multi",\n')

    assert first.records == []
    assert splitter.pending is True

    second = splitter.feed(b'  "level": 30\n}\n')

    assert splitter.pending is False
    assert second.records == [{"msg": "multi", "level": 30}]


def test_chunk_boundary_inside_multibyte_character() -> None:
    data = '{"msg": "héllo ✓"}\n'.encode("utf-8")
    cut = data.index("✓".encode("utf-8")) + 1
    splitter = FrameSplitter()

    assert splitter.feed(data[:cut]).records == []
    assert splitter.pending is True
    assert splitter.feed(data[cut:]).records == [{"msg": "héllo ✓"}]


def test_unparseable_frame_is_rejected_at_blank_line() -> None:
    batch = FrameSplitter().feed(b'{"broken": \n\n{"a": 1}\n')

    assert batch.rejected == ['{"broken": ']
    assert batch.records == [{"a": 1}]


def test_close_flushes_unterminated_record() -> None:
    splitter = FrameSplitter()
    splitter.feed(b'{"a": 1}')

    assert splitter.pending is True
    assert splitter.close().records == [{"a": 1}]
    assert splitter.pending is False


def test_close_rejects_incomplete_tail() -> None:
    splitter = FrameSplitter()
    splitter.feed(b'{"a": ')

    batch = splitter.close()

    assert batch.records == []
    assert batch.rejected == ['{"a": ']


def test_accepts_text_chunks() -> None:
    assert FrameSplitter().feed('{"a": 1}\n').records == [{"a": 1}]


def test_non_object_json_values_are_passed_through() -> None:
    assert FrameSplitter().feed(b'"text"\n42\n').records == ["text", 42]


def test_garbage_line_between_ndjson_records_only_loses_itself() -> None:
    batch = FrameSplitter().feed(b'{"msg": "a"}\nGARBAGE\n{"msg": "b"}\n{"msg": "c"}\n')

    assert batch.records == [{"msg": "a"}, {"msg": "b"}, {"msg": "c"}]
    assert batch.rejected == ["GARBAGE"]


def test_truncated_record_is_rejected_when_next_record_arrives() -> None:
    splitter = FrameSplitter()

    batch = splitter.feed(b'{"msg": "a"}\n{"trunc\n{"msg": "b"}\n')

    assert batch.records == [{"msg": "a"}, {"msg": "b"}]
    assert batch.rejected == ['{"trunc']
    assert splitter.pending is False


def test_accumulated_frame_is_capped_by_line_count(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(framing, "MAX_FRAME_LINES", 3)
    splitter = FrameSplitter()

    batch = splitter.feed(b"x\n" * 4)

    assert batch.rejected == ["x\nx\nx\nx"]
    assert splitter.pending is False


def test_accumulated_frame_is_capped_by_size(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(framing, "MAX_FRAME_CHARS", 10)
    splitter = FrameSplitter()

    batch = splitter.feed(b"[\n" + b'"0123456789",\n')

    assert batch.rejected == ['[\n"0123456789",']
    assert splitter.pending is False
