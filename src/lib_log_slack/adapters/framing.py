"""Split raw byte chunks into JSON log records.

Records arrive as newline-delimited JSON, one per line or separated by a blank
line. A record may also span several lines (pretty-printed JSON); lines are
accumulated until they parse. An accumulated frame is rejected when a blank
line ends it, when a later line parses as a record on its own, or when it grows
past :data:`MAX_FRAME_LINES` / :data:`MAX_FRAME_CHARS`, so one broken line
never swallows the records after it. Chunks can break anywhere, including
inside a multi-byte UTF-8 sequence.
"""

from __future__ import annotations

import codecs
import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

MAX_FRAME_LINES = 1000
MAX_FRAME_CHARS = 1024 * 1024

_UNPARSED = object()


@dataclass(slots=True)
class FrameBatch:
    """Outcome of feeding one chunk: parsed records plus frames that never parsed."""

    records: list[Any] = field(default_factory=list)
    rejected: list[str] = field(default_factory=list)


def _loads(text: str) -> Any:
    try:
        return json.loads(text)
    except ValueError:
        return _UNPARSED


class FrameSplitter:
    """Incremental NDJSON splitter.

    Examples
    --------
    >>> splitter = FrameSplitter()
    >>> splitter.feed(b'{"msg": "a"}\\n\\n{"msg"').records
    [{'msg': 'a'}]
    >>> splitter.feed(b': "b"}\\n').records
    [{'msg': 'b'}]
    >>> batch = splitter.feed('not json\\n{"msg": "c"}\\n')
    >>> batch.rejected, batch.records
    (['not json'], [{'msg': 'c'}])
    """

    def __init__(self) -> None:
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._partial_line = ""
        self._frame_lines: list[str] = []
        self._frame_chars = 0

    @property
    def pending(self) -> bool:
        """Return ``True`` while an incomplete line or frame is buffered."""
        return bool(self._partial_line or self._frame_lines)

    def feed(self, chunk: bytes | str) -> FrameBatch:
        """Consume ``chunk`` and return every frame it completed."""
        text = self._decoder.decode(chunk) if isinstance(chunk, (bytes, bytearray)) else chunk
        *lines, self._partial_line = (self._partial_line + text).split("\n")
        batch = FrameBatch()
        for line in lines:
            self._take(line.rstrip("\r"), batch)
        return batch

    def close(self) -> FrameBatch:
        """Flush the buffered tail as if the stream ended with a blank line."""
        tail = self._partial_line + self._decoder.decode(b"", final=True)
        self._partial_line = ""
        batch = FrameBatch()
        self._take(tail.rstrip("\r"), batch)
        self._reject_frame(batch)
        return batch

    def _take(self, line: str, batch: FrameBatch) -> None:
        if not line.strip():
            self._reject_frame(batch)
            return
        if not self._frame_lines:
            record = _loads(line)
            if record is _UNPARSED:
                self._start_frame(line)
            else:
                batch.records.append(record)
            return

        record = _loads("\n".join((*self._frame_lines, line)))
        if record is not _UNPARSED:
            self._frame_lines = []
            self._frame_chars = 0
            batch.records.append(record)
            return
        # a complete record on its own line means the buffered frame was broken
        standalone = _loads(line)
        if isinstance(standalone, Mapping):
            self._reject_frame(batch)
            batch.records.append(standalone)
            return
        self._frame_lines.append(line)
        self._frame_chars += len(line)
        if len(self._frame_lines) > MAX_FRAME_LINES or self._frame_chars > MAX_FRAME_CHARS:
            self._reject_frame(batch)

    def _start_frame(self, line: str) -> None:
        self._frame_lines = [line]
        self._frame_chars = len(line)

    def _reject_frame(self, batch: FrameBatch) -> None:
        if self._frame_lines:
            batch.rejected.append("\n".join(self._frame_lines))
            self._frame_lines = []
            self._frame_chars = 0


__all__ = ["FrameBatch", "FrameSplitter", "MAX_FRAME_CHARS", "MAX_FRAME_LINES"]
