"""Structured log record as received from the host logging pipeline.

Purpose
-------
Give the duck-typed JSON record an explicit shape: three reserved fields
(message, time, level) plus a generic ``bindings`` mapping holding every other
attribute.

Contents
--------
* :class:`LogRecord` frozen dataclass with :meth:`LogRecord.from_mapping`.
* :func:`render_timestamp` producing the Slack date token for the context block.

System Role
-----------
Domain layer; the payload builder splits incoming records through here and
never touches raw mappings directly.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

DEFAULT_MESSAGE_KEY = "msg"
TIME_KEY = "time"
LEVEL_KEY = "level"

INVALID_DATE = "Invalid Date"

_FALLBACK_FORMAT = "%a %b %d %Y %H:%M:%S UTC"


@dataclass(slots=True, frozen=True)
class LogRecord:
    """One structured log entry split into reserved fields and bindings.

    Attributes
    ----------
    message:
        Value stored under the message key; forwarded only when it is a string.
    time:
        Epoch milliseconds (or anything :func:`parse_time` understands).
    level:
        Numeric severity used to select the attachment colour.
    bindings:
        Every non-reserved key/value pair, in the record's key order.
    """

    message: Any = None
    time: Any = None
    level: Any = None
    bindings: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], *, message_key: str = DEFAULT_MESSAGE_KEY) -> "LogRecord":
        """Split ``data`` into reserved fields and bindings.

        Examples
        --------
        >>> record = LogRecord.from_mapping({"msg": "hi", "time": 0, "level": 30, "user": "a"})
        >>> record.message, record.level, record.bindings
        ('hi', 30, {'user': 'a'})
        """

        if not isinstance(data, Mapping):
            raise TypeError(f"log record must be a mapping, got {type(data).__name__}")
        reserved = {message_key, TIME_KEY, LEVEL_KEY}
        bindings = {key: value for key, value in data.items() if key not in reserved}
        return cls(
            message=data.get(message_key),
            time=data.get(TIME_KEY),
            level=data.get(LEVEL_KEY),
            bindings=bindings,
        )


def parse_time(value: Any) -> datetime | None:
    """Interpret ``value`` as a UTC datetime, returning ``None`` when invalid.

    Numbers are epoch milliseconds, strings are ISO-8601 and naive datetimes
    are taken as UTC.
    """

    if isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
    if isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            return None
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str):
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
        return parse_time(parsed)
    return None


def epoch_seconds(value: Any) -> int | None:
    """Return ``floor(time_ms / 1000)`` for ``value`` or ``None`` when invalid.

    Examples
    --------
    >>> epoch_seconds(1700000000999)
    1700000000
    >>> epoch_seconds("not a date") is None
    True
    """

    if isinstance(value, int) and not isinstance(value, bool):
        if parse_time(value) is None:
            return None
        return value // 1000
    parsed = parse_time(value)
    if parsed is None:
        return None
    return math.floor(parsed.timestamp())


def render_timestamp(value: Any) -> str:
    """Return the mrkdwn text of the context block for ``value``.

    Slack renders the ``<!date^...>`` token in the reader's timezone and falls
    back to the text after ``|`` for clients that cannot.

    Examples
    --------
    >>> render_timestamp(1700000000000)
    '<!date^1700000000^Posted {date_pretty} at {time_secs}|Posted Tue Nov 14 2023 22:13:20 UTC>'
    >>> render_timestamp(None)
    'Posted Invalid Date'
    """

    seconds = epoch_seconds(value)
    if seconds is None:
        return f"Posted {INVALID_DATE}"
    fallback = datetime.fromtimestamp(seconds, tz=timezone.utc).strftime(_FALLBACK_FORMAT)
    return f"<!date^{seconds}^Posted {{date_pretty}} at {{time_secs}}|Posted {fallback}>"


__all__ = [
    "DEFAULT_MESSAGE_KEY",
    "INVALID_DATE",
    "LEVEL_KEY",
    "LogRecord",
    "TIME_KEY",
    "epoch_seconds",
    "parse_time",
    "render_timestamp",
]
