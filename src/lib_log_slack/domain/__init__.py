"""Domain entities and value objects used by the Slack forwarder."""

from __future__ import annotations

from .flatten import DEFAULT_MAX_DEPTH, flatten_bindings
from .levels import DEFAULT_COLORS, LogLevel, resolve_color
from .options import DEFAULT_EXCLUDED_KEYS, DEFAULT_MAX_MESSAGE_CHARS, TransportOptions
from .record import DEFAULT_MESSAGE_KEY, LogRecord, render_timestamp

__all__ = [
    "DEFAULT_COLORS",
    "DEFAULT_EXCLUDED_KEYS",
    "DEFAULT_MAX_DEPTH",
    "DEFAULT_MAX_MESSAGE_CHARS",
    "DEFAULT_MESSAGE_KEY",
    "LogLevel",
    "LogRecord",
    "TransportOptions",
    "flatten_bindings",
    "render_timestamp",
    "resolve_color",
]
