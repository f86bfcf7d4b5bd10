"""Numeric log levels and the colours attached to them in Slack attachments.

Purpose
-------
Offer a domain-specific representation of the numeric severities carried by
structured JSON log records (``level: 30`` and friends) together with the
bridges to the stdlib :mod:`logging` constants.

Contents
--------
* :class:`LogLevel` enum with conversion helpers.
* :data:`DEFAULT_COLORS` read-only mapping from level to attachment colour.
* :func:`resolve_color` lookup tolerant of string-keyed colour maps.

System Role
-----------
Used by the payload builder to pick the attachment colour and by the logging
handler to translate stdlib records into structured ones.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from enum import Enum
from types import MappingProxyType
from typing import Any


class LogLevel(Enum):
    """Severities used by structured JSON loggers."""

    TRACE = 10
    DEBUG = 20
    INFO = 30
    WARN = 40
    ERROR = 50
    FATAL = 60

    @property
    def severity(self) -> str:
        """Return the lowercase severity name for structured logging payloads."""

        return self.name.lower()

    def to_python_level(self) -> int:
        """Return the :mod:`logging` constant matching this level.

        Examples
        --------
        >>> LogLevel.WARN.to_python_level() == logging.WARNING
        True
        """

        return _TO_PYTHON[self]

    @classmethod
    def from_name(cls, name: str) -> "LogLevel":
        normalized = name.strip().upper()
        normalized = _NAME_ALIASES.get(normalized, normalized)
        try:
            return cls[normalized]
        except KeyError as exc:
            raise ValueError(f"Unknown log level: {name!r}") from exc

    @classmethod
    def from_numeric(cls, level: int) -> "LogLevel":
        """Return the :class:`LogLevel` corresponding to ``level``."""
        try:
            return cls(level)
        except ValueError as exc:
            raise ValueError(f"Unsupported log level numeric: {level}") from exc

    @classmethod
    def from_python_level(cls, level: int) -> "LogLevel":
        """Translate a stdlib logging level integer into :class:`LogLevel`.

        Custom levels between the stdlib constants round down to the nearest
        known one.

        Examples
        --------
        >>> LogLevel.from_python_level(logging.INFO)
        <LogLevel.INFO: 30>
        >>> LogLevel.from_python_level(45)
        <LogLevel.ERROR: 50>
        """
        if level >= logging.CRITICAL:
            return cls.FATAL
        if level >= logging.ERROR:
            return cls.ERROR
        if level >= logging.WARNING:
            return cls.WARN
        if level >= logging.INFO:
            return cls.INFO
        return cls.DEBUG


_TO_PYTHON = {
    LogLevel.TRACE: logging.DEBUG,
    LogLevel.DEBUG: logging.DEBUG,
    LogLevel.INFO: logging.INFO,
    LogLevel.WARN: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
    LogLevel.FATAL: logging.CRITICAL,
}

_NAME_ALIASES = {"WARNING": "WARN", "CRITICAL": "FATAL"}


#: Attachment colour per numeric level; levels below INFO have none.
DEFAULT_COLORS: Mapping[int, str] = MappingProxyType(
    {
        LogLevel.INFO.value: "#2EB67D",
        LogLevel.WARN.value: "#ECB22E",
        LogLevel.ERROR.value: "#E01E5A",
        LogLevel.FATAL.value: "#E01E5A",
    }
)


def resolve_color(colors: Mapping[Any, str], level: Any) -> str | None:
    """Return the colour configured for ``level`` or ``None``.

    Colour maps loaded from JSON or the environment are keyed by strings, so
    the lookup tries the raw level first and its string form second.

    Examples
    --------
    >>> resolve_color(DEFAULT_COLORS, 40)
    '#ECB22E'
    >>> resolve_color({"30": "#000000"}, 30)
    '#000000'
    >>> resolve_color(DEFAULT_COLORS, 20) is None
    True
    """

    try:
        if level in colors:
            return colors[level]
    except TypeError:
        return None
    return colors.get(str(level))


__all__ = ["DEFAULT_COLORS", "LogLevel", "resolve_color"]
