"""Forward structured log records to Slack incoming webhooks.

Import :func:`create_transport` for an async sink accepting parsed records or
raw NDJSON chunks, or :func:`create_handler` for a stdlib :mod:`logging`
handler. Both accept :class:`TransportOptions`, a mapping of option names, or
nothing at all (configuration is then read from the environment).
"""

from __future__ import annotations

from .adapters import SlackWebhookHandler, SlackWebhookTransport
from .domain import DEFAULT_COLORS, DEFAULT_EXCLUDED_KEYS, LogLevel, LogRecord, TransportOptions
from .lib_log_slack import create_handler, create_transport, summary_info

__all__ = [
    "DEFAULT_COLORS",
    "DEFAULT_EXCLUDED_KEYS",
    "LogLevel",
    "LogRecord",
    "SlackWebhookHandler",
    "SlackWebhookTransport",
    "TransportOptions",
    "create_handler",
    "create_transport",
    "summary_info",
]
