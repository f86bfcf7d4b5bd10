"""Adapters connecting the forwarder to httpx, asyncio and stdlib logging."""

from __future__ import annotations

from .framing import FrameSplitter
from .handler import SlackWebhookHandler
from .queue import RecordQueue
from .transport import SlackWebhookTransport
from .webhook import HttpxWebhookClient

__all__ = [
    "FrameSplitter",
    "HttpxWebhookClient",
    "RecordQueue",
    "SlackWebhookHandler",
    "SlackWebhookTransport",
]
