"""Stdlib :mod:`logging` handler forwarding records to Slack.

Purpose
-------
Attach the forwarder to the standard logging pipeline: every
:class:`logging.LogRecord` is translated into the structured JSON shape
(``msg``/``time``/``level`` plus bindings) and handed to a background queue.

Contents
--------
* :class:`SlackWebhookHandler` - :class:`logging.Handler` implementation.

System Role
-----------
Synchronous front door for applications that log through :mod:`logging`;
the queue worker drives :class:`SlackWebhookTransport` in arrival order.
"""

from __future__ import annotations

import logging
import socket
from typing import Any

from lib_log_slack.application.ports.webhook import WebhookPort
from lib_log_slack.application.use_cases._types import DiagnosticHook
from lib_log_slack.domain.levels import LogLevel
from lib_log_slack.domain.options import TransportOptions

from .queue import RecordQueue
from .transport import SlackWebhookTransport

_STANDARD_ATTRS = frozenset(vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None))) | {
    "message",
    "asctime",
    "taskName",
}

#: Loggers whose records would feed back into the webhook on delivery failures.
IGNORED_LOGGERS = ("lib_log_slack", "httpx", "httpcore", "asyncio")

_EXCEPTION_FORMATTER = logging.Formatter()


def _is_own_record(record: logging.LogRecord) -> bool:
    return any(record.name == name or record.name.startswith(f"{name}.") for name in IGNORED_LOGGERS)


class SlackWebhookHandler(logging.Handler):
    """Forward log records to a Slack incoming webhook on a worker thread.

    Parameters
    ----------
    options:
        Resolved :class:`TransportOptions`.
    level:
        Minimum stdlib level handled.
    webhook:
        Optional :class:`WebhookPort` replacing the default httpx client.
    diagnostic:
        Optional callback receiving transport and queue milestones.
    queue_maxsize, drop_policy, put_timeout, stop_timeout:
        Forwarded to :class:`RecordQueue`.
    """

    def __init__(
        self,
        options: TransportOptions,
        *,
        level: int = logging.NOTSET,
        webhook: WebhookPort | None = None,
        diagnostic: DiagnosticHook = None,
        queue_maxsize: int = 2048,
        drop_policy: str = "block",
        put_timeout: float | None = 1.0,
        stop_timeout: float | None = 5.0,
    ) -> None:
        super().__init__(level)
        self._options = options
        self._hostname = socket.gethostname()
        self._stop_timeout = stop_timeout
        self._transport = SlackWebhookTransport(options, webhook=webhook, diagnostic=diagnostic)
        self._queue = RecordQueue(
            worker=self._transport.send,
            maxsize=queue_maxsize,
            drop_policy=drop_policy,
            timeout=put_timeout,
            stop_timeout=stop_timeout,
            on_stop=self._transport.aclose,
            diagnostic=diagnostic,
        )
        self.addFilter(lambda record: not _is_own_record(record))
        self._queue.start()

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self._queue.put(self.to_structured(record))
        except Exception:  # noqa: BLE001
            self.handleError(record)

    def to_structured(self, record: logging.LogRecord) -> dict[str, Any]:
        """Return the JSON-style record for ``record``.

        Attributes passed through ``extra=`` become bindings; exception info
        becomes an ``err`` binding.
        """
        data: dict[str, Any] = {
            "level": LogLevel.from_python_level(record.levelno).value,
            "time": int(record.created * 1000),
            "pid": record.process,
            "hostname": self._hostname,
            "name": record.name,
            self._options.message_key: record.getMessage(),
        }
        for key, value in record.__dict__.items():
            if key in _STANDARD_ATTRS or key.startswith("_") or key in data:
                continue
            data[key] = value
        if record.exc_info and record.exc_info[1] is not None:
            exc = record.exc_info[1]
            data["err"] = {
                "type": type(exc).__name__,
                "message": str(exc),
                "stack": _EXCEPTION_FORMATTER.formatException(record.exc_info),
            }
        return data

    def flush(self) -> None:
        """Wait until queued records were delivered (bounded by ``stop_timeout``)."""
        self._queue.wait_until_idle(self._stop_timeout)

    def close(self) -> None:
        """Drain the queue, close the webhook client, and deregister the handler."""
        try:
            self._queue.stop(drain=True)
        finally:
            super().close()


__all__ = ["IGNORED_LOGGERS", "SlackWebhookHandler"]
