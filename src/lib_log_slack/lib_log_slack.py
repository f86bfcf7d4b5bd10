"""Public façade assembling Slack forwarders from options or the environment.

Purpose
-------
Expose the construction entry points host applications use instead of wiring
the domain, application and adapter layers themselves.

Contents
--------
* :func:`create_transport` - async sink for structured records and NDJSON.
* :func:`create_handler` - stdlib :mod:`logging` handler.
* :func:`summary_info` - metadata banner used by the CLI.

System Role
-----------
Composition root. Construction only resolves defaults; no network I/O happens
until the first record is sent, so a bad webhook URL shows up as a logged
delivery failure rather than a construction error.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from .adapters import SlackWebhookHandler, SlackWebhookTransport
from .application.ports import WebhookPort
from .application.use_cases._types import DiagnosticHook
from .config import options_from_env
from .domain import TransportOptions


def resolve_options(options: TransportOptions | Mapping[str, Any] | None = None, **overrides: Any) -> TransportOptions:
    """Normalise the accepted option inputs into :class:`TransportOptions`.

    ``None`` reads the environment (see :func:`lib_log_slack.config.options_from_env`);
    a mapping may use snake_case or camelCase keys. Keyword ``overrides`` win.

    Examples
    --------
    >>> resolve_options({"webhookUrl": "https://hooks.example/x"}, channel_key="channel").channel_key
    'channel'
    """

    if options is None:
        return options_from_env(**overrides)
    if not isinstance(options, TransportOptions):
        options = TransportOptions.from_mapping(options)
    if overrides:
        options = options.replace(**overrides)
    return options


def create_transport(
    options: TransportOptions | Mapping[str, Any] | None = None,
    /,
    *,
    webhook: WebhookPort | None = None,
    diagnostic: DiagnosticHook = None,
    **overrides: Any,
) -> SlackWebhookTransport:
    """Construct the forwarder sink.

    Parameters
    ----------
    options:
        :class:`TransportOptions`, a mapping of option names, or ``None`` to
        read ``SLACK_WEBHOOK_URL``/``LOG_SLACK_*`` from the environment.
    webhook:
        Optional delivery adapter replacing the httpx client.
    diagnostic:
        Optional callback receiving pipeline milestones.
    **overrides:
        Individual option fields applied on top of ``options``.

    Examples
    --------
    >>> transport = create_transport(webhook_url="https://hooks.example/x", channel_key="channel")
    >>> transport.options.channel_key, transport.options.max_message_chars
    ('channel', 2500)
    """

    return SlackWebhookTransport(resolve_options(options, **overrides), webhook=webhook, diagnostic=diagnostic)


def create_handler(
    options: TransportOptions | Mapping[str, Any] | None = None,
    /,
    *,
    level: int | str = logging.NOTSET,
    webhook: WebhookPort | None = None,
    diagnostic: DiagnosticHook = None,
    **overrides: Any,
) -> SlackWebhookHandler:
    """Construct a :class:`logging.Handler` forwarding records to Slack.

    The handler starts its worker thread immediately; call ``close()`` (or
    :func:`logging.shutdown`) to drain pending records.
    """

    resolved_level = logging.getLevelName(level.upper()) if isinstance(level, str) else level
    if not isinstance(resolved_level, int):
        raise ValueError(f"Unknown log level: {level!r}")
    return SlackWebhookHandler(
        resolve_options(options, **overrides),
        level=resolved_level,
        webhook=webhook,
        diagnostic=diagnostic,
    )


def summary_info() -> str:
    """Return the metadata banner used by the CLI entry point.

    Examples
    --------
    >>> "version" in summary_info()
    True
    """

    from . import __init__conf__

    lines: list[str] = []
    __init__conf__.print_info(writer=lines.append)
    return "".join(lines)


__all__ = ["create_handler", "create_transport", "resolve_options", "summary_info"]
