"""Map one structured log record onto a Slack incoming-webhook message.

Purpose
-------
Produce the chat payload (section + context blocks and an optional attachment)
for a single record. The function is pure: no I/O, no shared state.

Contents
--------
* :func:`build_payload` - record mapping to payload dictionary.
* :func:`truncate_message` - message cap helper.

System Role
-----------
Formatting half of the per-record forward operation; the delivery half lives in
:mod:`lib_log_slack.application.use_cases.forward_record`.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from lib_log_slack.domain.flatten import flatten_bindings
from lib_log_slack.domain.levels import resolve_color
from lib_log_slack.domain.options import TransportOptions
from lib_log_slack.domain.record import LogRecord, render_timestamp

ELLIPSIS = "..."
CODE_FENCE = "```"
SHORT_FIELD_LIMIT = 500


def truncate_message(message: str, limit: int | None) -> str:
    """Cut ``message`` to ``limit`` characters and append ``...`` when cut.

    Examples
    --------
    >>> truncate_message("abcdef", 3)
    'abc...'
    >>> truncate_message("abc", 3)
    'abc'
    >>> truncate_message("abcdef", None)
    'abcdef'
    """

    if limit is None or len(message) <= limit:
        return message
    return f"{message[:limit]}{ELLIPSIS}"


def build_payload(record: Mapping[str, Any] | LogRecord, options: TransportOptions) -> dict[str, Any]:
    """Return the webhook payload for ``record``.

    Examples
    --------
    >>> opts = TransportOptions(webhook_url="https://hooks.example/x")
    >>> payload = build_payload({"msg": "hello", "time": 1700000000000, "level": 30, "pid": 1, "user": "a"}, opts)
    >>> payload["text"], payload["attachments"][0]["color"], payload["attachments"][0]["fields"]
    ('hello', '#2EB67D', [{'title': 'user', 'value': 'a', 'short': True}])
    """

    if not isinstance(record, LogRecord):
        record = LogRecord.from_mapping(record, message_key=options.message_key)
    bindings = record.bindings

    payload: dict[str, Any] = {"blocks": []}

    if options.channel_key is not None and options.channel_key in bindings:
        payload["channel"] = bindings[options.channel_key]

    if isinstance(record.message, str):
        text = truncate_message(record.message, options.max_message_chars)
        payload["text"] = text
        payload["blocks"].append(
            {
                "type": "section",
                "text": {"type": "mrkdwn", "text": f"{CODE_FENCE}{text}{CODE_FENCE}"},
            }
        )

    payload["blocks"].append(
        {
            "type": "context",
            "elements": [{"type": "mrkdwn", "text": render_timestamp(record.time)}],
        }
    )

    flat = flatten_bindings(bindings, excluded_keys=options.excluded_keys, max_depth=options.max_depth)
    fields = [{"title": title, "value": value, "short": len(value) < SHORT_FIELD_LIMIT} for title, value in flat.items()]

    image_url = bindings.get(options.image_url_key) if options.image_url_key is not None else None
    if not isinstance(image_url, str):
        image_url = None

    if fields or image_url is not None:
        attachment: dict[str, Any] = {}
        color = resolve_color(options.colors, record.level)
        if color is not None:
            attachment["color"] = color
        attachment["fields"] = fields
        if image_url is not None:
            attachment["image_url"] = image_url
        payload["attachments"] = [attachment]

    return payload


__all__ = ["build_payload", "truncate_message"]
