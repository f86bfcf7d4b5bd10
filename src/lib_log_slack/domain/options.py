"""Transport options resolved once when a forwarder is constructed."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, fields, replace
from types import MappingProxyType
from typing import Any

from .flatten import DEFAULT_MAX_DEPTH
from .levels import DEFAULT_COLORS
from .record import DEFAULT_MESSAGE_KEY

DEFAULT_EXCLUDED_KEYS: frozenset[str] = frozenset({"hostname", "pid"})
DEFAULT_MAX_MESSAGE_CHARS = 2500

_CAMEL_ALIASES = {
    "webhookUrl": "webhook_url",
    "channelKey": "channel_key",
    "excludedKeys": "excluded_keys",
    "imageUrlKey": "image_url_key",
    "messageKey": "message_key",
    "keepAlive": "keep_alive",
    "maxMessageChars": "max_message_chars",
    "maxDepth": "max_depth",
}


def _freeze_colors(colors: Mapping[Any, str]) -> Mapping[Any, str]:
    if isinstance(colors, MappingProxyType):
        return colors
    return MappingProxyType(dict(colors))


def _freeze_keys(keys: Iterable[str] | Mapping[str, Any]) -> frozenset[str]:
    if isinstance(keys, str):
        return frozenset({keys})
    return frozenset(keys)


@dataclass(slots=True, frozen=True)
class TransportOptions:
    """Immutable configuration of a Slack webhook forwarder.

    Attributes
    ----------
    webhook_url:
        Incoming Webhook URL. Not validated; a bad URL surfaces when sending.
    channel_key:
        Binding whose value overrides the destination channel.
    colors:
        Mapping from numeric level to attachment colour.
    excluded_keys:
        Binding names never rendered as attachment fields.
    image_url_key:
        Binding whose string value becomes the attachment ``image_url``.
    message_key:
        Record key holding the human-readable message.
    keep_alive:
        Reuse one persistent HTTP client for every request.
    max_message_chars:
        Messages longer than this are cut and suffixed with ``...``; ``None``
        forwards messages unmodified.
    max_depth:
        Depth bound applied when flattening bindings.
    timeout:
        Transport timeout in seconds; ``None`` waits as long as the server does.
    """

    webhook_url: str
    channel_key: str | None = None
    colors: Mapping[Any, str] = field(default_factory=lambda: DEFAULT_COLORS)
    excluded_keys: frozenset[str] = DEFAULT_EXCLUDED_KEYS
    image_url_key: str | None = None
    message_key: str = DEFAULT_MESSAGE_KEY
    keep_alive: bool = False
    max_message_chars: int | None = DEFAULT_MAX_MESSAGE_CHARS
    max_depth: int = DEFAULT_MAX_DEPTH
    timeout: float | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "colors", _freeze_colors(self.colors))
        object.__setattr__(self, "excluded_keys", _freeze_keys(self.excluded_keys))

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> "TransportOptions":
        """Build options from snake_case or camelCase keys.

        Examples
        --------
        >>> opts = TransportOptions.from_mapping({"webhookUrl": "https://hooks.example/x", "keepAlive": True})
        >>> opts.webhook_url, opts.keep_alive, sorted(opts.excluded_keys)
        ('https://hooks.example/x', True, ['hostname', 'pid'])
        """

        known = {item.name for item in fields(cls)}
        resolved: dict[str, Any] = {}
        for key, value in payload.items():
            name = _CAMEL_ALIASES.get(key, key)
            if name not in known:
                raise TypeError(f"Unknown transport option: {key!r}")
            if value is None and name not in {"channel_key", "image_url_key", "max_message_chars", "timeout"}:
                continue
            resolved[name] = value
        if "webhook_url" not in resolved:
            raise TypeError("webhook_url is required")
        return cls(**resolved)

    def replace(self, **changes: Any) -> "TransportOptions":
        """Return a copy with ``changes`` applied."""

        return replace(self, **changes)


__all__ = ["DEFAULT_EXCLUDED_KEYS", "DEFAULT_MAX_MESSAGE_CHARS", "TransportOptions"]
