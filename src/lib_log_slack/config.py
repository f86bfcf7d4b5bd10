"""Environment-driven configuration for the Slack forwarder.

Purpose
-------
Translate environment variables (optionally seeded from a ``.env`` file via
python-dotenv) into :class:`TransportOptions`, so deployments can configure
the webhook without code changes.

Contents
--------
* :func:`enable_dotenv` - load the nearest ``.env`` once per process.
* :func:`options_from_env` - build options from ``SLACK_WEBHOOK_URL`` and the
  ``LOG_SLACK_*`` variables.

System Role
-----------
Used by the CLI and by :func:`lib_log_slack.create_transport` /
:func:`lib_log_slack.create_handler` when no explicit options are passed.
Explicit arguments always win over the environment.
"""

from __future__ import annotations

import os
import threading
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from lib_log_slack.domain.options import TransportOptions

DOTENV_ENV_VAR = "LOG_SLACK_USE_DOTENV"
WEBHOOK_URL_ENV_VAR = "SLACK_WEBHOOK_URL"

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}

_DOTENV_LOCK = threading.Lock()
_DOTENV_ATTEMPTED = False
_DOTENV_PATH: Path | None = None


def _find_dotenv(start: Path) -> Path | None:
    for directory in (start, *start.parents):
        candidate = directory / ".env"
        if candidate.is_file():
            return candidate.resolve()
    return None


def enable_dotenv(start: str | Path | None = None) -> Path | None:
    """Load the nearest ``.env`` file without overriding existing variables.

    The search walks upwards from ``start`` (default: the working directory).
    Only the first call per process touches the filesystem; later calls return
    the cached result.

    Returns
    -------
    Path | None
        Resolved path of the loaded file, ``None`` when no file was found.
    """

    global _DOTENV_ATTEMPTED, _DOTENV_PATH
    with _DOTENV_LOCK:
        if _DOTENV_ATTEMPTED:
            return _DOTENV_PATH
        _DOTENV_ATTEMPTED = True
        origin = Path(start) if start is not None else Path.cwd()
        path = _find_dotenv(origin.resolve())
        if path is not None:
            load_dotenv(path, override=False)
        _DOTENV_PATH = path
        return path


def _reset_dotenv_state_for_testing() -> None:
    global _DOTENV_ATTEMPTED, _DOTENV_PATH
    with _DOTENV_LOCK:
        _DOTENV_ATTEMPTED = False
        _DOTENV_PATH = None


def env_bool(name: str, default: bool, environ: Mapping[str, str] | None = None) -> bool:
    """Return the boolean value of an environment variable with fallback.

    Examples
    --------
    >>> env_bool("LOG_SLACK_KEEP_ALIVE", False, {"LOG_SLACK_KEEP_ALIVE": "yes"})
    True
    >>> env_bool("LOG_SLACK_KEEP_ALIVE", True, {})
    True
    """

    source = os.environ if environ is None else environ
    value = source.get(name)
    if value is None or not value.strip():
        return default
    normalized = value.strip().lower()
    if normalized in _TRUTHY:
        return True
    if normalized in _FALSY:
        return False
    raise ValueError(f"{name} must be a boolean (1/0, true/false, yes/no, on/off), got {value!r}")


def parse_colors(raw: str | None, *, name: str = "LOG_SLACK_COLORS") -> dict[int, str] | None:
    """Parse ``LEVEL=COLOR`` pairs separated by commas.

    Examples
    --------
    >>> parse_colors("30=#2EB67D, 50=#E01E5A")
    {30: '#2EB67D', 50: '#E01E5A'}
    >>> parse_colors(None) is None
    True
    """

    if raw is None or not raw.strip():
        return None
    colors: dict[int, str] = {}
    for chunk in raw.split(","):
        if not chunk.strip():
            continue
        if "=" not in chunk:
            raise ValueError(f"{name} entries must look like LEVEL=COLOR, got {chunk.strip()!r}")
        level_text, color = (part.strip() for part in chunk.split("=", 1))
        try:
            level = int(level_text)
        except ValueError as exc:
            raise ValueError(f"{name} level must be an integer, got {level_text!r}") from exc
        if not color:
            raise ValueError(f"{name} colour for level {level} must not be empty")
        colors[level] = color
    return colors


def parse_key_list(raw: str | None) -> frozenset[str] | None:
    """Parse a comma-separated key list; an empty string means "no keys".

    Examples
    --------
    >>> sorted(parse_key_list("hostname, pid,req"))
    ['hostname', 'pid', 'req']
    >>> parse_key_list("")
    frozenset()
    """

    if raw is None:
        return None
    return frozenset(part.strip() for part in raw.split(",") if part.strip())


def _optional_int(name: str, raw: str, *, allow_none: bool) -> int | None:
    text = raw.strip().lower()
    if allow_none and text in {"", "0", "none", "off"}:
        return None
    try:
        value = int(text)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {value}")
    return value


def _optional_float(name: str, raw: str) -> float | None:
    text = raw.strip().lower()
    if text in {"", "none", "off"}:
        return None
    try:
        value = float(text)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number of seconds, got {raw!r}") from exc
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {value}")
    return value


def _empty_to_none(value: str | None) -> str | None:
    if value is None or not value.strip():
        return None
    return value.strip()


def options_from_env(environ: Mapping[str, str] | None = None, **overrides: Any) -> TransportOptions:
    """Build :class:`TransportOptions` from the environment plus ``overrides``.

    Recognised variables: ``SLACK_WEBHOOK_URL``, ``LOG_SLACK_CHANNEL_KEY``,
    ``LOG_SLACK_COLORS``, ``LOG_SLACK_EXCLUDED_KEYS``,
    ``LOG_SLACK_IMAGE_URL_KEY``, ``LOG_SLACK_MESSAGE_KEY``,
    ``LOG_SLACK_KEEP_ALIVE``, ``LOG_SLACK_MAX_MESSAGE_CHARS``,
    ``LOG_SLACK_MAX_DEPTH`` and ``LOG_SLACK_TIMEOUT``. Overrides set to
    ``None`` are ignored so CLI flags can be passed through unconditionally.

    Raises
    ------
    ValueError
        When a variable is malformed. A missing webhook URL is not an error
        here; it resolves to an empty URL that fails on the first send.

    Examples
    --------
    >>> opts = options_from_env({"SLACK_WEBHOOK_URL": "https://hooks.example/x", "LOG_SLACK_EXCLUDED_KEYS": "pid"})
    >>> opts.webhook_url, sorted(opts.excluded_keys)
    ('https://hooks.example/x', ['pid'])
    """

    source = os.environ if environ is None else environ
    resolved: dict[str, Any] = {}

    webhook_url = _empty_to_none(source.get(WEBHOOK_URL_ENV_VAR))
    if webhook_url is not None:
        resolved["webhook_url"] = webhook_url
    for key, variable in (
        ("channel_key", "LOG_SLACK_CHANNEL_KEY"),
        ("image_url_key", "LOG_SLACK_IMAGE_URL_KEY"),
        ("message_key", "LOG_SLACK_MESSAGE_KEY"),
    ):
        value = _empty_to_none(source.get(variable))
        if value is not None:
            resolved[key] = value

    colors = parse_colors(source.get("LOG_SLACK_COLORS"))
    if colors is not None:
        resolved["colors"] = colors
    excluded = parse_key_list(source.get("LOG_SLACK_EXCLUDED_KEYS"))
    if excluded is not None:
        resolved["excluded_keys"] = excluded
    if "LOG_SLACK_KEEP_ALIVE" in source:
        resolved["keep_alive"] = env_bool("LOG_SLACK_KEEP_ALIVE", False, source)
    if "LOG_SLACK_MAX_MESSAGE_CHARS" in source:
        resolved["max_message_chars"] = _optional_int(
            "LOG_SLACK_MAX_MESSAGE_CHARS", source["LOG_SLACK_MAX_MESSAGE_CHARS"], allow_none=True
        )
    if "LOG_SLACK_MAX_DEPTH" in source:
        resolved["max_depth"] = _optional_int("LOG_SLACK_MAX_DEPTH", source["LOG_SLACK_MAX_DEPTH"], allow_none=False)
    if "LOG_SLACK_TIMEOUT" in source:
        resolved["timeout"] = _optional_float("LOG_SLACK_TIMEOUT", source["LOG_SLACK_TIMEOUT"])

    resolved.update({key: value for key, value in overrides.items() if value is not None})
    resolved.setdefault("webhook_url", "")
    return TransportOptions(**resolved)


__all__ = [
    "DOTENV_ENV_VAR",
    "WEBHOOK_URL_ENV_VAR",
    "enable_dotenv",
    "env_bool",
    "options_from_env",
    "parse_colors",
    "parse_key_list",
]
