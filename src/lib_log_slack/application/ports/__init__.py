"""Ports (protocols) the application layer depends on."""

from __future__ import annotations

from .webhook import WebhookPort

__all__ = ["WebhookPort"]
