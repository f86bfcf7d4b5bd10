"""Shared type aliases for the application use cases."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeAlias

ProcessResult: TypeAlias = dict[str, Any]
DiagnosticHook: TypeAlias = Callable[[str, dict[str, Any]], None] | None

__all__ = ["DiagnosticHook", "ProcessResult"]
