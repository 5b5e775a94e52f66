"""Unified-diff-like change report."""

from __future__ import annotations

import math
from collections.abc import Callable, Mapping
from typing import Any


def format_value(value: Any) -> str:
    """Render a parameter value as stable, human-readable text.

    Booleans use Simulink's ``on``/``off``; sequences use bracketed,
    space-separated elements with ``;`` between nested rows.
    """
    if isinstance(value, bool):
        return "on" if value else "off"
    if value is None:
        return "[]"
    if isinstance(value, str):
        return value
    if isinstance(value, float):
        if math.isfinite(value) and value.is_integer():
            return str(int(value))
        return repr(value)
    if isinstance(value, Mapping):
        items = sorted(value.items(), key=lambda kv: str(kv[0]))
        return "{" + ", ".join(f"{k}: {format_value(v)}" for k, v in items) + "}"
    if isinstance(value, (list, tuple)):
        if any(isinstance(v, (list, tuple)) for v in value):
            return "[" + "; ".join(_row(v) for v in value) + "]"
        return "[" + _row(value) + "]"
    return str(value)


def _row(value: Any) -> str:
    if isinstance(value, (list, tuple)):
        return " ".join(format_value(v) for v in value)
    return format_value(value)


class DiffReport:
    """Collects report lines in order and forwards each to an optional sink.

    The sink (e.g. ``typer.echo``) sees every line as soon as it is produced,
    so lines printed before a failure stay visible.
    """

    def __init__(self, sink: Callable[[str], Any] | None = None) -> None:
        self._sink = sink
        self.lines: list[str] = []

    def _emit(self, line: str) -> None:
        self.lines.append(line)
        if self._sink is not None:
            self._sink(line)

    def header(self, target_root: str, source_root: str) -> None:
        self._emit(f"--- {target_root}")
        self._emit(f"+++ {source_root}")

    def node_added(self, rel: str) -> None:
        self._emit(f"++ {rel} ++")

    def node_changed(self, rel: str) -> None:
        self._emit(f"@@ {rel} @@")

    def value_removed(self, name: str, value: Any) -> None:
        self._emit(f"-{name} = {format_value(value)}")

    def value_added(self, name: str, value: Any) -> None:
        self._emit(f"+{name} = {format_value(value)}")

    def schema_mismatch(self, rel: str) -> None:
        self._emit(f"!! {rel} !!")

    def node_removed(self, rel: str) -> None:
        self._emit(f"-- {rel} --")

    def text(self) -> str:
        return "\n".join(self.lines) + "\n" if self.lines else ""
