"""Data models for the diff/merge subsystem."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class Decision(str, Enum):
    """Answer to a single parameter conflict during an interactive merge."""

    yes = "yes"
    no = "no"
    all = "all"
    quit = "quit"

    @classmethod
    def parse(cls, text: str, default: Decision | None = None) -> Decision:
        """Accept ``y``/``n``/``a``/``q`` or the full word, case-insensitive.

        Empty input yields *default* (``yes`` when not given).
        """
        text = text.strip().lower()
        if not text:
            return default or cls.yes
        for member in cls:
            if member.value == text or member.value[0] == text:
                return member
        raise ValueError(f"Unknown answer {text!r}: expected one of y, n, a, q")


@dataclass(frozen=True)
class FieldConflict:
    """One differing writable parameter on a block present in both models."""

    target_path: str
    relative_path: str
    name: str
    old_value: Any
    new_value: Any


@dataclass(frozen=True)
class MergeResult:
    """Outcome of a diff or merge run."""

    target_root: str
    source_root: str
    unique_to_target: frozenset[str] = frozenset()
    added: tuple[str, ...] = ()
    mismatched: tuple[str, ...] = ()
    updated: tuple[str, ...] = ()
    missing: tuple[str, ...] = ()
    report: tuple[str, ...] = ()

    @property
    def has_changes(self) -> bool:
        """True if anything beyond the two header lines was reported."""
        return len(self.report) > 2
