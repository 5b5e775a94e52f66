"""Interaction policies deciding whether a differing parameter gets applied."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Protocol, runtime_checkable

from slmerge_core.merge.models import Decision, FieldConflict

logger = logging.getLogger(__name__)


@runtime_checkable
class InteractionPolicy(Protocol):
    """Resolves one parameter conflict. Only consulted in merge mode."""

    def decide(self, conflict: FieldConflict) -> Decision: ...


class BatchPolicy:
    """Non-interactive policy: always apply, or never."""

    def __init__(self, apply: bool = True) -> None:
        self.apply = apply

    def decide(self, conflict: FieldConflict) -> Decision:
        return Decision.yes if self.apply else Decision.no


class ScriptedPolicy:
    """Replays a fixed sequence of answers, then falls back to *default*."""

    def __init__(
        self,
        answers: Iterable[Decision | str],
        default: Decision = Decision.yes,
    ) -> None:
        self._answers = [
            a if isinstance(a, Decision) else Decision.parse(a) for a in answers
        ]
        self.default = default
        self.asked: list[FieldConflict] = []

    @classmethod
    def from_string(cls, letters: str, default: Decision = Decision.yes) -> ScriptedPolicy:
        """Build from a compact answer string such as ``"ynaq"``."""
        return cls([Decision.parse(ch) for ch in letters if not ch.isspace()], default)

    def decide(self, conflict: FieldConflict) -> Decision:
        self.asked.append(conflict)
        if self._answers:
            return self._answers.pop(0)
        logger.debug("Scripted answers exhausted; using %s", self.default.value)
        return self.default
