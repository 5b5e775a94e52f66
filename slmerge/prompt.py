"""Console adapter for interactive parameter conflicts."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.markup import escape
from rich.prompt import Prompt

from slmerge_core.merge.models import Decision, FieldConflict

logger = logging.getLogger(__name__)

_CHOICES = {
    Decision.yes: "y",
    Decision.no: "n",
    Decision.all: "a",
    Decision.quit: "q",
}


def _choices_hint(default: Decision) -> str:
    # Default answer is shown in brackets, e.g. "[y],n,a,q"
    return ",".join(
        f"[{letter}]" if d is default else letter for d, letter in _CHOICES.items()
    )


class ConsolePolicy:
    """Asks the user on the terminal whether to apply each differing value."""

    def __init__(
        self,
        console: Console | None = None,
        default: Decision = Decision.yes,
    ) -> None:
        self.console = console or Console()
        self.default = default

    def decide(self, conflict: FieldConflict) -> Decision:
        # The -/+ report lines for this value were printed just above.
        question = escape(
            f"Update {conflict.relative_path} {conflict.name}? {_choices_hint(self.default)}"
        )
        while True:
            try:
                answer = Prompt.ask(question, console=self.console, default="", show_default=False)
            except EOFError:
                logger.warning("No more input; skipping remaining parameters of %s",
                               conflict.relative_path)
                return Decision.quit
            try:
                return Decision.parse(answer, self.default)
            except ValueError as e:
                self.console.print(f"[yellow]{escape(str(e))}[/yellow]")
