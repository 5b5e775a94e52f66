"""CLI entry point for slmerge."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated

import structlog
import typer
import yaml
from rich import print as rprint
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.syntax import Syntax
from rich.tree import Tree

from slmerge.prompt import ConsolePolicy
from slmerge_core.backends import InMemoryBackend, load_model, save_model
from slmerge_core.config import SlmergeConfig, load_config
from slmerge_core.config.loader import DEFAULT_CONFIG_TEMPLATE
from slmerge_core.errors import CollaboratorError, SlmergeError
from slmerge_core.merge import (
    BatchPolicy,
    Decision,
    DiffReport,
    HierarchicalDiffMerger,
    InteractionPolicy,
    MergeResult,
    ScriptedPolicy,
)
from slmerge_core.model import Annotation

app = typer.Typer(
    name="slmerge",
    help="Diff and merge hierarchical block-diagram models.",
)

config_app = typer.Typer(help="Manage slmerge configuration.")
app.add_typer(config_app, name="config")

# Global state
_config: SlmergeConfig | None = None
_log_handler: logging.Handler | None = None

_LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}


def _json_formatter() -> structlog.stdlib.ProcessorFormatter:
    """One JSON object per stdlib log record."""
    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=[
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
        ],
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.JSONRenderer(),
        ],
    )


def _setup_logging(cfg: SlmergeConfig) -> None:
    """Send library logs to stderr so they never mix with the report."""
    global _log_handler
    if cfg.log_format == "json":
        handler: logging.Handler = logging.StreamHandler()
        handler.setFormatter(_json_formatter())
    else:
        handler = RichHandler(console=Console(stderr=True), show_path=False)
    for name in ("slmerge", "slmerge_core"):
        logger = logging.getLogger(name)
        if _log_handler is not None:
            logger.removeHandler(_log_handler)
        logger.addHandler(handler)
        logger.setLevel(_LOG_LEVELS[cfg.log_level])
    _log_handler = handler


def _get_config() -> SlmergeConfig:
    if _config is None:
        return load_config()
    return _config


def _fail(message: str) -> typer.Exit:
    rprint(f"[red]Error:[/red] {escape(message)}")
    return typer.Exit(1)


@app.callback()
def main(
    config: Annotated[
        str | None, typer.Option("--config", "-c", help="Path to slmerge.yaml")
    ] = None,
) -> None:
    """Global options."""
    global _config
    try:
        _config = load_config(config)
    except SlmergeError as e:
        raise _fail(str(e))
    _setup_logging(_config)


def _load_pair(backend: InMemoryBackend, old: str, new: str) -> tuple[str, str]:
    """Load OLD (target) then NEW (source); returns their root paths."""
    target = load_model(backend, old)
    source = load_model(backend, new)
    return target, source


def _merged_path(old: str, cfg: SlmergeConfig) -> Path:
    path = Path(old)
    if cfg.output.write_in_place:
        return path
    return path.with_name(f"{path.stem}{cfg.output.suffix}{path.suffix}")


def _display_summary(result: MergeResult, dest: Path) -> None:
    """Panel with merge counts and the blocks unique to the target."""
    unique = "\n".join(f"  {escape(p)}" for p in result.missing) or "  (none)"
    panel_text = (
        f"[dim]Added:[/dim]      {len(result.added)}\n"
        f"[dim]Replaced:[/dim]   {len(result.mismatched)}\n"
        f"[dim]Updated:[/dim]    {len(result.updated)}\n"
        f"[dim]Unique:[/dim]     {len(result.unique_to_target)}\n"
        f"{unique}\n\n"
        f"[dim]Saved to:[/dim]   {escape(str(dest))}"
    )
    rprint(Panel(panel_text, title="Merge Complete", border_style="green"))
    rprint("[dim]Connecting lines are not merged; review the coloured blocks.[/dim]")


@app.command()
def diff(
    old: str = typer.Argument(..., help="Existing model file (compared against)"),
    new: str = typer.Argument(..., help="Incoming model file"),
    fail_on_diff: Annotated[
        bool, typer.Option("--fail-on-diff", help="Exit 1 if any difference is found")
    ] = False,
) -> None:
    """Report block and parameter differences without changing anything."""
    cfg = _get_config()
    backend = InMemoryBackend(look_under_masks=cfg.diff.look_under_masks)
    try:
        target, source = _load_pair(backend, old, new)
        merger = HierarchicalDiffMerger(
            backend,
            report=DiffReport(typer.echo),
            ignored_parameters=cfg.diff.ignored_parameters,
        )
        result = merger.run(target, source)
    except SlmergeError as e:
        raise _fail(str(e))

    if fail_on_diff and result.has_changes:
        raise typer.Exit(code=1)


def _select_policy(
    cfg: SlmergeConfig,
    yes: bool,
    interactive: bool | None,
    answers: str | None,
) -> InteractionPolicy:
    default = Decision(cfg.merge.default_answer)
    if answers is not None:
        return ScriptedPolicy.from_string(answers, default=default)
    if yes:
        return BatchPolicy(apply=True)
    if interactive is None:
        interactive = cfg.merge.interactive
    if interactive:
        return ConsolePolicy(default=default)
    return BatchPolicy(apply=True)


@app.command()
def merge(
    old: str = typer.Argument(..., help="Existing model file, updated in place"),
    new: str = typer.Argument(..., help="Incoming model file"),
    yes: Annotated[
        bool, typer.Option("--yes", "-y", help="Apply every differing value without asking")
    ] = False,
    interactive: Annotated[
        bool | None,
        typer.Option("--interactive/--no-interactive", help="Prompt for each differing value"),
    ] = None,
    answers: Annotated[
        str | None,
        typer.Option("--answers", help="Scripted answers, one letter per prompt (e.g. ynaq)"),
    ] = None,
    output: Annotated[
        str | None, typer.Option("--output", "-o", help="Write the merged model here")
    ] = None,
) -> None:
    """Merge NEW into OLD: copy missing blocks, apply changed values, annotate."""
    cfg = _get_config()
    backend = InMemoryBackend(look_under_masks=cfg.diff.look_under_masks)
    dest = Path(output) if output else _merged_path(old, cfg)

    try:
        target, source = _load_pair(backend, old, new)
        policy = _select_policy(cfg, yes, interactive, answers)
    except (SlmergeError, ValueError) as e:
        raise _fail(str(e))

    merger = HierarchicalDiffMerger(
        backend,
        merge=True,
        policy=policy,
        report=DiffReport(typer.echo),
        ignored_parameters=cfg.diff.ignored_parameters,
    )
    try:
        result = merger.run(target, source)
    except CollaboratorError as e:
        # Keep whatever was applied before the failure for manual review.
        save_model(backend, target, dest, colors=cfg.annotations)
        rprint(f"[yellow]Partial merge saved to[/yellow] {escape(str(dest))}")
        raise _fail(str(e))
    except SlmergeError as e:
        raise _fail(str(e))

    save_model(backend, target, dest, colors=cfg.annotations)
    _display_summary(result, dest)


@app.command()
def show(
    model: str = typer.Argument(..., help="Model file to display"),
) -> None:
    """Display a model's block tree, coloured by review annotation."""
    cfg = _get_config()
    backend = InMemoryBackend(look_under_masks=True)
    try:
        root = load_model(backend, model)
    except SlmergeError as e:
        raise _fail(str(e))

    tree = Tree(f"[bold]{escape(root)}[/bold]")
    branches: dict[str, Tree] = {root: tree}
    for node in backend.list_nodes(root):
        annotation = backend.effective_annotation(node.path)
        color = cfg.annotations.color_for(annotation.value)
        label = f"[{color}]{escape(node.name)}[/{color}]"
        if node.block_type:
            label += f" [dim]({escape(node.block_type)})[/dim]"
        if annotation is not Annotation.unchanged:
            label += f" [{color}]{annotation.value}[/{color}]"
        parent = branches.get(node.parent, tree)
        branches[node.path] = parent.add(label)
    rprint(tree)


@config_app.command("show")
def config_show() -> None:
    """Show current resolved configuration."""
    cfg = _get_config()
    rprint(Syntax(yaml.dump(cfg.model_dump(), default_flow_style=False), "yaml"))


@config_app.command("init")
def config_init(
    force: bool = typer.Option(False, "--force", help="Overwrite existing config"),
) -> None:
    """Create default slmerge.yaml in current directory."""
    target = Path("slmerge.yaml")
    if target.exists() and not force:
        rprint("[yellow]slmerge.yaml already exists.[/yellow] Use --force to overwrite.")
        raise typer.Exit(1)
    target.write_text(DEFAULT_CONFIG_TEMPLATE)
    rprint(f"[green]Created[/green] {target}")
