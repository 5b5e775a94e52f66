"""Data models for block-diagram model trees."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

SEPARATOR = "/"


class NodeKind(str, Enum):
    """Leaf block or container (subsystem)."""

    block = "block"
    subsystem = "subsystem"


class Annotation(str, Enum):
    """Review marker applied to a target block after a merge."""

    unchanged = "unchanged"
    added = "added"
    updated = "updated"
    missing_from_source = "missing-from-source"
    container_modified = "container-modified"


@dataclass(frozen=True)
class Parameter:
    """A single dialog parameter value and its write permission."""

    value: Any
    read_only: bool = False


ParameterSet = dict[str, Parameter]


@dataclass(frozen=True)
class Node:
    """A block in a model tree, addressed by its full slash-delimited path."""

    path: str
    kind: NodeKind = NodeKind.block
    block_type: str | None = None
    masked: bool = False
    parameters: ParameterSet = field(default_factory=dict)

    @property
    def name(self) -> str:
        return self.path.rsplit(SEPARATOR, 1)[-1]

    @property
    def parent(self) -> str:
        return parent_path(self.path)

    @property
    def is_container(self) -> bool:
        return self.kind is NodeKind.subsystem


def parent_path(path: str) -> str:
    """Return the path one level up, or "" for a model root."""
    if SEPARATOR not in path:
        return ""
    return path.rsplit(SEPARATOR, 1)[0]


def join_path(parent: str, name: str) -> str:
    return f"{parent}{SEPARATOR}{name}" if parent else name


def is_under(path: str, prefix: str) -> bool:
    """True if *path* is *prefix* itself or lies somewhere beneath it."""
    return path == prefix or path.startswith(prefix + SEPARATOR)
