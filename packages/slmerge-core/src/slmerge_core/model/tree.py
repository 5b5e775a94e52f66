"""Ordered, path-indexed view of one model's blocks."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import TYPE_CHECKING

from slmerge_core.errors import ConfigurationError
from slmerge_core.model.models import SEPARATOR, Node, is_under, parent_path

if TYPE_CHECKING:
    from slmerge_core.interfaces.backend import ModelBackend

logger = logging.getLogger(__name__)


class ModelTree:
    """Blocks of a model in pre-order, keyed by full path.

    The model root itself is not a node: only blocks are, exactly as a
    block search from the root would list them.
    """

    def __init__(self, root: str, nodes: dict[str, Node]) -> None:
        self.root = root
        self.nodes = nodes

    @classmethod
    def load(cls, backend: ModelBackend, ref: str) -> ModelTree:
        """Resolve *ref* and snapshot every block beneath it."""
        root = backend.resolve_name(ref)
        nodes = {n.path: n for n in backend.list_nodes(root)}
        logger.debug("Loaded %d blocks under %s", len(nodes), root)
        return cls(root, nodes)

    def __contains__(self, path: object) -> bool:
        return path in self.nodes

    def __iter__(self) -> Iterator[Node]:
        return iter(self.nodes.values())

    def __len__(self) -> int:
        return len(self.nodes)

    @property
    def paths(self) -> list[str]:
        return list(self.nodes)

    # ------------------------------------------------------------------
    # Path arithmetic
    # ------------------------------------------------------------------

    def relative(self, path: str) -> str:
        """Strip the root prefix: ``model/A/B`` -> ``A/B``."""
        if path == self.root or not is_under(path, self.root):
            raise ConfigurationError(
                f"'{path}' does not start with model root '{self.root}'"
            )
        return path[len(self.root) + 1:]

    def map_path(self, path: str, other_root: str) -> str:
        """Rewrite *path* so that it lives under *other_root* instead."""
        return f"{other_root}{SEPARATOR}{self.relative(path)}"

    def ancestors(self, path: str) -> list[str]:
        """Parent containers of *path*, nearest first, stopping below the root."""
        result: list[str] = []
        cur = parent_path(path)
        while cur and cur != self.root and is_under(cur, self.root):
            result.append(cur)
            cur = parent_path(cur)
        return result
