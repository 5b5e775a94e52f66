"""Model backend interface: the operations the merger needs from a live model."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from slmerge_core.model.models import Annotation, Node, ParameterSet


@runtime_checkable
class ModelBackend(Protocol):
    """Host that owns the models being compared (a modeling tool, or memory).

    The merger only ever passes paths across this boundary, never host
    objects.
    """

    def resolve_name(self, ref: str) -> str: ...

    def list_nodes(self, root_path: str) -> list[Node]: ...

    def get_parameter_schema(self, path: str) -> ParameterSet: ...

    def get_parameter_value(self, path: str, name: str) -> Any: ...

    def set_parameter_value(self, path: str, name: str, value: Any) -> bool: ...

    def copy_subtree(self, source_path: str, dest_parent_path: str) -> str: ...

    def annotate(self, path: str, annotation: Annotation) -> None: ...
