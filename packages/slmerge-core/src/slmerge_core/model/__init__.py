"""Block-diagram model trees and their YAML documents."""

from slmerge_core.model.document import (
    BlockDocument,
    ModelDocument,
    ParameterDocument,
    read_document,
    write_document,
)
from slmerge_core.model.models import (
    Annotation,
    Node,
    NodeKind,
    Parameter,
    ParameterSet,
    is_under,
    join_path,
    parent_path,
)
from slmerge_core.model.tree import ModelTree

__all__ = [
    "Annotation",
    "BlockDocument",
    "ModelDocument",
    "ModelTree",
    "Node",
    "NodeKind",
    "Parameter",
    "ParameterDocument",
    "ParameterSet",
    "is_under",
    "join_path",
    "parent_path",
    "read_document",
    "write_document",
]
