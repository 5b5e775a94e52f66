"""In-memory model host implementing the ModelBackend interface."""

from __future__ import annotations

import copy
import logging
import re
from dataclasses import dataclass, field
from typing import Any

from slmerge_core.config.models import AnnotationConfig
from slmerge_core.errors import CollaboratorError, ConfigurationError
from slmerge_core.model.document import BlockDocument, ModelDocument, ParameterDocument
from slmerge_core.model.models import (
    SEPARATOR,
    Annotation,
    Node,
    NodeKind,
    Parameter,
    ParameterSet,
    join_path,
)

logger = logging.getLogger(__name__)

_TRAILING_DIGITS_RE = re.compile(r"^(.*?)(\d+)$")


def make_name_unique(name: str, taken: set[str]) -> str:
    """Return *name*, or the first free ``<base><n>`` variant of it.

    ``Gain`` becomes ``Gain1``; a name already ending in digits is
    incremented (``Gain1`` becomes ``Gain2``).
    """
    if name not in taken:
        return name
    m = _TRAILING_DIGITS_RE.match(name)
    if m:
        base, n = m.group(1), int(m.group(2)) + 1
    else:
        base, n = name, 1
    while f"{base}{n}" in taken:
        n += 1
    return f"{base}{n}"


@dataclass
class _Block:
    name: str
    kind: NodeKind = NodeKind.block
    block_type: str | None = None
    masked: bool = False
    parameters: dict[str, Parameter] = field(default_factory=dict)
    children: list[_Block] = field(default_factory=list)
    annotation: Annotation = Annotation.unchanged
    container_annotation: Annotation | None = None

    def child(self, name: str) -> _Block | None:
        return next((c for c in self.children if c.name == name), None)

    def reset_annotations(self) -> None:
        self.annotation = Annotation.unchanged
        self.container_annotation = None
        for c in self.children:
            c.reset_annotations()


class InMemoryBackend:
    """Holds any number of models as nested block records.

    Model roots are addressed by their name; blocks by the slash-joined
    names leading to them.
    """

    def __init__(self, look_under_masks: bool = True) -> None:
        self.look_under_masks = look_under_masks
        self._roots: dict[str, _Block] = {}

    # ------------------------------------------------------------------
    # Model registration
    # ------------------------------------------------------------------

    def add_model(self, doc: ModelDocument, unique: bool = True) -> str:
        """Register *doc* and return the root name it was stored under."""
        name = doc.name
        if name in self._roots:
            if not unique:
                raise ConfigurationError(f"Model '{name}' is already loaded")
            name = make_name_unique(name, set(self._roots))
            logger.info("Model '%s' already loaded; registered as '%s'", doc.name, name)
        root = _Block(name=name, kind=NodeKind.subsystem, block_type="BlockDiagram")
        root.children = [_from_document(b) for b in doc.blocks]
        self._roots[name] = root
        return name

    def export_model(
        self, root_path: str, colors: AnnotationConfig | None = None
    ) -> ModelDocument:
        """Snapshot a loaded model as a document, including its annotations."""
        root = self._lookup(self.resolve_name(root_path))
        return ModelDocument(
            name=root.name,
            blocks=[_to_document(c, colors) for c in root.children],
        )

    # ------------------------------------------------------------------
    # ModelBackend
    # ------------------------------------------------------------------

    def resolve_name(self, ref: str) -> str:
        canonical = SEPARATOR.join(p for p in ref.strip().split(SEPARATOR) if p)
        if not canonical:
            raise ConfigurationError(f"Cannot resolve model reference {ref!r}")
        try:
            self._lookup(canonical)
        except CollaboratorError as e:
            raise ConfigurationError(f"Cannot resolve model reference {ref!r}") from e
        return canonical

    def list_nodes(self, root_path: str) -> list[Node]:
        root = self._lookup(root_path)
        nodes: list[Node] = []

        def walk(block: _Block, prefix: str) -> None:
            for c in block.children:
                path = join_path(prefix, c.name)
                nodes.append(_to_node(c, path))
                if c.masked and not self.look_under_masks:
                    continue
                walk(c, path)

        walk(root, root_path)
        return nodes

    def get_parameter_schema(self, path: str) -> ParameterSet:
        return dict(self._lookup(path).parameters)

    def get_parameter_value(self, path: str, name: str) -> Any:
        block = self._lookup(path)
        if name not in block.parameters:
            raise CollaboratorError("get_parameter_value", path, f"no parameter {name!r}")
        return copy.deepcopy(block.parameters[name].value)

    def set_parameter_value(self, path: str, name: str, value: Any) -> bool:
        block = self._lookup(path)
        if name not in block.parameters:
            raise CollaboratorError("set_parameter_value", path, f"no parameter {name!r}")
        if block.parameters[name].read_only:
            logger.warning("Refusing to write read-only parameter %s of %s", name, path)
            return False
        block.parameters[name] = Parameter(value=copy.deepcopy(value))
        return True

    def copy_subtree(self, source_path: str, dest_parent_path: str) -> str:
        block = self._lookup(source_path)
        parent = self._lookup(dest_parent_path)
        if parent.kind is not NodeKind.subsystem:
            raise CollaboratorError(
                "copy_subtree", dest_parent_path, "destination is not a subsystem"
            )
        clone = copy.deepcopy(block)
        clone.reset_annotations()
        clone.name = make_name_unique(block.name, {c.name for c in parent.children})
        parent.children.append(clone)
        new_path = join_path(dest_parent_path, clone.name)
        logger.debug("Copied %s to %s", source_path, new_path)
        return new_path

    def annotate(self, path: str, annotation: Annotation) -> None:
        if SEPARATOR not in path:
            # Model roots are not blocks and carry no marker.
            return
        block = self._lookup(path)
        if annotation is Annotation.container_modified:
            block.container_annotation = annotation
        else:
            block.annotation = annotation

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------

    def annotation_of(self, path: str) -> Annotation:
        """The block's own status marker."""
        return self._lookup(path).annotation

    def container_annotation_of(self, path: str) -> Annotation | None:
        return self._lookup(path).container_annotation

    def effective_annotation(self, path: str) -> Annotation:
        """Own status if set, else the container marker, else unchanged."""
        block = self._lookup(path)
        return _effective(block)

    def _lookup(self, path: str) -> _Block:
        parts = path.split(SEPARATOR)
        block = self._roots.get(parts[0])
        for part in parts[1:]:
            if block is None:
                break
            block = block.child(part)
        if block is None:
            raise CollaboratorError("lookup", path, "no such block")
        return block


def _effective(block: _Block) -> Annotation:
    if block.annotation is not Annotation.unchanged:
        return block.annotation
    return block.container_annotation or Annotation.unchanged


def _to_node(block: _Block, path: str) -> Node:
    return Node(
        path=path,
        kind=block.kind,
        block_type=block.block_type,
        masked=block.masked,
        parameters=dict(block.parameters),
    )


def _from_document(doc: BlockDocument) -> _Block:
    return _Block(
        name=doc.name,
        kind=NodeKind.subsystem if doc.is_container else NodeKind.block,
        block_type=doc.type,
        masked=doc.masked,
        parameters={
            k: Parameter(value=p.value, read_only=p.read_only)
            for k, p in doc.parameters.items()
        },
        children=[_from_document(b) for b in doc.blocks or []],
        annotation=doc.annotation or Annotation.unchanged,
        container_annotation=doc.container_annotation,
    )


def _to_document(block: _Block, colors: AnnotationConfig | None) -> BlockDocument:
    effective = _effective(block)
    return BlockDocument(
        name=block.name,
        type=block.block_type,
        masked=block.masked,
        parameters={
            k: ParameterDocument(value=p.value, read_only=p.read_only)
            for k, p in block.parameters.items()
        },
        blocks=(
            [_to_document(c, colors) for c in block.children]
            if block.kind is NodeKind.subsystem
            else None
        ),
        annotation=block.annotation,
        container_annotation=block.container_annotation,
        color=(
            colors.color_for(effective.value)
            if colors is not None and effective is not Annotation.unchanged
            else None
        ),
    )
