"""YAML model documents: schema, reading and writing."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from slmerge_core.errors import ConfigurationError
from slmerge_core.model.models import SEPARATOR, Annotation

logger = logging.getLogger(__name__)

SUBSYSTEM_TYPE = "SubSystem"


class ParameterDocument(BaseModel):
    value: Any = None
    read_only: bool = False


def _check_name(name: str) -> str:
    if not name or not name.strip():
        raise ValueError("name must not be empty")
    if SEPARATOR in name:
        raise ValueError(f"name must not contain '{SEPARATOR}': {name!r}")
    return name


def _check_unique(blocks: list[BlockDocument] | None, owner: str) -> None:
    seen: set[str] = set()
    for b in blocks or []:
        if b.name in seen:
            raise ValueError(f"duplicate block name {b.name!r} under {owner!r}")
        seen.add(b.name)


class BlockDocument(BaseModel):
    """One block; a non-null ``blocks`` list makes it a subsystem."""

    name: str
    type: str | None = None
    masked: bool = False
    parameters: dict[str, ParameterDocument] = Field(default_factory=dict)
    blocks: list[BlockDocument] | None = None
    annotation: Annotation | None = None
    container_annotation: Annotation | None = None
    color: str | None = None

    @field_validator("name")
    @classmethod
    def _valid_name(cls, value: str) -> str:
        return _check_name(value)

    @field_validator("parameters", mode="before")
    @classmethod
    def _expand_shorthand(cls, value: Any) -> Any:
        # `Gain: 2` is short for `Gain: {value: 2}`
        if not isinstance(value, dict):
            return value
        expanded = {}
        for key, item in value.items():
            if isinstance(item, ParameterDocument):
                expanded[key] = item
            elif isinstance(item, dict) and "value" in item and set(item) <= {"value", "read_only"}:
                expanded[key] = item
            else:
                expanded[key] = {"value": item}
        return expanded

    @model_validator(mode="after")
    def _unique_children(self) -> BlockDocument:
        _check_unique(self.blocks, self.name)
        return self

    @property
    def is_container(self) -> bool:
        return self.blocks is not None or self.type == SUBSYSTEM_TYPE


class ModelDocument(BaseModel):
    """Top-level model: a name and its root-level blocks."""

    name: str
    blocks: list[BlockDocument] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def _valid_name(cls, value: str) -> str:
        return _check_name(value)

    @model_validator(mode="after")
    def _unique_children(self) -> ModelDocument:
        _check_unique(self.blocks, self.name)
        return self


def read_document(path: str | Path) -> ModelDocument:
    """Parse and validate a model file."""
    path = Path(path)
    try:
        raw = yaml.safe_load(path.read_text())
    except FileNotFoundError as e:
        raise ConfigurationError(f"Model file not found: {path}") from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e
    if not isinstance(raw, dict):
        raise ConfigurationError(f"Model file {path} must contain a mapping")
    try:
        doc = ModelDocument(**raw)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid model in {path}: {e}") from e
    logger.debug("Read model %s from %s", doc.name, path)
    return doc


def _parameter_to_yaml(param: ParameterDocument) -> Any:
    # Mapping values always use the long form so they never read back as one.
    if param.read_only:
        return {"value": param.value, "read_only": True}
    if isinstance(param.value, dict):
        return {"value": param.value}
    return param.value


def _block_to_dict(block: BlockDocument) -> dict[str, Any]:
    data: dict[str, Any] = {"name": block.name}
    if block.type is not None:
        data["type"] = block.type
    if block.masked:
        data["masked"] = True
    if block.parameters:
        data["parameters"] = {
            k: _parameter_to_yaml(p) for k, p in block.parameters.items()
        }
    for key in ("annotation", "container_annotation"):
        ann = getattr(block, key)
        if ann is not None and ann is not Annotation.unchanged:
            data[key] = ann.value
    if block.color is not None:
        data["color"] = block.color
    if block.blocks is not None:
        data["blocks"] = [_block_to_dict(b) for b in block.blocks]
    return data


def write_document(doc: ModelDocument, path: str | Path) -> Path:
    """Serialize *doc* as YAML, keeping block and parameter order."""
    path = Path(path)
    data = {"name": doc.name, "blocks": [_block_to_dict(b) for b in doc.blocks]}
    path.write_text(yaml.safe_dump(data, sort_keys=False, default_flow_style=None))
    logger.debug("Wrote model %s to %s", doc.name, path)
    return path
