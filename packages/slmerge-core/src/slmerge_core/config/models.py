from pydantic import BaseModel, Field
from typing import Literal


class MergeConfig(BaseModel):
    interactive: bool = True
    default_answer: Literal["yes", "no", "all", "quit"] = "yes"


class DiffConfig(BaseModel):
    look_under_masks: bool = True
    ignored_parameters: list[str] = Field(default_factory=list)


class AnnotationConfig(BaseModel):
    """Rich style used for each annotation when rendering or saving a model."""

    unchanged: str = "white"
    added: str = "green"
    updated: str = "dark_orange"
    missing_from_source: str = "cyan"
    container_modified: str = "yellow"

    def color_for(self, annotation: str) -> str:
        return getattr(self, annotation.replace("-", "_"), self.unchanged)


class OutputConfig(BaseModel):
    write_in_place: bool = True
    suffix: str = Field(default=".merged", min_length=1)


class SlmergeConfig(BaseModel):
    merge: MergeConfig = Field(default_factory=MergeConfig)
    diff: DiffConfig = Field(default_factory=DiffConfig)
    annotations: AnnotationConfig = Field(default_factory=AnnotationConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    log_level: Literal["debug", "info", "warn", "error"] = "info"
    log_format: Literal["text", "json"] = "text"
