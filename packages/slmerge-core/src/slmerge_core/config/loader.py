"""Locate and read slmerge.yaml."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from slmerge_core.errors import ConfigurationError

from .models import SlmergeConfig

logger = logging.getLogger(__name__)

PROJECT_CONFIG = "slmerge.yaml"


def config_candidates(cli_path: str | None = None) -> list[Path]:
    """Config files in lookup order: --config, project, user."""
    candidates = [Path(PROJECT_CONFIG), Path.home() / ".slmerge" / "config.yaml"]
    if cli_path:
        candidates.insert(0, Path(cli_path))
    return candidates


def _read_mapping(path: Path) -> dict[str, Any] | None:
    try:
        raw = yaml.safe_load(path.read_text())
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e
    if raw is None:
        return None
    if not isinstance(raw, dict):
        raise ConfigurationError(f"Invalid config in {path}: expected a mapping")
    return raw


def load_config(cli_path: str | None = None) -> SlmergeConfig:
    """Return the first non-empty config found, or the defaults."""
    for path in config_candidates(cli_path):
        if not path.exists():
            continue
        raw = _read_mapping(path)
        if raw is None:
            logger.debug("Skipping empty config %s", path)
            continue
        try:
            cfg = SlmergeConfig(**raw)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid config in {path}: {e}") from e
        logger.debug("Loaded config from %s", path)
        return cfg
    return SlmergeConfig()


# Default YAML template for `slmerge config init`
DEFAULT_CONFIG_TEMPLATE = """\
# slmerge.yaml

# Merge behaviour
merge:
  interactive: true            # prompt for every differing parameter
  default_answer: "yes"        # yes | no | all | quit (used on empty input)

# Comparison
diff:
  look_under_masks: true       # descend into masked subsystems
  ignored_parameters: []       # e.g. [Position, ZOrder]

# Review colours (rich style names)
annotations:
  unchanged: "white"
  added: "green"
  updated: "dark_orange"
  missing_from_source: "cyan"
  container_modified: "yellow"

# Output
output:
  write_in_place: true         # overwrite OLD with the merged model
  suffix: ".merged"            # used when write_in_place is false

# Logging
log_level: "info"              # debug | info | warn | error
log_format: "text"             # text | json
"""
