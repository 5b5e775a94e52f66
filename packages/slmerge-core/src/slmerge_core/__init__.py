"""slmerge core - diff and merge of hierarchical block-diagram models."""

from slmerge_core.backends import InMemoryBackend, load_model, save_model
from slmerge_core.config import SlmergeConfig, load_config
from slmerge_core.errors import CollaboratorError, ConfigurationError, SlmergeError
from slmerge_core.interfaces import ModelBackend
from slmerge_core.merge import (
    BatchPolicy,
    Decision,
    DiffReport,
    HierarchicalDiffMerger,
    MergeResult,
    ScriptedPolicy,
    diff_merge,
)
from slmerge_core.model import Annotation, ModelTree, Node, NodeKind, Parameter

__version__ = "0.1.0"

__all__ = [
    "Annotation",
    "BatchPolicy",
    "CollaboratorError",
    "ConfigurationError",
    "Decision",
    "DiffReport",
    "HierarchicalDiffMerger",
    "InMemoryBackend",
    "MergeResult",
    "ModelBackend",
    "ModelTree",
    "Node",
    "NodeKind",
    "Parameter",
    "ScriptedPolicy",
    "SlmergeConfig",
    "SlmergeError",
    "diff_merge",
    "load_config",
    "load_model",
    "save_model",
]
