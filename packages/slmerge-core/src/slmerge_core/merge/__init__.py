"""Diff/merge of block-diagram model trees."""

from slmerge_core.merge.merger import HierarchicalDiffMerger, diff_merge
from slmerge_core.merge.models import Decision, FieldConflict, MergeResult
from slmerge_core.merge.policy import BatchPolicy, InteractionPolicy, ScriptedPolicy
from slmerge_core.merge.report import DiffReport, format_value

__all__ = [
    "BatchPolicy",
    "Decision",
    "DiffReport",
    "FieldConflict",
    "HierarchicalDiffMerger",
    "InteractionPolicy",
    "MergeResult",
    "ScriptedPolicy",
    "diff_merge",
    "format_value",
]
