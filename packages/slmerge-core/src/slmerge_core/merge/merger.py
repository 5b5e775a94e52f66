"""Hierarchical diff/merge of two block-diagram models."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import Any

from slmerge_core.errors import CollaboratorError, SlmergeError
from slmerge_core.interfaces.backend import ModelBackend
from slmerge_core.merge.models import Decision, FieldConflict, MergeResult
from slmerge_core.merge.policy import BatchPolicy, InteractionPolicy
from slmerge_core.merge.report import DiffReport
from slmerge_core.model.models import Annotation, Node, ParameterSet, is_under, parent_path
from slmerge_core.model.tree import ModelTree

logger = logging.getLogger(__name__)


class HierarchicalDiffMerger:
    """Walks the source model and diffs (optionally merges) it into the target.

    The walk is source-driven and pre-order. A block missing from the target,
    or present with a different parameter-name set, is handled as one copy
    unit together with everything beneath it. Blocks with matching schemas
    are compared field by field. Afterwards the target is scanned for blocks
    that nothing in the source mapped to.

    Merging is incremental: each copy or parameter write is committed through
    the backend immediately and is not rolled back if a later step fails.
    """

    def __init__(
        self,
        backend: ModelBackend,
        *,
        merge: bool = False,
        policy: InteractionPolicy | None = None,
        report: DiffReport | None = None,
        ignored_parameters: Iterable[str] = (),
    ) -> None:
        self.backend = backend
        self.merge = merge
        self.policy = policy if policy is not None else BatchPolicy(apply=True)
        self.report = report if report is not None else DiffReport()
        self.ignored_parameters = frozenset(ignored_parameters)
        self._apply_all = False

    def run(self, target_ref: str, source_ref: str) -> MergeResult:
        source = ModelTree.load(self.backend, source_ref)
        target = ModelTree.load(self.backend, target_ref)

        # Map every source block before touching anything, so a bad root
        # prefix fails the run with the target still pristine.
        mapping = [(node, source.map_path(node.path, target.root)) for node in source]

        self.report.header(target.root, source.root)
        self._apply_all = False
        added: list[str] = []
        mismatched: list[str] = []
        updated: list[str] = []

        skip: str | None = None
        for node, t in mapping:
            rel = source.relative(node.path)
            if skip is not None and is_under(rel, skip):
                continue

            # A copy made earlier in this run may have taken t's name.
            if t not in target or any(is_under(t, c) for c in added):
                logger.debug("%s missing from target", rel)
                self.report.node_added(rel)
                if self.merge:
                    added.append(self._copy(node.path, parent_path(t), target))
                    target = self._reload(target)
                skip = rel
                continue

            src_schema = self._schema(node.path)
            dst_schema = self._schema(t)
            if set(src_schema) != set(dst_schema):
                logger.debug("%s has a different parameter schema", rel)
                self.report.schema_mismatch(rel)
                mismatched.append(t)
                if self.merge:
                    added.append(self._copy(node.path, parent_path(t), target))
                    target = self._reload(target)
                skip = rel
                continue

            if self._merge_fields(node, t, rel, src_schema, dst_schema, target):
                updated.append(t)

        matched = {t for _, t in mapping}
        unique = [
            p for p in target.paths
            if p not in matched and not any(is_under(p, c) for c in added)
        ]
        missing = self._report_unique(unique, target)

        return MergeResult(
            target_root=target.root,
            source_root=source.root,
            unique_to_target=frozenset(unique),
            added=tuple(added),
            mismatched=tuple(mismatched),
            updated=tuple(updated),
            missing=tuple(missing),
            report=tuple(self.report.lines),
        )

    # ------------------------------------------------------------------
    # Per-block steps
    # ------------------------------------------------------------------

    def _merge_fields(
        self,
        node: Node,
        t: str,
        rel: str,
        src_schema: ParameterSet,
        dst_schema: ParameterSet,
        target: ModelTree,
    ) -> bool:
        """Compare common parameters; returns True if any value was written."""
        changed = False
        wrote = False
        for name in src_schema:
            if dst_schema[name].read_only:
                continue
            new_value = self._value(node.path, name)
            old_value = self._value(t, name)
            if new_value == old_value:
                continue

            if not changed:
                self.report.node_changed(rel)
                changed = True
            self.report.value_removed(name, old_value)
            self.report.value_added(name, new_value)
            if not self.merge:
                continue

            if self._apply_all:
                decision = Decision.all
            else:
                decision = self.policy.decide(
                    FieldConflict(
                        target_path=t,
                        relative_path=rel,
                        name=name,
                        old_value=old_value,
                        new_value=new_value,
                    )
                )
            if decision is Decision.quit:
                logger.info("Skipping remaining parameters of %s", rel)
                break
            if decision is Decision.all:
                self._apply_all = True
            if decision in (Decision.yes, Decision.all):
                self._write(t, name, new_value, target)
                wrote = True
        return wrote

    def _report_unique(self, unique: list[str], target: ModelTree) -> list[str]:
        """Report the outermost block of each target-only subtree."""
        reported: list[str] = []
        skip: str | None = None
        for path in unique:
            rel = target.relative(path)
            if skip is not None and is_under(rel, skip):
                continue
            self.report.node_removed(rel)
            reported.append(path)
            if self.merge:
                self._mark(path, Annotation.missing_from_source, target)
            skip = rel
        return reported

    # ------------------------------------------------------------------
    # Backend access
    # ------------------------------------------------------------------

    def _call(self, operation: str, path: str, fn: Callable[..., Any], *args: Any) -> Any:
        try:
            return fn(*args)
        except SlmergeError:
            raise
        except Exception as e:
            raise CollaboratorError(operation, path, e) from e

    def _schema(self, path: str) -> ParameterSet:
        schema = self._call("get_parameter_schema", path, self.backend.get_parameter_schema, path)
        return {k: v for k, v in schema.items() if k not in self.ignored_parameters}

    def _value(self, path: str, name: str) -> Any:
        return self._call(
            "get_parameter_value", path, self.backend.get_parameter_value, path, name
        )

    def _reload(self, target: ModelTree) -> ModelTree:
        # A copy may have been renamed by the backend; re-list to see it.
        return self._call("list_nodes", target.root, ModelTree.load, self.backend, target.root)

    def _copy(self, source_path: str, dest_parent: str, target: ModelTree) -> str:
        new_path = self._call(
            "copy_subtree", source_path, self.backend.copy_subtree, source_path, dest_parent
        )
        logger.info("Copied %s to %s", source_path, new_path)
        self._mark(new_path, Annotation.added, target)
        return new_path

    def _write(self, path: str, name: str, value: Any, target: ModelTree) -> None:
        ok = self._call(
            "set_parameter_value", path, self.backend.set_parameter_value, path, name, value
        )
        if not ok:
            raise CollaboratorError("set_parameter_value", path, f"write to {name!r} rejected")
        logger.info("Updated %s.%s", path, name)
        self._mark(path, Annotation.updated, target)

    def _mark(self, path: str, annotation: Annotation, target: ModelTree) -> None:
        """Annotate *path* and flag every ancestor subsystem below the root."""
        self._call("annotate", path, self.backend.annotate, path, annotation)
        if annotation is Annotation.unchanged:
            return
        for ancestor in target.ancestors(path):
            self._call(
                "annotate", ancestor, self.backend.annotate, ancestor, Annotation.container_modified
            )


def diff_merge(
    old_ref: str,
    new_ref: str,
    merge: bool = False,
    *,
    backend: ModelBackend,
    policy: InteractionPolicy | None = None,
    report: DiffReport | None = None,
    ignored_parameters: Iterable[str] = (),
) -> frozenset[str]:
    """Diff *new_ref* against *old_ref*; with *merge*, update *old_ref* in place.

    Returns the blocks of *old_ref* with no counterpart in *new_ref*.
    """
    merger = HierarchicalDiffMerger(
        backend,
        merge=merge,
        policy=policy,
        report=report,
        ignored_parameters=ignored_parameters,
    )
    return merger.run(old_ref, new_ref).unique_to_target
