"""Tests for slmerge_core.backends: in-memory host and YAML files."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from slmerge_core.backends import InMemoryBackend, load_model, make_name_unique, save_model
from slmerge_core.config.models import AnnotationConfig
from slmerge_core.errors import CollaboratorError, ConfigurationError
from slmerge_core.interfaces import ModelBackend
from slmerge_core.model import Annotation, ModelDocument, NodeKind


@pytest.fixture
def loaded(backend, add_model, controller_blocks):
    return add_model("ctrl", controller_blocks)


# ── Name disambiguation ──────────────────────────────────────────────


class TestMakeNameUnique:
    def test_free_name_kept(self):
        assert make_name_unique("Gain", {"Sum"}) == "Gain"

    def test_appends_counter(self):
        assert make_name_unique("Gain", {"Gain"}) == "Gain1"

    def test_skips_taken_counters(self):
        assert make_name_unique("Gain", {"Gain", "Gain1", "Gain2"}) == "Gain3"

    def test_increments_trailing_digits(self):
        assert make_name_unique("Gain1", {"Gain1"}) == "Gain2"


# ── Protocol conformance ─────────────────────────────────────────────


def test_in_memory_backend_is_a_model_backend():
    assert isinstance(InMemoryBackend(), ModelBackend)


# ── Registration and resolution ──────────────────────────────────────


class TestModels:
    def test_add_model_returns_root(self, backend, loaded):
        assert loaded == "ctrl"
        assert backend.resolve_name("ctrl") == "ctrl"

    def test_duplicate_name_disambiguated(self, backend, loaded, controller_blocks):
        second = backend.add_model(ModelDocument(name="ctrl", blocks=controller_blocks))
        assert second == "ctrl1"

    def test_duplicate_name_rejected_when_not_unique(self, backend, loaded):
        with pytest.raises(ConfigurationError):
            backend.add_model(ModelDocument(name="ctrl"), unique=False)

    def test_resolve_name_normalizes(self, backend, loaded):
        assert backend.resolve_name(" ctrl/Plant/ ") == "ctrl/Plant"

    @pytest.mark.parametrize("ref", ["", "/", "other", "ctrl/Nope"])
    def test_resolve_name_unknown(self, backend, loaded, ref):
        with pytest.raises(ConfigurationError):
            backend.resolve_name(ref)


# ── Listing and parameters ───────────────────────────────────────────


class TestListing:
    def test_pre_order(self, backend, loaded):
        paths = [n.path for n in backend.list_nodes("ctrl")]
        assert paths == [
            "ctrl/Gain",
            "ctrl/Plant",
            "ctrl/Plant/Integrator",
            "ctrl/Plant/Delay",
        ]

    def test_node_kinds(self, backend, loaded):
        kinds = {n.name: n.kind for n in backend.list_nodes("ctrl")}
        assert kinds["Plant"] is NodeKind.subsystem
        assert kinds["Gain"] is NodeKind.block

    def test_list_subtree(self, backend, loaded):
        paths = [n.path for n in backend.list_nodes("ctrl/Plant")]
        assert paths == ["ctrl/Plant/Integrator", "ctrl/Plant/Delay"]

    def test_masked_subsystem_listed_but_not_entered(self):
        backend = InMemoryBackend(look_under_masks=False)
        backend.add_model(
            ModelDocument(
                name="m",
                blocks=[{"name": "Mask", "masked": True, "blocks": [{"name": "In"}]}],
            )
        )
        assert [n.path for n in backend.list_nodes("m")] == ["m/Mask"]

    def test_schema_flags_read_only(self, backend, loaded):
        schema = backend.get_parameter_schema("ctrl/Plant/Delay")
        assert set(schema) == {"InitialCondition", "SampleTime"}
        assert schema["SampleTime"].read_only
        assert not schema["InitialCondition"].read_only

    def test_get_unknown_parameter(self, backend, loaded):
        with pytest.raises(CollaboratorError):
            backend.get_parameter_value("ctrl/Gain", "Nope")

    def test_get_value_is_a_copy(self, backend, add_model):
        add_model("m", [{"name": "T", "parameters": {"Table": [1, 2]}}])
        backend.get_parameter_value("m/T", "Table").append(3)
        assert backend.get_parameter_value("m/T", "Table") == [1, 2]

    def test_set_value(self, backend, loaded):
        assert backend.set_parameter_value("ctrl/Gain", "Gain", 5) is True
        assert backend.get_parameter_value("ctrl/Gain", "Gain") == 5

    def test_set_read_only_rejected(self, backend, loaded):
        assert backend.set_parameter_value("ctrl/Plant/Delay", "SampleTime", 1) is False
        assert backend.get_parameter_value("ctrl/Plant/Delay", "SampleTime") == -1

    def test_set_unknown_path(self, backend, loaded):
        with pytest.raises(CollaboratorError) as exc_info:
            backend.set_parameter_value("ctrl/Missing", "Gain", 1)
        assert exc_info.value.path == "ctrl/Missing"


# ── Copying ──────────────────────────────────────────────────────────


class TestCopySubtree:
    def test_copy_into_other_model(self, backend, loaded, add_model):
        add_model("dst", [{"name": "Sub", "blocks": []}])
        new_path = backend.copy_subtree("ctrl/Plant", "dst/Sub")
        assert new_path == "dst/Sub/Plant"
        paths = [n.path for n in backend.list_nodes("dst")]
        assert paths == ["dst/Sub", "dst/Sub/Plant", "dst/Sub/Plant/Integrator", "dst/Sub/Plant/Delay"]

    def test_copy_renames_on_collision(self, backend, loaded):
        assert backend.copy_subtree("ctrl/Gain", "ctrl") == "ctrl/Gain1"
        assert backend.get_parameter_value("ctrl/Gain1", "Gain") == 2

    def test_copy_is_independent(self, backend, loaded):
        backend.copy_subtree("ctrl/Gain", "ctrl")
        backend.set_parameter_value("ctrl/Gain1", "Gain", 9)
        assert backend.get_parameter_value("ctrl/Gain", "Gain") == 2

    def test_copy_resets_annotations(self, backend, loaded):
        backend.annotate("ctrl/Plant/Delay", Annotation.updated)
        new_path = backend.copy_subtree("ctrl/Plant", "ctrl")
        assert backend.annotation_of(f"{new_path}/Delay") is Annotation.unchanged

    def test_copy_under_leaf_fails(self, backend, loaded):
        with pytest.raises(CollaboratorError):
            backend.copy_subtree("ctrl/Plant", "ctrl/Gain")


# ── Annotations ──────────────────────────────────────────────────────


class TestAnnotate:
    def test_own_status(self, backend, loaded):
        backend.annotate("ctrl/Gain", Annotation.updated)
        assert backend.annotation_of("ctrl/Gain") is Annotation.updated

    def test_container_slot_is_separate(self, backend, loaded):
        backend.annotate("ctrl/Plant", Annotation.added)
        backend.annotate("ctrl/Plant", Annotation.container_modified)
        assert backend.annotation_of("ctrl/Plant") is Annotation.added
        assert backend.container_annotation_of("ctrl/Plant") is Annotation.container_modified
        assert backend.effective_annotation("ctrl/Plant") is Annotation.added

    def test_effective_falls_back_to_container(self, backend, loaded):
        backend.annotate("ctrl/Plant", Annotation.container_modified)
        assert backend.effective_annotation("ctrl/Plant") is Annotation.container_modified

    def test_root_is_not_annotated(self, backend, loaded):
        backend.annotate("ctrl", Annotation.container_modified)
        assert all(
            backend.effective_annotation(n.path) is Annotation.unchanged
            for n in backend.list_nodes("ctrl")
        )


# ── Files ────────────────────────────────────────────────────────────


class TestFiles:
    def test_load_and_save_round_trip(self, backend, write_model, controller_blocks, tmp_path):
        root = load_model(backend, write_model("ctrl.yaml", "ctrl", controller_blocks))
        backend.set_parameter_value(f"{root}/Gain", "Gain", 4)
        backend.annotate(f"{root}/Gain", Annotation.updated)
        backend.annotate(f"{root}/Plant", Annotation.container_modified)

        out = save_model(backend, root, tmp_path / "out.yaml", colors=AnnotationConfig())
        data = yaml.safe_load(Path(out).read_text())
        gain, plant = data["blocks"]
        assert gain["parameters"]["Gain"] == 4
        assert gain["annotation"] == "updated"
        assert gain["color"] == "dark_orange"
        assert plant["container_annotation"] == "container-modified"
        assert plant["color"] == "yellow"
        delay = plant["blocks"][1]
        assert delay["parameters"]["SampleTime"] == {"value": -1, "read_only": True}
        assert "annotation" not in delay

        reloaded = InMemoryBackend()
        again = load_model(reloaded, out)
        assert reloaded.annotation_of(f"{again}/Gain") is Annotation.updated
        assert reloaded.container_annotation_of(f"{again}/Plant") is Annotation.container_modified

    def test_load_same_name_twice(self, backend, write_model):
        first = load_model(backend, write_model("a.yaml", "m", []))
        second = load_model(backend, write_model("b.yaml", "m", []))
        assert (first, second) == ("m", "m1")

    def test_save_with_name_override(self, backend, write_model, tmp_path):
        root = load_model(backend, write_model("a.yaml", "m", []))
        out = save_model(backend, root, tmp_path / "c.yaml", name="renamed")
        assert yaml.safe_load(out.read_text())["name"] == "renamed"

    def test_load_missing_file(self, backend, tmp_path):
        with pytest.raises(ConfigurationError):
            load_model(backend, tmp_path / "nope.yaml")
