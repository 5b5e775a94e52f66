"""Shared test fixtures for slmerge."""

import pytest
import yaml

from slmerge_core.backends import InMemoryBackend
from slmerge_core.config.models import SlmergeConfig
from slmerge_core.model import ModelDocument


def model_doc(name: str, blocks: list[dict]) -> ModelDocument:
    return ModelDocument(name=name, blocks=blocks)


@pytest.fixture
def backend():
    return InMemoryBackend()


@pytest.fixture
def add_model(backend):
    """Register a model built from plain dicts; returns its root path."""

    def _add(name: str, blocks: list[dict]) -> str:
        return backend.add_model(model_doc(name, blocks))

    return _add


@pytest.fixture
def controller_blocks():
    """A small controller: a gain, and a plant subsystem with two blocks."""
    return [
        {"name": "Gain", "type": "Gain", "parameters": {"Gain": 2, "SaturateOnIntegerOverflow": "off"}},
        {
            "name": "Plant",
            "type": "SubSystem",
            "blocks": [
                {"name": "Integrator", "type": "Integrator", "parameters": {"InitialCondition": 0}},
                {
                    "name": "Delay",
                    "type": "UnitDelay",
                    "parameters": {
                        "InitialCondition": 0,
                        "SampleTime": {"value": -1, "read_only": True},
                    },
                },
            ],
        },
    ]


@pytest.fixture
def write_model(tmp_path):
    """Write a model file from plain dicts; returns its path as a string."""

    def _write(filename: str, name: str, blocks: list[dict]) -> str:
        path = tmp_path / filename
        path.write_text(yaml.safe_dump({"name": name, "blocks": blocks}, sort_keys=False))
        return str(path)

    return _write


@pytest.fixture
def sample_config():
    return SlmergeConfig()
