"""Concrete model hosts."""

from slmerge_core.backends.files import load_model, save_model
from slmerge_core.backends.memory import InMemoryBackend, make_name_unique

__all__ = [
    "InMemoryBackend",
    "load_model",
    "make_name_unique",
    "save_model",
]
