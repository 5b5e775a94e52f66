"""Interfaces implemented by model hosts."""

from slmerge_core.interfaces.backend import ModelBackend

__all__ = ["ModelBackend"]
