"""Load and save YAML model files through an in-memory backend."""

from __future__ import annotations

import logging
from pathlib import Path

from slmerge_core.backends.memory import InMemoryBackend
from slmerge_core.config.models import AnnotationConfig
from slmerge_core.model.document import read_document, write_document

logger = logging.getLogger(__name__)


def load_model(backend: InMemoryBackend, path: str | Path) -> str:
    """Read a model file into *backend* and return its root path.

    A model whose name is already loaded gets a disambiguated root name.
    """
    doc = read_document(path)
    root = backend.add_model(doc)
    logger.info("Loaded %s as '%s'", path, root)
    return root


def save_model(
    backend: InMemoryBackend,
    root: str,
    path: str | Path,
    colors: AnnotationConfig | None = None,
    name: str | None = None,
) -> Path:
    """Write the model at *root* to *path*, keeping review annotations.

    *name* overrides the model name written to the file.
    """
    doc = backend.export_model(root, colors)
    if name is not None:
        doc = doc.model_copy(update={"name": name})
    dest = write_document(doc, path)
    logger.info("Saved '%s' to %s", root, dest)
    return dest
