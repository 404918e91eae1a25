"""Persistent snapshot of the document under edit.

The whole document is stored as one JSON string (an
:meth:`~specedit.document.OpenAPIDocument.export` result) under a single
key in a :mod:`diskcache` directory. Every CLI invocation restores the
snapshot, applies one edit, and saves it back.

A snapshot that cannot be parsed or imported is not fatal:
:meth:`SnapshotStore.restore_into` logs a warning and starts the document
from the empty skeleton instead.

See Also:
    :class:`~specedit.models.StorageConfig` -- the Pydantic model that
    controls the key and the store directory.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Optional

import diskcache

from specedit.document import OpenAPIDocument
from specedit.exceptions import FormatError, LoadError
from specedit.models import StorageConfig

logger = logging.getLogger(__name__)


class SnapshotStore:
    """Disk-backed key/value slot for one serialised document.

    Args:
        directory: Directory of the underlying :class:`diskcache.Cache`.
        key: The key the snapshot is stored under.

    Example::

        store = SnapshotStore("/tmp/specedit-store")
        document = OpenAPIDocument()
        store.restore_into(document)
        document.add_tag("users")
        store.save(document.export())
        store.close()
    """

    def __init__(self, directory: str | Path, key: str = StorageConfig().key) -> None:
        self._directory = Path(directory)
        self._key = key
        self._cache = diskcache.Cache(str(self._directory))

    @property
    def directory(self) -> Path:
        return self._directory

    @property
    def key(self) -> str:
        return self._key

    def exists(self) -> bool:
        """Return True if a snapshot is stored under the key."""
        return self._key in self._cache

    def save(self, document: dict[str, Any], indent: int = 2) -> None:
        """Serialise *document* to JSON and store it, replacing any previous snapshot."""
        self._cache.set(self._key, json.dumps(document, indent=indent))
        logger.debug("Saved snapshot %s to %s", self._key, self._directory)

    def load(self) -> Optional[dict[str, Any]]:
        """Return the stored document, or ``None`` when nothing is stored.

        Raises:
            LoadError: If the stored value is not valid JSON.
            FormatError: If it parses to something other than an object.
        """
        raw = self._cache.get(self._key)
        if raw is None:
            return None
        try:
            data = json.loads(raw)
        except (TypeError, json.JSONDecodeError) as exc:
            raise LoadError(f"Stored snapshot is not valid JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise FormatError("Stored snapshot is not a JSON object")
        return data

    def restore_into(self, document: OpenAPIDocument) -> bool:
        """Load the snapshot into *document*.

        Returns:
            True if a stored snapshot was imported. False if there was none
            or it was unusable; *document* is reset to the empty skeleton in
            both cases.
        """
        try:
            data = self.load()
            if data is not None:
                document.import_document(data)
                return True
        except (LoadError, FormatError) as exc:
            logger.warning("Ignoring unusable snapshot %s: %s", self._key, exc)
        document.initialize_empty()
        return False

    def clear(self) -> None:
        """Remove the snapshot. A missing snapshot is not an error."""
        self._cache.delete(self._key)

    def close(self) -> None:
        """Close the underlying :class:`diskcache.Cache` and release resources."""
        self._cache.close()

    def __enter__(self) -> SnapshotStore:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
