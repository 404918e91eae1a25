"""Editing session: one document, its snapshot store, and file I/O around them.

:class:`EditorSession` is the application object the CLI commands talk to.
It receives its collaborators explicitly (a
:class:`~specedit.document.OpenAPIDocument` and a
:class:`~specedit.storage.SnapshotStore`) so tests can hand in their own;
:meth:`EditorSession.from_config` builds the default wiring from a
:class:`~specedit.models.GlobalConfig`.

The document model never performs I/O. Everything that touches a disk, the
network or stdin happens here, before or after the model call.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from specedit.config import atomic_write, get_store_dir
from specedit.document import OpenAPIDocument
from specedit.exceptions import OverwriteRefusedError
from specedit.loader import load_document
from specedit.models import GlobalConfig, ValidationResult
from specedit.storage import SnapshotStore
from specedit.validation import validate

logger = logging.getLogger(__name__)


class EditorSession:
    """Bind a document to its persisted snapshot.

    Args:
        document: The document model to edit.
        store: Where the document is restored from and saved to.
        indent: JSON indentation for exported files.
        export_filename: Default target of :meth:`export_file`.

    Example::

        with EditorSession.from_config(resolve_config()) as session:
            session.open()
            session.document.add_tag("users")
            session.save()
    """

    def __init__(
        self,
        document: OpenAPIDocument,
        store: SnapshotStore,
        indent: int = 2,
        export_filename: str = "openapi.json",
    ) -> None:
        self.document = document
        self.store = store
        self.indent = indent
        self.export_filename = export_filename

    @classmethod
    def from_config(cls, config: GlobalConfig) -> EditorSession:
        """Build a session over a fresh document and the configured store."""
        store = SnapshotStore(get_store_dir(config), config.storage.key)
        return cls(
            OpenAPIDocument(),
            store,
            indent=config.export.indent,
            export_filename=config.export.filename,
        )

    def open(self) -> bool:
        """Restore the stored snapshot; returns False when starting empty."""
        return self.store.restore_into(self.document)

    def save(self) -> None:
        self.store.save(self.document.export(), indent=self.indent)

    def reload(self) -> bool:
        """Swap in a fresh document restored from the snapshot.

        Identifiers are handed out in document order on restore, so after a
        save this renumbers endpoints exactly as the next session will.
        """
        self.document = OpenAPIDocument()
        return self.open()

    def import_file(self, source: str, overwrite: bool = False) -> None:
        """Replace the document with the one at *source* and save it.

        Args:
            source: File path, ``http(s)://`` URL, or ``-`` for stdin.
            overwrite: Replace an existing snapshot. Without it an existing
                snapshot makes the import fail.

        Raises:
            OverwriteRefusedError: If a snapshot exists and *overwrite* is
                False.
            LoadError: If *source* cannot be read or parsed.
            FormatError: If the parsed document is not importable.

        On any failure neither the document nor the snapshot changes.
        """
        if self.store.exists() and not overwrite:
            raise OverwriteRefusedError(
                "A document is already stored; importing will replace it. "
                "Use --force to overwrite."
            )
        data = load_document(source)
        self.document.import_document(data)
        self.save()
        logger.debug("Imported %s", source)

    def export_file(self, path: str | Path | None = None) -> Path:
        """Write the canonical document as indented JSON and return the path."""
        target = Path(path) if path is not None else Path(self.export_filename)
        text = json.dumps(self.document.export(), indent=self.indent) + "\n"
        atomic_write(target, text)
        return target

    def validate(self) -> ValidationResult:
        return validate(self.document.export())

    def clear(self) -> None:
        """Forget the stored snapshot and reset the document to the skeleton."""
        self.store.clear()
        self.document.initialize_empty()

    def close(self) -> None:
        self.store.close()

    def __enter__(self) -> EditorSession:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
