"""specedit -- build and validate OpenAPI 3.1 documents piece by piece.

This package holds the editing core of an OpenAPI 3.1 document editor plus a
small command-line front end. A user starts from an empty skeleton (or imports
an existing document), adds endpoints, schemas, security schemes and tags one
at a time, and exports the result as canonically ordered JSON.

Typical workflow::

    specedit new                                  # fresh skeleton
    specedit endpoint add get /users --tag users  # edit piecemeal
    specedit validate                             # structural checks
    specedit export openapi.json                  # canonical JSON

Modules:
    app: Typer application and CLI entry point.
    commands: Built-in command groups.
    document: The document model and its reference tracker.
    serializer: Deterministic key ordering for stable JSON output.
    validation: Structural validator returning violations as data.
    components: Typed builders for schemas and security schemes.
    models: Pydantic models shared across the package.
    session: Application object wiring document, storage and validator.
    storage: Persisted snapshot of the document between invocations.
    loader: Load documents from files, URLs, or stdin.
    config: XDG-aware configuration.
    exceptions: Exception hierarchy with exit-code mapping.
    output: stdout/stderr formatting with Rich support.
"""

__version__ = "0.1.0"
