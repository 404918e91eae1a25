"""Read OpenAPI documents for ``specedit import`` and ``specedit validate``.

A source is ``-`` (stdin), an ``http(s)://`` URL or a local path. Content
may be JSON or YAML; the file suffix or HTTP content type picks the parser
when it can, and otherwise JSON is tried before YAML. Everything returned
is a plain ``dict`` ready for
:meth:`~specedit.document.OpenAPIDocument.import_document` or
:func:`~specedit.validation.validate`.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

import httpx
import yaml

from specedit.exceptions import FormatError, LoadError

_SUFFIX_HINTS = {".json": "json", ".yaml": "yaml", ".yml": "yaml"}
_FETCH_TIMEOUT = 30.0


class _DocumentLoader(yaml.SafeLoader):
    """``SafeLoader`` that keeps timestamps and binary scalars as plain text.

    JSON has no date type, so ``version: 2024-01-01`` stays the string it
    was written as.
    """


for _tag in ("tag:yaml.org,2002:timestamp", "tag:yaml.org,2002:binary"):
    _DocumentLoader.add_constructor(_tag, _DocumentLoader.construct_yaml_str)


def load_document(source: str) -> dict[str, Any]:
    """Load the document at *source*.

    Raises:
        LoadError: The source cannot be read, is empty, or is neither JSON
            nor YAML.
        FormatError: The content parses but is not a mapping.
    """
    if source == "-":
        return _load_from_stdin()
    if source.startswith(("http://", "https://")):
        return _load_from_url(source)
    return _load_from_file(source)


def _load_from_stdin() -> dict[str, Any]:
    try:
        content = sys.stdin.read()
    except OSError as exc:
        raise LoadError(f"Failed to read from stdin: {exc}") from exc
    if not content.strip():
        raise LoadError("No input received from stdin")
    return parse_content(content)


def _content_type_hint(content_type: str) -> str:
    if "json" in content_type:
        return "json"
    if "yaml" in content_type or "yml" in content_type:
        return "yaml"
    return ""


def _load_from_url(url: str) -> dict[str, Any]:
    try:
        response = httpx.get(url, timeout=_FETCH_TIMEOUT, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise LoadError(
            f"HTTP {exc.response.status_code} fetching document from {url}"
        ) from exc
    except httpx.RequestError as exc:
        raise LoadError(f"Failed to fetch document from {url}: {exc}") from exc

    hint = _content_type_hint(response.headers.get("content-type", ""))
    return parse_content(response.text, hint=hint)


def _load_from_file(path: str) -> dict[str, Any]:
    file_path = Path(path)
    if not file_path.is_file():
        raise LoadError(f"Document file not found: {path}")
    try:
        content = file_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise LoadError(f"Failed to read document file {path}: {exc}") from exc
    if not content.strip():
        raise LoadError(f"Document file is empty: {path}")
    return parse_content(content, hint=_SUFFIX_HINTS.get(file_path.suffix.lower(), ""))


def parse_content(content: str, hint: str = "") -> dict[str, Any]:
    """Parse *content* into a mapping.

    With ``hint="json"`` only JSON is accepted; with ``hint="yaml"`` JSON
    is skipped. Without a hint JSON is tried first and YAML second.

    Raises:
        LoadError: Nothing could parse the text.
        FormatError: The parsed value is not a mapping.
    """
    errors: list[str] = []

    if hint != "yaml":
        try:
            return _require_object(json.loads(content))
        except json.JSONDecodeError as exc:
            if hint == "json":
                raise LoadError(f"Invalid JSON: {exc}") from exc
            errors.append(f"JSON error: {exc}")

    try:
        return _require_object(yaml.load(content, Loader=_DocumentLoader))
    except yaml.YAMLError as exc:
        errors.append(f"YAML error: {exc}")

    raise LoadError("\n  ".join(["Failed to parse document as JSON or YAML", *errors]))


def _require_object(result: Any) -> dict[str, Any]:
    if isinstance(result, dict):
        return result
    kind = "empty document" if result is None else type(result).__name__
    raise FormatError(f"Document must be a JSON/YAML object (got {kind})")
