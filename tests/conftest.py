"""Fixtures shared by the specedit test suite.

The petstore fixture document lives in ``tests/fixtures`` as JSON and YAML.
Anything that touches configuration or the snapshot store should go through
``isolated_config`` (or ``run_cli``, which uses it) so that no test reads or
writes the real user directories.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterator

import pytest

from specedit.document import OpenAPIDocument
from specedit.output import reset_output
from specedit.storage import SnapshotStore


FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture(autouse=True)
def _fresh_output() -> Iterator[None]:
    # CliRunner swaps sys.stdout/stderr; a manager created during one test
    # would keep writing to the closed streams in the next.
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------


@pytest.fixture
def petstore_json_path() -> Path:
    return FIXTURES_DIR / "petstore_3.1.json"


@pytest.fixture
def petstore_yaml_path() -> Path:
    return FIXTURES_DIR / "petstore_3.1.yaml"


@pytest.fixture
def petstore_raw(petstore_json_path: Path) -> dict[str, Any]:
    return json.loads(petstore_json_path.read_text(encoding="utf-8"))


@pytest.fixture
def document() -> OpenAPIDocument:
    """An empty document (default skeleton)."""
    return OpenAPIDocument()


@pytest.fixture
def petstore_document(petstore_raw: dict[str, Any]) -> OpenAPIDocument:
    """The petstore fixture, imported.

    Ids follow file order: ``endpoint_1`` GET /pets, ``endpoint_2`` POST
    /pets, ``endpoint_3`` GET /pets/{petId}, ``endpoint_4`` GET /health.
    """
    doc = OpenAPIDocument()
    doc.import_document(petstore_raw)
    return doc


@pytest.fixture
def store(tmp_path: Path) -> Iterator[SnapshotStore]:
    snapshot_store = SnapshotStore(tmp_path / "store")
    yield snapshot_store
    snapshot_store.close()


# ---------------------------------------------------------------------------
# Environment
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the XDG config and data dirs into *tmp_path* and ``chdir`` there.

    ``SPECEDIT_STORE`` is cleared so the default store location applies.
    Returns *tmp_path*.
    """
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.setattr("specedit.config._is_xdg_platform", lambda: True)
    monkeypatch.delenv("SPECEDIT_STORE", raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    from typer.testing import CliRunner

    return CliRunner()


@pytest.fixture
def run_cli(cli_runner, isolated_config: Path):
    """Call the ``specedit`` app with a store under the isolated tmp dir.

    ``--no-color`` and ``--store`` are always passed first, so further root
    options (``--quiet``, ``--force``) may lead the arguments::

        result = run_cli("endpoint", "add", "get", "/users")
        result = run_cli("--quiet", "show")
    """
    from specedit.app import app

    store_dir = isolated_config / "store"

    def _run(*args: str, input: str | None = None):
        return cli_runner.invoke(
            app, ["--no-color", "--store", str(store_dir), *args], input=input
        )

    _run.store_dir = store_dir  # type: ignore[attr-defined]
    return _run
