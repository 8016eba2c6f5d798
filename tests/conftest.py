from __future__ import annotations

import asyncio
import base64
import sys
from collections.abc import Iterator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Ensure repo root is on sys.path so `import badge_issuer` works under pytest.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from badge_issuer.main import app  # noqa: E402
from badge_issuer.models.catalog import Catalog  # noqa: E402
from badge_issuer.repos.store import InMemoryStore  # noqa: E402
from badge_issuer.services.issuance import BadgeWorkflow, WorkflowConfig  # noqa: E402

STORAGE = "https://acme.github.io/badges"

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"not-really-an-image"
PNG_B64 = base64.b64encode(PNG_BYTES).decode("ascii")


@pytest.fixture
def config() -> WorkflowConfig:
    return WorkflowConfig(user="acme", repo="badges", storage=STORAGE)


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def image_path(tmp_path: Path) -> Path:
    path = tmp_path / "logo.png"
    path.write_bytes(PNG_BYTES)
    return path


@pytest.fixture
def workflow(config: WorkflowConfig, store: InMemoryStore) -> BadgeWorkflow:
    return BadgeWorkflow(config, Catalog(has_issuer=False), store)


@pytest.fixture
def client(workflow: BadgeWorkflow) -> Iterator[TestClient]:
    """TestClient without lifespan; the workflow is injected directly."""
    app.state.workflow = workflow
    app.state.init_error = None
    yield TestClient(app)
    app.state.workflow = None
    app.state.init_error = None


def run(coro):
    return asyncio.run(coro)


def seed(store: InMemoryStore, path: str, message: str, content: bytes = b"{}") -> None:
    """Commit a file straight into the in-memory store."""
    run(store.write_file(path, message, base64.b64encode(content).decode("ascii")))
