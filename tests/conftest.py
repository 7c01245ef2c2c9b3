import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Modules under app/ are imported by bare name (core, api, services, main)
sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "app"))

from core.tasks_store import TaskRegistry  # noqa: E402
from main import create_app  # noqa: E402


@pytest.fixture
def upload_dir(tmp_path):
    return tmp_path / "uploads"


@pytest.fixture
def registry():
    return TaskRegistry(shards=4)


@pytest.fixture
def client(upload_dir, registry):
    app = create_app(upload_dir=upload_dir, registry=registry)
    with TestClient(app) as client:
        yield client
