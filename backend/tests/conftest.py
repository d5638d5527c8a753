"""Shared test fixtures and configuration for backend tests."""
import pytest
from fastapi.testclient import TestClient

from filestore.config import AppConfig, StorageSettings
from filestore.main import create_app


@pytest.fixture
def data_dir(tmp_path):
    """Storage root path; not created, so startup has to create it."""
    return tmp_path / "data"


@pytest.fixture
def public_dir(tmp_path):
    """Public directory holding a minimal index page and one asset."""
    public = tmp_path / "public"
    public.mkdir()
    (public / "index.html").write_text("<h1>filestore</h1>", encoding="utf-8")
    (public / "script.js").write_text("console.log('hi');", encoding="utf-8")
    return public


@pytest.fixture
def app_config(data_dir, public_dir):
    return AppConfig(
        storage=StorageSettings(data_dir=str(data_dir), public_dir=str(public_dir)),
    )


@pytest.fixture
def api_client(app_config):
    """Provide a TestClient with the lifespan started.

    Entering the client runs startup, which creates the storage root.
    """
    with TestClient(create_app(app_config)) as client:
        yield client
