"""Tests for application assembly, startup and the error envelope."""
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from filestore import main
from filestore.config import AppConfig, StorageSettings
from filestore.errors import (
    BadRequest,
    FileStoreError,
    InternalError,
    MethodNotAllowed,
    NotFound,
    error_response,
    register_error_handlers,
)
from filestore.main import create_app


class TestErrorResponder:
    """Tests for the shared error envelope."""

    def test_error_response_shape(self):
        response = error_response("Something broke", 418)
        assert response.status_code == 418
        assert response.body == b'{"error":"Something broke"}'
        assert response.media_type == "application/json"

    @pytest.mark.parametrize(
        "exc_class, status_code",
        [(MethodNotAllowed, 405), (BadRequest, 400), (NotFound, 404), (InternalError, 500)],
    )
    def test_taxonomy_status_codes(self, exc_class, status_code):
        exc = exc_class("message")
        assert isinstance(exc, FileStoreError)
        assert exc.status_code == status_code
        assert exc.message == "message"

    def test_handlers_render_envelope(self):
        app = FastAPI()
        register_error_handlers(app)

        @app.get("/boom")
        async def boom():
            raise InternalError("Kaboom")

        @app.get("/typed/{value}")
        async def typed(value: int):
            return {"value": value}

        client = TestClient(app)

        response = client.get("/boom")
        assert response.status_code == 500
        assert response.json() == {"error": "Kaboom"}

        response = client.get("/typed/abc")
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid request"}

        response = client.get("/missing")
        assert response.status_code == 404
        assert response.json() == {"error": "Not Found"}


    def test_unexpected_error_renders_envelope(self):
        app = FastAPI()
        register_error_handlers(app)

        @app.get("/crash")
        async def crash():
            raise RuntimeError("unexpected")

        client = TestClient(app, raise_server_exceptions=False)
        response = client.get("/crash")
        assert response.status_code == 500
        assert response.json() == {"error": "Internal server error"}


class TestStartup:
    """Tests for create_app and the lifespan hooks."""

    def test_startup_creates_storage_root(self, app_config, data_dir):
        assert not data_dir.exists()
        with TestClient(create_app(app_config)):
            assert data_dir.is_dir()

    def test_startup_reuses_existing_storage_root(self, app_config, data_dir):
        data_dir.mkdir()
        (data_dir / "old.txt").write_text("kept")

        with TestClient(create_app(app_config)) as client:
            assert client.get("/files").json() == ["old.txt"]

    def test_startup_fails_when_storage_root_cannot_be_created(self, tmp_path, public_dir):
        blocker = tmp_path / "blocker"
        blocker.write_text("a file, not a directory")
        config = AppConfig(
            storage=StorageSettings(data_dir=str(blocker / "data"), public_dir=str(public_dir)),
        )

        with pytest.raises(OSError):
            with TestClient(create_app(config)):
                pass

    def test_missing_public_dir_falls_back_to_404(self, tmp_path):
        config = AppConfig(
            storage=StorageSettings(
                data_dir=str(tmp_path / "data"),
                public_dir=str(tmp_path / "no-public"),
            ),
        )
        with TestClient(create_app(config)) as client:
            response = client.get("/")
            assert response.status_code == 404
            assert response.json() == {"error": "Not Found"}
            assert client.get("/files").json() == []

    def test_app_state_holds_config_and_storage(self, app_config, data_dir):
        app = create_app(app_config)
        assert app.state.config is app_config
        assert app.state.storage.root == data_dir


class TestRun:
    """Tests for the process entry point."""

    def test_listen_failure_exits_with_status_1(self, app_config, monkeypatch):
        def fail_to_listen(*args, **kwargs):
            raise OSError(98, "Address already in use")

        monkeypatch.setattr(main, "get_config", lambda: app_config)
        monkeypatch.setattr(main.uvicorn, "run", fail_to_listen)

        with pytest.raises(SystemExit) as exc_info:
            main.run()
        assert exc_info.value.code == 1

    def test_run_passes_server_settings(self, app_config, monkeypatch):
        captured = {}

        def fake_run(app, **kwargs):
            captured["app"] = app
            captured.update(kwargs)

        monkeypatch.setattr(main, "get_config", lambda: app_config)
        monkeypatch.setattr(main.uvicorn, "run", fake_run)

        main.run()

        assert isinstance(captured["app"], FastAPI)
        assert captured["host"] == "0.0.0.0"
        assert captured["port"] == 8080
        assert captured["log_level"] == "info"
