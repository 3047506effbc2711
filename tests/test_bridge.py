from __future__ import annotations

import asyncio
from pathlib import Path

from fastapi import FastAPI, HTTPException
import httpx
import pytest

from logforge_shell.bridge import BridgeError, HttpBackendBridge
from logforge_shell.models import BackendSettings, JobStatus, RemoteModelConfig

BASE_URL = "http://backend.test/api/v1"


def _backend_app(store: dict) -> FastAPI:
    app = FastAPI()

    @app.get("/api/v1/config/status")
    def config_status():
        return {"configured": store["configured"]}

    @app.get("/api/v1/wizard")
    def get_wizard():
        return {"show": store["show_wizard"]}

    @app.put("/api/v1/wizard")
    def put_wizard(payload: dict):
        store["show_wizard"] = payload["show"]
        return {"show": store["show_wizard"]}

    @app.get("/api/v1/environment")
    def environment():
        return {"ready": False, "error": store.get("env_error", "")}

    @app.get("/api/v1/projects")
    def list_projects():
        return [{"id": "t1", "name": "router-logs", "status": "validated", "created_at": "2024-05-01T10:00:00"}]

    @app.get("/api/v1/projects/{project_id}")
    def get_project(project_id: str):
        if project_id != "t1":
            raise HTTPException(status_code=404, detail="Project not found")
        return {"id": "t1", "name": "router-logs", "code": "print(1)"}

    @app.delete("/api/v1/projects/{project_id}", status_code=204)
    def delete_project(project_id: str):
        store.setdefault("deleted", []).append(project_id)

    @app.post("/api/v1/batch")
    def start_batch(payload: dict):
        store["batch"] = payload
        return {"started": True}

    @app.get("/api/v1/batch/progress")
    def progress():
        return {
            "status": "running",
            "progress": 0.42,
            "current_file": "b.log",
            "total_files": 10,
            "processed": 4,
            "failed": 1,
            "message": "processing",
        }

    @app.post("/api/v1/samples/analyze")
    def analyze(payload: dict):
        return {"code": f"# {payload['project_name']}", "valid": True, "errors": []}

    @app.get("/api/v1/settings")
    def get_settings():
        return store["settings"]

    @app.put("/api/v1/settings")
    def put_settings(payload: dict):
        store["settings"] = payload
        return payload

    @app.post("/api/v1/llm/test")
    def test_llm():
        if not store["settings"].get("llm", {}).get("api_key"):
            raise HTTPException(status_code=400, detail="API key missing")
        return {"ok": True}

    @app.get("/api/v1/broken")
    def broken():
        raise HTTPException(status_code=500, detail="x" * 500)

    return app


@pytest.fixture
def store() -> dict:
    return {
        "configured": True,
        "show_wizard": True,
        "settings": {"llm": {"base_url": "", "api_key": "", "model_name": ""}, "sample_lines": 0, "theme": "dark"},
    }


@pytest.fixture
def make_bridge(store, logger):
    def factory(**kwargs) -> HttpBackendBridge:
        transport = httpx.ASGITransport(app=_backend_app(store))
        return HttpBackendBridge(BASE_URL, 5.0, logger, transport=transport, **kwargs)

    return factory


def test_status_and_wizard_endpoints(make_bridge, store) -> None:
    bridge = make_bridge()

    async def scenario() -> tuple[bool, bool, bool]:
        configured = await bridge.is_configured()
        show = await bridge.get_show_wizard()
        await bridge.set_show_wizard(False)
        after = await bridge.get_show_wizard()
        await bridge.close()
        return configured, show, after

    assert asyncio.run(scenario()) == (True, True, False)
    assert store["show_wizard"] is False


def test_environment_blank_error_is_none(make_bridge, store) -> None:
    bridge = make_bridge()
    status = asyncio.run(bridge.get_environment_ready())
    assert status.ready is False
    assert status.error is None

    store["env_error"] = "uv not found"
    status = asyncio.run(make_bridge().get_environment_ready())
    assert status.error == "uv not found"


def test_job_targets(make_bridge, store) -> None:
    bridge = make_bridge()

    async def scenario():
        targets = await bridge.list_job_targets()
        target = await bridge.get_job_target("t1")
        await bridge.delete_job_target("t1")
        with pytest.raises(BridgeError, match="status=404 detail=Project not found"):
            await bridge.get_job_target("missing")
        return targets, target

    targets, target = asyncio.run(scenario())
    assert [t.id for t in targets] == ["t1"]
    assert targets[0].created_at is not None
    assert target.code == "print(1)"
    assert store["deleted"] == ["t1"]


def test_submit_and_progress(make_bridge, store) -> None:
    bridge = make_bridge()

    async def scenario():
        await bridge.submit_job("t1", "/in", "/out")
        first = dict(store["batch"])
        await bridge.submit_job("t1", "/in", "/out", "report")
        return first, await bridge.get_job_progress()

    first, progress = asyncio.run(scenario())
    assert first == {"project_id": "t1", "input_dir": "/in", "output_dir": "/out"}
    assert store["batch"]["output_name"] == "report"
    assert progress.status is JobStatus.running
    assert progress.percent == 42
    assert progress.current_item == "b.log"
    assert progress.succeeded_items == 3


def test_settings_round_trip_keeps_unknown_fields(make_bridge, store) -> None:
    bridge = make_bridge()

    async def scenario() -> BackendSettings:
        loaded = await bridge.get_settings()
        updated = loaded.model_copy(update={"llm": RemoteModelConfig(base_url="u", api_key="k", model_name="m")})
        await bridge.save_settings(updated)
        await bridge.test_remote_connection()
        return loaded

    loaded = asyncio.run(scenario())
    assert loaded.sample_lines == 5
    assert store["settings"]["theme"] == "dark"
    assert store["settings"]["llm"]["api_key"] == "k"


def test_connection_test_failure_carries_detail(make_bridge) -> None:
    bridge = make_bridge()
    with pytest.raises(BridgeError, match="API key missing"):
        asyncio.run(bridge.test_remote_connection())


def test_long_error_detail_is_truncated(make_bridge) -> None:
    bridge = make_bridge()
    with pytest.raises(BridgeError) as excinfo:
        asyncio.run(bridge._get_json("/broken"))
    message = str(excinfo.value)
    assert message.startswith("status=500 detail=")
    assert message.endswith("...")
    assert len(message) < 260


def test_analyze_sample(make_bridge) -> None:
    result = asyncio.run(make_bridge().analyze_sample("router", "line 1"))
    assert result.valid is True
    assert result.code == "# router"


def test_transport_errors_retry_then_raise(logger) -> None:
    attempts = []

    def handler(request: httpx.Request) -> httpx.Response:
        attempts.append(request.url.path)
        raise httpx.ConnectError("refused", request=request)

    bridge = HttpBackendBridge(BASE_URL, 1.0, logger, retries=2, transport=httpx.MockTransport(handler))
    with pytest.raises(BridgeError, match="ConnectError"):
        asyncio.run(bridge.list_job_targets())
    assert attempts == ["/api/v1/projects", "/api/v1/projects"]


def test_select_directory_uses_picker(logger) -> None:
    async def async_picker(title: str) -> str:
        return f"/async/{title}"

    sync_bridge = HttpBackendBridge(BASE_URL, 1.0, logger, directory_picker=lambda title: "/chosen")
    async_bridge = HttpBackendBridge(BASE_URL, 1.0, logger, directory_picker=async_picker)
    cancelled_bridge = HttpBackendBridge(BASE_URL, 1.0, logger, directory_picker=lambda title: "")

    assert asyncio.run(sync_bridge.select_directory("Input")) == "/chosen"
    assert asyncio.run(async_bridge.select_directory("out")) == "/async/out"
    assert asyncio.run(cancelled_bridge.select_directory("Input")) == ""

    with pytest.raises(BridgeError, match="directory_picker_unavailable"):
        asyncio.run(HttpBackendBridge(BASE_URL, 1.0, logger).select_directory("Input"))


def test_open_directory_rejects_missing_path(logger, tmp_path: Path, monkeypatch) -> None:
    opened = []
    monkeypatch.setattr("logforge_shell.bridge._open_in_file_browser", opened.append)
    bridge = HttpBackendBridge(BASE_URL, 1.0, logger)

    asyncio.run(bridge.open_directory(str(tmp_path)))
    assert opened == [tmp_path]

    with pytest.raises(BridgeError, match="directory_not_found"):
        asyncio.run(bridge.open_directory(str(tmp_path / "nope")))
