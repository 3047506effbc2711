from __future__ import annotations

import asyncio
import inspect
import logging
import os
from pathlib import Path
import subprocess
import sys
from typing import Any, Awaitable, Callable, Protocol
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from logforge_shell.models import (
    AnalysisResult,
    BackendSettings,
    EnvironmentStatus,
    JobProgress,
    JobTarget,
)


DirectoryPicker = Callable[[str], "str | Awaitable[str]"]


class BridgeError(RuntimeError):
    """Any failed backend call. Carries a message only."""


class BackendBridge(Protocol):
    async def is_configured(self) -> bool: ...

    async def get_show_wizard(self) -> bool: ...

    async def set_show_wizard(self, show: bool) -> None: ...

    async def get_environment_ready(self) -> EnvironmentStatus: ...

    async def list_job_targets(self) -> list[JobTarget]: ...

    async def get_job_target(self, target_id: str) -> JobTarget: ...

    async def delete_job_target(self, target_id: str) -> None: ...

    async def submit_job(
        self, target_id: str, input_dir: str, output_dir: str, output_name: str | None = None
    ) -> None: ...

    async def get_job_progress(self) -> JobProgress: ...

    async def analyze_sample(self, project_name: str, sample_text: str) -> AnalysisResult: ...

    async def get_settings(self) -> BackendSettings: ...

    async def save_settings(self, settings: BackendSettings) -> None: ...

    async def test_remote_connection(self) -> None: ...

    async def select_directory(self, prompt_title: str) -> str: ...

    async def open_directory(self, path: str) -> None: ...

    async def close(self) -> None: ...


class HttpBackendBridge:
    def __init__(
        self,
        base_url: str,
        timeout: float,
        logger: logging.Logger,
        retries: int = 2,
        directory_picker: DirectoryPicker | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._logger = logger
        self._retries = max(1, retries)
        self._directory_picker = directory_picker
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=self._timeout,
            transport=transport,
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    def set_directory_picker(self, picker: DirectoryPicker | None) -> None:
        self._directory_picker = picker

    async def close(self) -> None:
        await self._client.aclose()

    def _format_error(self, exc: Exception) -> str:
        if isinstance(exc, httpx.HTTPStatusError):
            response = exc.response
            detail = _response_detail(response)
            return f"status={response.status_code} detail={detail}"
        if isinstance(exc, httpx.RequestError):
            return f"{exc.__class__.__name__}: {exc}"
        return str(exc)

    async def _request(
        self,
        method: str,
        url: str,
        json_body: Any = None,
        retries: int = 1,
    ) -> httpx.Response:
        last_exc: Exception | None = None
        for attempt in range(1, retries + 1):
            try:
                response = await self._client.request(method, url, json=json_body)
                response.raise_for_status()
                return response
            except httpx.HTTPStatusError as exc:
                # The backend answered; a retry will not change its mind.
                last_exc = exc
                break
            except httpx.RequestError as exc:
                last_exc = exc
                if attempt >= retries:
                    break
                await asyncio.sleep(min(0.25 * 2**attempt, 2.0))
        message = self._format_error(last_exc) if last_exc else "unknown_error"
        self._logger.warning(
            "bridge_request_failed method=%s url=%s error=%s",
            method,
            url,
            message,
        )
        raise BridgeError(message)

    async def _get_json(self, url: str, retries: int = 1) -> Any:
        response = await self._request("GET", url, retries=retries)
        return _decode(response)

    async def is_configured(self) -> bool:
        data = await self._get_json("/config/status")
        if isinstance(data, dict):
            return bool(data.get("configured"))
        return bool(data)

    async def get_show_wizard(self) -> bool:
        data = await self._get_json("/wizard")
        if isinstance(data, dict):
            return bool(data.get("show", True))
        return bool(data)

    async def set_show_wizard(self, show: bool) -> None:
        await self._request("PUT", "/wizard", {"show": bool(show)})

    async def get_environment_ready(self) -> EnvironmentStatus:
        data = await self._get_json("/environment")
        return _parse(EnvironmentStatus, data)

    async def list_job_targets(self) -> list[JobTarget]:
        data = await self._get_json("/projects", retries=self._retries)
        if isinstance(data, dict) and isinstance(data.get("items"), list):
            data = data["items"]
        if not isinstance(data, list):
            return []
        return [_parse(JobTarget, item) for item in data if isinstance(item, dict)]

    async def get_job_target(self, target_id: str) -> JobTarget:
        data = await self._get_json(f"/projects/{quote(target_id, safe='')}", retries=self._retries)
        return _parse(JobTarget, data)

    async def delete_job_target(self, target_id: str) -> None:
        await self._request("DELETE", f"/projects/{quote(target_id, safe='')}")

    async def submit_job(
        self, target_id: str, input_dir: str, output_dir: str, output_name: str | None = None
    ) -> None:
        payload: dict[str, Any] = {
            "project_id": target_id,
            "input_dir": input_dir,
            "output_dir": output_dir,
        }
        if output_name:
            payload["output_name"] = output_name
        await self._request("POST", "/batch", payload)

    async def get_job_progress(self) -> JobProgress:
        data = await self._get_json("/batch/progress")
        return _parse(JobProgress, data)

    async def analyze_sample(self, project_name: str, sample_text: str) -> AnalysisResult:
        response = await self._request(
            "POST",
            "/samples/analyze",
            {"project_name": project_name, "sample_text": sample_text},
        )
        return _parse(AnalysisResult, _decode(response))

    async def get_settings(self) -> BackendSettings:
        data = await self._get_json("/settings", retries=self._retries)
        return _parse(BackendSettings, data)

    async def save_settings(self, settings: BackendSettings) -> None:
        await self._request("PUT", "/settings", settings.model_dump(mode="json"))

    async def test_remote_connection(self) -> None:
        await self._request("POST", "/llm/test")

    async def select_directory(self, prompt_title: str) -> str:
        if self._directory_picker is None:
            raise BridgeError("directory_picker_unavailable")
        try:
            result = self._directory_picker(prompt_title)
            if inspect.isawaitable(result):
                result = await result
        except Exception as exc:  # noqa: BLE001
            raise BridgeError(f"select_directory_failed: {exc}") from exc
        return str(result or "")

    async def open_directory(self, path: str) -> None:
        target = Path(path).expanduser()
        if not target.is_dir():
            raise BridgeError(f"directory_not_found: {path}")
        try:
            _open_in_file_browser(target)
        except OSError as exc:
            raise BridgeError(f"open_directory_failed: {exc}") from exc


def _response_detail(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        data = None
    if isinstance(data, dict) and data.get("detail"):
        detail = str(data["detail"])
    else:
        detail = (response.text or "").strip().replace("\n", " ")
    if len(detail) > 220:
        detail = f"{detail[:220]}..."
    return detail


def _decode(response: httpx.Response) -> Any:
    if response.status_code == 204 or not response.content:
        return None
    try:
        return response.json()
    except ValueError as exc:
        raise BridgeError(f"invalid_json_response: {exc}") from exc


def _parse(model, data: Any):
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise BridgeError(f"invalid_{model.__name__}: {exc.error_count()} error(s)") from exc


def _open_in_file_browser(path: Path) -> None:
    if sys.platform.startswith("win"):
        os.startfile(str(path))  # type: ignore[attr-defined]
        return
    opener = "open" if sys.platform == "darwin" else "xdg-open"
    subprocess.Popen([opener, str(path)], stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL)
