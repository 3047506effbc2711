from __future__ import annotations

from pydantic import ValidationError
import pytest

from logforge_shell.config import ShellSettings, get_app_dir, normalize_language


def test_defaults() -> None:
    settings = ShellSettings(_env_file=None)
    assert settings.env_poll_max_attempts == 60
    assert settings.env_poll_interval_sec == 1.0
    assert settings.job_poll_interval_sec == 1.0
    assert settings.env_ready_dismiss_sec == 3.0
    assert settings.env_failure_dismiss_sec == 8.0
    assert settings.base_api_url == "http://127.0.0.1:8765/api/v1"


def test_environment_overrides(monkeypatch) -> None:
    monkeypatch.setenv("LOGFORGE_BACKEND_URL", "http://localhost:9000/")
    monkeypatch.setenv("LOGFORGE_API_PREFIX", "api/")
    monkeypatch.setenv("LOGFORGE_ENV_POLL_MAX_ATTEMPTS", "5")
    settings = ShellSettings(_env_file=None)
    assert settings.base_api_url == "http://localhost:9000/api"
    assert settings.env_poll_max_attempts == 5


def test_empty_prefix_is_allowed() -> None:
    assert ShellSettings(_env_file=None, api_prefix="/").base_api_url == "http://127.0.0.1:8765"


@pytest.mark.parametrize("field", ["env_poll_max_attempts", "request_retries"])
def test_counts_must_be_positive(field: str) -> None:
    with pytest.raises(ValidationError):
        ShellSettings(_env_file=None, **{field: 0})


def test_intervals_must_not_be_negative() -> None:
    with pytest.raises(ValidationError):
        ShellSettings(_env_file=None, job_poll_interval_sec=-1)


@pytest.mark.parametrize(
    ("value", "expected"),
    [("", ""), (None, ""), ("zh", "zh-CN"), ("zh_CN", "zh-CN"), ("en-US", "en"), ("fr", "en")],
)
def test_normalize_language(value, expected) -> None:
    assert normalize_language(value) == expected
    if value is not None:
        assert ShellSettings(_env_file=None, language=value).language == expected


def test_app_dir_follows_appdata(monkeypatch, tmp_path) -> None:
    monkeypatch.setenv("APPDATA", str(tmp_path))
    assert get_app_dir() == tmp_path / "LogForge"
