from __future__ import annotations

import pytest

from logforge_shell.models import BackendSettings, JobProgress, JobStatus, JobTarget, RemoteModelConfig
from logforge_shell.state import PageId


@pytest.mark.parametrize(
    ("token", "expected"),
    [("batch", PageId.batch), ("#projects", PageId.projects), ("", PageId.sample), ("bogus", PageId.sample)],
)
def test_page_resolution(token: str, expected: PageId) -> None:
    assert PageId.resolve(token) is expected


def test_progress_percent_is_clamped_and_rounded() -> None:
    assert JobProgress(progress=0.424).percent == 42
    assert JobProgress(progress=0.425).percent in (42, 43)
    assert JobProgress(progress=1.7).percent == 100
    assert JobProgress(progress=-0.2).percent == 0
    assert JobProgress(progress=None).percent == 0


def test_progress_counts_and_terminal_states() -> None:
    progress = JobProgress.model_validate({"status": "completed", "total_files": 10, "processed": 10, "failed": 1})
    assert progress.succeeded_items == 9
    assert progress.is_terminal is True
    assert JobProgress(status=JobStatus.fixing).is_terminal is False
    assert JobProgress(message="", current_file="").message is None


def test_unknown_job_status_is_rejected() -> None:
    with pytest.raises(ValueError):
        JobProgress.model_validate({"status": "exploded"})


def test_target_label_falls_back_to_short_id() -> None:
    assert JobTarget(id="abcdef1234", name="").label == "abcdef12..."
    assert JobTarget(id="t1", name="router").label == "router"


def test_remote_model_config_completeness() -> None:
    assert RemoteModelConfig(base_url="u", api_key="k", model_name="m").complete is True
    assert RemoteModelConfig(base_url="u", api_key=" ", model_name="m").complete is False


@pytest.mark.parametrize(("value", "expected"), [(0, 5), (None, 5), ("12", 12), (5000, 1000), ("x", 5)])
def test_sample_lines_defaults(value, expected) -> None:
    assert BackendSettings(sample_lines=value).sample_lines == expected
