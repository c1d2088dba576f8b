from __future__ import annotations

import json
from pathlib import Path

import pytest

from shipit.core.result import Err, Ok, Result
from shipit.platform.process import ProcessError
from shipit.services import gh as gh_mod


def _err(*, stderr: str, returncode: int = 1) -> Err[ProcessError]:
    return Err(
        ProcessError(
            command=("gh", "api", "repos/acme/rocket/milestones"),
            returncode=returncode,
            stdout="",
            stderr=stderr,
        )
    )


def _milestones(*items: dict[str, object]) -> Ok[str]:
    return Ok(json.dumps(list(items)))


def test_gh_api_json_does_not_retry(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    calls: list[list[str]] = []

    def fake_run(cmd: list[str], *, cwd: Path, timeout: float | None = None):
        del cwd
        del timeout
        calls.append(cmd)
        return _err(stderr="HTTP 503 Service Unavailable")

    monkeypatch.setattr(gh_mod, "run_process", fake_run)

    result = gh_mod.gh_api_json(root=tmp_path, endpoint="repos/acme/rocket")
    assert isinstance(result, Err)
    assert result.error.hint == "HTTP 503 Service Unavailable"
    assert len(calls) == 1


def test_gh_api_json_invalid_payload(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    def fake_run(cmd: list[str], *, cwd: Path, timeout: float | None = None):
        del cmd, cwd, timeout
        return Ok("<html>")

    monkeypatch.setattr(gh_mod, "run_process", fake_run)

    result = gh_mod.gh_api_json(root=tmp_path, endpoint="repos/acme/rocket")
    assert isinstance(result, Err)
    assert "invalid JSON" in result.error.message


def test_find_milestone_accepts_prefixed_title(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    def fake_run(cmd: list[str], *, cwd: Path, timeout: float | None = None):
        del cwd, timeout
        assert cmd == [
            "gh",
            "api",
            "--paginate",
            "repos/acme/rocket/milestones?state=all&per_page=100",
        ]
        return _milestones(
            {"number": 3, "title": "v1.2.0", "state": "closed", "open_issues": 0},
            {"number": 4, "title": "v1.3.0", "state": "open", "open_issues": 2},
            {"title": "broken"},
        )

    monkeypatch.setattr(gh_mod, "run_process", fake_run)

    result = gh_mod.find_milestone(root=tmp_path, repo="acme/rocket", titles=("1.3.0", "v1.3.0"))
    assert result == Ok(gh_mod.Milestone(number=4, title="v1.3.0", state="open", open_issues=2))


def test_find_milestone_none(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    def fake_run(cmd: list[str], *, cwd: Path, timeout: float | None = None):
        del cmd, cwd, timeout
        return _milestones({"number": 1, "title": "1.0.0", "state": "closed", "open_issues": 0})

    monkeypatch.setattr(gh_mod, "run_process", fake_run)

    result = gh_mod.find_milestone(root=tmp_path, repo="acme/rocket", titles=("2.0.0",))
    assert result == Ok(None)


def test_list_milestones_rejects_non_list(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    def fake_run(cmd: list[str], *, cwd: Path, timeout: float | None = None):
        del cmd, cwd, timeout
        return Ok('{"message": "Not Found"}')

    monkeypatch.setattr(gh_mod, "run_process", fake_run)

    result = gh_mod.list_milestones(root=tmp_path, repo="acme/rocket")
    assert isinstance(result, Err)


def test_ensure_gh_auth(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    def fake_run(cmd: list[str], *, cwd: Path, timeout: float | None = None):
        del cmd, cwd, timeout
        return _err(stderr="You are not logged into any GitHub hosts.")

    monkeypatch.setattr(gh_mod, "run_process", fake_run)

    result = gh_mod.ensure_gh_auth(root=tmp_path)
    assert isinstance(result, Err)
    assert result.error.hint == "Run: gh auth login"


def test_ensure_gh_available_missing(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(gh_mod.shutil, "which", lambda name: None)
    result: Result[None, gh_mod.GhError] = gh_mod.ensure_gh_available()
    assert isinstance(result, Err)
    assert result.error.message == "gh: missing"


def test_find_milestone_on_a_later_page(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    first = [
        {"number": n, "title": f"0.{n}.0", "state": "closed", "open_issues": 0}
        for n in range(100)
    ]
    second = [{"number": 200, "title": "2.0.0", "state": "open", "open_issues": 1}]

    def fake_run(cmd: list[str], *, cwd: Path, timeout: float | None = None):
        del cmd, cwd, timeout
        return Ok(json.dumps(first) + json.dumps(second) + "\n")

    monkeypatch.setattr(gh_mod, "run_process", fake_run)

    listed = gh_mod.list_milestones(root=tmp_path, repo="acme/rocket")
    assert isinstance(listed, Ok)
    assert len(listed.value) == 101

    result = gh_mod.find_milestone(root=tmp_path, repo="acme/rocket", titles=("2.0.0",))
    assert result == Ok(gh_mod.Milestone(number=200, title="2.0.0", state="open", open_issues=1))
