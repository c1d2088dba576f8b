from __future__ import annotations

from pathlib import Path

import pytest

from shipit.core.config import ReleaseConfig
from shipit.core.result import Err, Ok
from shipit.core.version import Version
from shipit.git.repository import StatusEntry
from shipit.platform.process import ProcessError
from shipit.services.gh import GhError, Milestone
from shipit.services.validation import StepStatus, ValidationContext
from shipit.services.validation import steps
from shipit.test._fakes import FakeRepo


def _ctx(tmp_path: Path, repo: FakeRepo | None = None, **config: object) -> ValidationContext:
    return ValidationContext(
        config=ReleaseConfig(**config),  # type: ignore[arg-type]
        root=tmp_path,
        repo=repo or FakeRepo(path=tmp_path),  # type: ignore[arg-type]
        current=Version(1, 2, 3),
        target=Version(1, 3, 0),
    )


class TestCommands:
    def test_tests_pass(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        seen: list[tuple[str, Path]] = []

        def fake_shell(command: str, cwd: Path, env: dict[str, str] | None = None):
            del env
            seen.append((command, cwd))
            return Ok(None)

        monkeypatch.setattr(steps, "run_shell", fake_shell)

        result = steps.check_tests(_ctx(tmp_path, test_cmd="make test"))

        assert result.status == StepStatus.PASSED
        assert seen == [("make test", tmp_path)]

    def test_regenerate_fails_with_exit_code(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        def fake_shell(command: str, cwd: Path, env: dict[str, str] | None = None):
            del cwd, env
            return Err(ProcessError(command=(command,), returncode=2, stdout="", stderr=""))

        monkeypatch.setattr(steps, "run_shell", fake_shell)

        result = steps.check_regenerate(_ctx(tmp_path, project_regenerate_cmd="./gen.sh"))

        assert result.failed
        assert result.message == "`./gen.sh` failed (exit 2)"


class TestGitClean:
    def test_clean(self, tmp_path: Path) -> None:
        assert steps.check_git_clean(_ctx(tmp_path)).passed

    def test_untracked_only(self, tmp_path: Path) -> None:
        repo = FakeRepo(entries=(StatusEntry("??", "notes.txt"),))
        result = steps.check_git_clean(_ctx(tmp_path, repo))
        assert result.passed
        assert "1 untracked" in result.message

    def test_dirty_lists_paths(self, tmp_path: Path) -> None:
        repo = FakeRepo(entries=(StatusEntry(" M", "README.md"), StatusEntry("A ", "new.py")))
        result = steps.check_git_clean(_ctx(tmp_path, repo))
        assert result.failed
        assert "README.md" in result.message
        assert "new.py" in result.message
        assert result.hint == "Commit or stash your changes"


class TestGitBranch:
    def test_main(self, tmp_path: Path) -> None:
        assert steps.check_git_branch(_ctx(tmp_path)).passed

    def test_master_is_accepted(self, tmp_path: Path) -> None:
        assert steps.check_git_branch(_ctx(tmp_path, FakeRepo(branch="master"))).passed

    def test_feature_branch(self, tmp_path: Path) -> None:
        result = steps.check_git_branch(_ctx(tmp_path, FakeRepo(branch="feature/x")))
        assert result.failed
        assert "feature/x" in result.message

    def test_detached_head(self, tmp_path: Path) -> None:
        result = steps.check_git_branch(_ctx(tmp_path, FakeRepo(branch=None)))
        assert result.failed
        assert result.message == "detached HEAD"

    def test_custom_branches(self, tmp_path: Path) -> None:
        ctx = _ctx(tmp_path, FakeRepo(branch="trunk"), accepted_branches=("trunk",))
        assert steps.check_git_branch(ctx).passed


class TestDocs:
    def test_all_mention_current(self, tmp_path: Path) -> None:
        (tmp_path / "README.md").write_text("Rocket 1.2.3\n", encoding="utf-8")
        (tmp_path / "docs").mkdir()
        (tmp_path / "docs" / "install.md").write_text("pip install rocket==1.2.3", "utf-8")

        result = steps.check_docs(_ctx(tmp_path, doc_files=("README.md", "docs/install.md")))

        assert result.passed

    def test_lists_every_stale_file(self, tmp_path: Path) -> None:
        (tmp_path / "README.md").write_text("Rocket 1.2.2\n", encoding="utf-8")
        (tmp_path / "INSTALL.md").write_text("Rocket 1.2.3\n", encoding="utf-8")
        (tmp_path / "CHANGES.md").write_text("Rocket 1.1.0\n", encoding="utf-8")

        result = steps.check_docs(
            _ctx(tmp_path, doc_files=("README.md", "INSTALL.md", "CHANGES.md"))
        )

        assert result.failed
        assert "README.md" in result.message
        assert "CHANGES.md" in result.message
        assert "INSTALL.md" not in result.message

    def test_missing_file(self, tmp_path: Path) -> None:
        result = steps.check_docs(_ctx(tmp_path, doc_files=("GONE.md",)))
        assert result.failed
        assert "GONE.md" in result.message


class TestReleaseNotes:
    def test_file(self, tmp_path: Path) -> None:
        (tmp_path / "CHANGELOG.md").write_text("## 1.3.0\n", encoding="utf-8")
        result = steps.check_release_notes(_ctx(tmp_path, release_notes_file="CHANGELOG.md"))
        assert result.passed

    def test_missing_file(self, tmp_path: Path) -> None:
        result = steps.check_release_notes(_ctx(tmp_path, release_notes_file="CHANGELOG.md"))
        assert result.failed

    @pytest.mark.parametrize("name", ["1.3.0.md", "v1.3.0.md", "v1.3.0.txt"])
    def test_dir_entry_for_target(self, tmp_path: Path, name: str) -> None:
        notes = tmp_path / "notes"
        notes.mkdir()
        (notes / name).write_text("notes", encoding="utf-8")
        result = steps.check_release_notes(_ctx(tmp_path, release_notes_dir="notes"))
        assert result.passed

    def test_dir_without_target_entry(self, tmp_path: Path) -> None:
        notes = tmp_path / "notes"
        notes.mkdir()
        (notes / "1.2.3.md").write_text("old", encoding="utf-8")
        result = steps.check_release_notes(_ctx(tmp_path, release_notes_dir="notes"))
        assert result.failed
        assert result.hint == "Add notes/v1.3.0.md"

    def test_missing_dir(self, tmp_path: Path) -> None:
        result = steps.check_release_notes(_ctx(tmp_path, release_notes_dir="notes"))
        assert result.failed


class TestGithub:
    def _patch(
        self,
        monkeypatch: pytest.MonkeyPatch,
        *,
        available: bool = True,
        authed: bool = True,
        milestone: Milestone | None = None,
    ) -> list[tuple[str, ...]]:
        queried: list[tuple[str, ...]] = []

        def fake_available():
            return Ok(None) if available else Err(GhError("gh: missing", "install gh"))

        def fake_auth(*, root: Path):
            del root
            return Ok(None) if authed else Err(GhError("gh auth required", "Run: gh auth login"))

        def fake_find(*, root: Path, repo: str, titles: tuple[str, ...]):
            del root
            assert repo == "acme/rocket"
            queried.append(titles)
            return Ok(milestone)

        monkeypatch.setattr(steps, "ensure_gh_available", fake_available)
        monkeypatch.setattr(steps, "ensure_gh_auth", fake_auth)
        monkeypatch.setattr(steps, "find_milestone", fake_find)
        return queried

    def _gh_ctx(self, tmp_path: Path) -> ValidationContext:
        return _ctx(
            tmp_path, enable_github_checks=True, github_owner="acme", github_repo="rocket"
        )

    def test_no_milestone_passes(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        queried = self._patch(monkeypatch)
        assert steps.check_github(self._gh_ctx(tmp_path)).passed
        assert queried == [("1.3.0", "v1.3.0")]

    def test_open_issues_fail(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        self._patch(monkeypatch, milestone=Milestone(7, "v1.3.0", "open", 3))
        result = steps.check_github(self._gh_ctx(tmp_path))
        assert result.failed
        assert "3 open issue" in result.message
        assert result.hint == "https://github.com/acme/rocket/milestone/7"

    def test_gh_missing(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        self._patch(monkeypatch, available=False)
        result = steps.check_github(self._gh_ctx(tmp_path))
        assert result.failed
        assert result.message == "gh: missing"

    def test_not_authenticated(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        self._patch(monkeypatch, authed=False)
        result = steps.check_github(self._gh_ctx(tmp_path))
        assert result.failed
        assert result.hint == "Run: gh auth login"


def test_step_order() -> None:
    assert [s.name for s in steps.DEFAULT_STEPS] == [
        "regenerate",
        "tests",
        "git-clean",
        "git-branch",
        "docs",
        "release-notes",
        "github",
    ]
