"""The release validation steps, in their fixed execution order."""

from __future__ import annotations

from pathlib import Path

from shipit.core.config import ReleaseConfig
from shipit.core.result import Err
from shipit.platform.process import run_shell
from shipit.services.gh import ensure_gh_auth, ensure_gh_available, find_milestone
from shipit.services.validation.base import StepResult, ValidationContext, ValidationStep

_MAX_LISTED_PATHS = 5


def _run_command(name: str, command: str | None, ctx: ValidationContext) -> StepResult:
    assert command is not None
    result = run_shell(command, ctx.root)
    if isinstance(result, Err):
        rc = result.error.returncode
        detail = result.error.stderr.strip()
        message = f"`{command}` failed (exit {rc})"
        return StepResult.fail(name, f"{message}: {detail}" if detail else message)
    return StepResult.ok(name, f"`{command}` succeeded")


def check_regenerate(ctx: ValidationContext) -> StepResult:
    return _run_command("regenerate", ctx.config.project_regenerate_cmd, ctx)


def check_tests(ctx: ValidationContext) -> StepResult:
    return _run_command("tests", ctx.config.test_cmd, ctx)


def _listed(paths: list[str]) -> str:
    shown = ", ".join(paths[:_MAX_LISTED_PATHS])
    extra = len(paths) - _MAX_LISTED_PATHS
    return f"{shown} (+{extra} more)" if extra > 0 else shown


def check_git_clean(ctx: ValidationContext) -> StepResult:
    status = ctx.repo.status()
    if isinstance(status, Err):
        return StepResult.fail("git-clean", f"git status failed: {status.error.message}")

    st = status.value
    if not st.is_clean:
        changed = [e.path for e in st.entries if e.is_staged or e.is_unstaged]
        return StepResult.fail(
            "git-clean",
            f"working tree has {st.staged_count} staged and {st.unstaged_count} unstaged "
            f"change(s): {_listed(changed)}",
            hint="Commit or stash your changes",
        )

    if st.untracked_count:
        ignored = f"{st.untracked_count} untracked file(s) ignored"
        return StepResult.ok("git-clean", f"clean ({ignored})")
    return StepResult.ok("git-clean", "clean")


def check_git_branch(ctx: ValidationContext) -> StepResult:
    accepted = ctx.config.accepted_branches
    branch = ctx.repo.current_branch()
    if isinstance(branch, Err):
        return StepResult.fail("git-branch", branch.error.message)
    if branch.value is None:
        return StepResult.fail(
            "git-branch",
            "detached HEAD",
            hint=f"Check out one of: {', '.join(accepted)}",
        )
    if branch.value not in accepted:
        return StepResult.fail(
            "git-branch",
            f"on branch '{branch.value}'",
            hint=f"Releases are cut from: {', '.join(accepted)}",
        )
    return StepResult.ok("git-branch", branch.value)


def check_docs(ctx: ValidationContext) -> StepResult:
    version = str(ctx.current)
    missing: list[str] = []
    stale: list[str] = []

    for rel in ctx.config.doc_files:
        path = ctx.root / rel
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError):
            missing.append(rel)
            continue
        if version not in text:
            stale.append(rel)

    if missing:
        return StepResult.fail("docs", f"documentation file(s) not readable: {_listed(missing)}")
    if stale:
        return StepResult.fail(
            "docs",
            f"{_listed(stale)} do(es) not mention version {version}",
            hint=f"Update the version string to {version}",
        )
    return StepResult.ok("docs", f"{len(ctx.config.doc_files)} file(s) mention {version}")


def _notes_candidates(ctx: ValidationContext) -> set[str]:
    return {str(ctx.target), ctx.target_tag}


def check_release_notes(ctx: ValidationContext) -> StepResult:
    config = ctx.config
    found: list[str] = []

    if config.release_notes_file is not None:
        path = ctx.root / config.release_notes_file
        if not path.is_file():
            return StepResult.fail(
                "release-notes",
                f"release notes file not found: {config.release_notes_file}",
            )
        found.append(config.release_notes_file)

    if config.release_notes_dir is not None:
        directory = ctx.root / config.release_notes_dir
        if not directory.is_dir():
            return StepResult.fail(
                "release-notes",
                f"release notes directory not found: {config.release_notes_dir}",
            )
        wanted = _notes_candidates(ctx)
        matches = sorted(p for p in directory.iterdir() if p.is_file() and p.stem in wanted)
        if not matches:
            return StepResult.fail(
                "release-notes",
                f"no release notes for {ctx.target} in {config.release_notes_dir}",
                hint=f"Add {config.release_notes_dir}/{ctx.target_tag}.md",
            )
        found.append(str(Path(config.release_notes_dir) / matches[0].name))

    return StepResult.ok("release-notes", ", ".join(found))


def check_github(ctx: ValidationContext) -> StepResult:
    slug = ctx.config.github_slug
    assert slug is not None

    available = ensure_gh_available()
    if isinstance(available, Err):
        return StepResult.fail("github", available.error.message, hint=available.error.hint)
    auth = ensure_gh_auth(root=ctx.root)
    if isinstance(auth, Err):
        return StepResult.fail("github", auth.error.message, hint=auth.error.hint)

    titles = tuple(sorted(_notes_candidates(ctx)))
    milestone = find_milestone(root=ctx.root, repo=slug, titles=titles)
    if isinstance(milestone, Err):
        return StepResult.fail("github", milestone.error.message, hint=milestone.error.hint)

    m = milestone.value
    if m is None:
        return StepResult.ok("github", f"{slug}: no milestone for {ctx.target}")
    if m.open_issues > 0:
        return StepResult.fail(
            "github",
            f"milestone '{m.title}' still has {m.open_issues} open issue(s)",
            hint=f"https://github.com/{slug}/milestone/{m.number}",
        )
    return StepResult.ok("github", f"milestone '{m.title}' has no open issues")


def _has(value: str | None) -> bool:
    return bool(value and value.strip())


def _notes_configured(config: ReleaseConfig) -> bool:
    return config.release_notes_file is not None or config.release_notes_dir is not None


DEFAULT_STEPS: tuple[ValidationStep, ...] = (
    ValidationStep(
        name="regenerate",
        enabled=lambda c: _has(c.project_regenerate_cmd),
        check=check_regenerate,
        disabled_reason="no project_regenerate_cmd",
    ),
    ValidationStep(
        name="tests",
        enabled=lambda c: _has(c.test_cmd),
        check=check_tests,
        disabled_reason="no test_cmd",
    ),
    ValidationStep(
        name="git-clean",
        enabled=lambda c: c.require_clean_git,
        check=check_git_clean,
        disabled_reason="require_clean_git is off",
    ),
    ValidationStep(
        name="git-branch",
        enabled=lambda c: c.require_main_branch,
        check=check_git_branch,
        disabled_reason="require_main_branch is off",
    ),
    ValidationStep(
        name="docs",
        enabled=lambda c: bool(c.doc_files),
        check=check_docs,
        disabled_reason="no doc_files",
    ),
    ValidationStep(
        name="release-notes",
        enabled=_notes_configured,
        check=check_release_notes,
        disabled_reason="no release_notes_file or release_notes_dir",
    ),
    ValidationStep(
        name="github",
        enabled=lambda c: c.enable_github_checks,
        check=check_github,
        disabled_reason="enable_github_checks is off",
    ),
)
