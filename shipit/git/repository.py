"""Git repository operations used by the release pipeline.

Read-only queries (status, current branch, tag lookup) back the validation
steps; ``create_tag`` and ``push_tag`` are the only write operations shipit
ever performs.

Usage:
    repo = Repository(Path("."))

    match repo.status():
        case Ok(status):
            if not status.is_clean:
                print(f"{status.staged_count} staged, {status.unstaged_count} unstaged")
        case Err(e):
            print(f"git status failed: {e.message}")
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from shipit.core.result import Err, Ok, Result
from shipit.platform.process import ProcessError
from shipit.platform.process import run as run_process

GIT_TIMEOUT_SECONDS = 30.0
GIT_NETWORK_TIMEOUT_SECONDS = 3 * 60.0

__all__ = [
    "GitError",
    "GitStatus",
    "Repository",
    "StatusEntry",
]


@dataclass(frozen=True, slots=True)
class GitError:
    """A failed git invocation: the subcommand, git's own message and exit status."""

    command: str
    message: str
    returncode: int = 1


@dataclass(frozen=True, slots=True)
class StatusEntry:
    """One ``git status --porcelain`` line: the XY code and the path it applies to."""

    xy: str
    path: str

    @property
    def is_staged(self) -> bool:
        return self.xy != "??" and self.xy[0] != " "

    @property
    def is_unstaged(self) -> bool:
        return self.xy != "??" and self.xy[1] != " "

    @property
    def is_untracked(self) -> bool:
        return self.xy == "??"


@dataclass(frozen=True, slots=True)
class GitStatus:
    """Working tree state of a repository.

    ``is_clean`` ignores untracked files: only staged or unstaged changes to
    tracked files make a tree dirty.
    """

    branch: str
    entries: tuple[StatusEntry, ...] = field(default_factory=tuple)

    @property
    def staged(self) -> list[StatusEntry]:
        return [e for e in self.entries if e.is_staged]

    @property
    def unstaged(self) -> list[StatusEntry]:
        return [e for e in self.entries if e.is_unstaged]

    @property
    def untracked(self) -> list[StatusEntry]:
        return [e for e in self.entries if e.is_untracked]

    @property
    def staged_count(self) -> int:
        return len(self.staged)

    @property
    def unstaged_count(self) -> int:
        return len(self.unstaged)

    @property
    def untracked_count(self) -> int:
        return len(self.untracked)

    @property
    def is_clean(self) -> bool:
        return self.staged_count == 0 and self.unstaged_count == 0


class Repository:
    """The git working tree shipit releases from.

    Queries never raise: failures come back as ``Err(GitError)``, except
    ``tag_exists`` which treats any failure as "no such tag".
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def status(self) -> Result[GitStatus, GitError]:
        """Run ``git status --porcelain=v1 -b`` and parse it."""
        result = self._run(["status", "--porcelain=v1", "-b"])
        match result:
            case Err(e):
                return Err(self._error("status", e, "git status failed"))
            case Ok(stdout):
                return Ok(self._parse_status(stdout))

    def current_branch(self) -> Result[str | None, GitError]:
        """Get the current branch name; None on a detached HEAD."""
        result = self._run(["rev-parse", "--abbrev-ref", "HEAD"])
        match result:
            case Err(e):
                return Err(self._error("rev-parse", e, "cannot determine current branch"))
            case Ok(stdout):
                branch = stdout.strip()
                return Ok(None if branch in {"HEAD", ""} else branch)

    def tag_exists(self, tag: str) -> bool:
        """True if ``tag`` exists in the local repository."""
        result = self._run(["rev-parse", "-q", "--verify", f"refs/tags/{tag}"])
        return isinstance(result, Ok)

    def remote_tag_exists(self, remote: str, tag: str) -> Result[bool, GitError]:
        """Ask ``remote`` whether it has ``tag``."""
        result = self._run(["ls-remote", "--tags", remote, f"refs/tags/{tag}"])
        match result:
            case Err(e):
                return Err(self._error("ls-remote", e, f"cannot query tags on {remote}"))
            case Ok(stdout):
                return Ok(bool(stdout.strip()))

    def create_tag(self, tag: str, message: str) -> Result[None, GitError]:
        """Create an annotated tag on HEAD."""
        result = self._run(["tag", "-a", tag, "-m", message])
        if isinstance(result, Err):
            return Err(self._error("tag", result.error, f"failed to create tag {tag}"))
        return Ok(None)

    def push_tag(self, remote: str, tag: str) -> Result[None, GitError]:
        """Push a single tag to ``remote``."""
        result = self._run(["push", remote, f"refs/tags/{tag}"])
        if isinstance(result, Err):
            return Err(self._error("push", result.error, f"failed to push {tag} to {remote}"))
        return Ok(None)

    def _run(self, args: list[str]) -> Result[str, ProcessError]:
        command = args[0] if args else ""
        timeout = (
            GIT_NETWORK_TIMEOUT_SECONDS
            if command in {"fetch", "pull", "push", "ls-remote"}
            else GIT_TIMEOUT_SECONDS
        )
        return run_process(["git", "-C", str(self.path), *args], cwd=self.path, timeout=timeout)

    @staticmethod
    def _error(command: str, e: ProcessError, fallback: str) -> GitError:
        return GitError(
            command=command,
            message=e.stderr.strip() or e.stdout.strip() or fallback,
            returncode=e.returncode,
        )

    def _parse_status(self, output: str) -> GitStatus:
        lines = [ln for ln in output.splitlines() if ln.strip()]
        if not lines:
            return GitStatus(branch="")

        branch = ""
        entries: list[StatusEntry] = []
        for line in lines:
            if line.startswith("##"):
                branch = self._parse_branch_line(line)
                continue
            if len(line) < 4:
                continue
            entries.append(StatusEntry(xy=line[:2], path=line[3:]))

        return GitStatus(branch=branch, entries=tuple(entries))

    def _parse_branch_line(self, line: str) -> str:
        """Parse ``## branch...upstream [ahead N]`` down to the branch name."""
        s = line[2:].strip()
        s = s.split(" [", 1)[0].strip()
        return s.split("...", 1)[0].strip()
