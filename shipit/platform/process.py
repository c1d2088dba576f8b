"""Subprocess execution with Result-based error handling.

This is the only module that calls ``subprocess`` directly. Git and gh go
through ``run`` (argv, captured output). Caller-supplied command lines go
through ``run_shell``, which lets their output stream to the terminal, or
``capture_shell`` when shipit needs to read what they print.

Usage:
    match run(["git", "status", "--porcelain"], cwd=root, timeout=30.0):
        case Ok(stdout):
            print(stdout)
        case Err(error):
            print(f"git status: {error}")
"""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from pathlib import Path

from shipit.core.result import Err, Ok, Result

__all__ = ["ProcessError", "capture_shell", "run", "run_shell"]


@dataclass(frozen=True, slots=True)
class ProcessError:
    """A command that could not be started, timed out or exited non-zero.

    Attributes:
        command: argv, or a single-element tuple holding a shell command line
        returncode: Exit status; -1 when the process never completed
        stdout: Captured output ("" when output was not captured)
        stderr: Captured error output, or the reason the command never ran
    """

    command: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str

    def __str__(self) -> str:
        shown = " ".join(self.command[:3])
        if len(self.command) > 3:
            shown += " ..."
        return f"{shown} failed (exit {self.returncode})"


def _execute(
    args: list[str] | str,
    cwd: Path,
    *,
    env: dict[str, str] | None,
    capture: bool,
    timeout: float | None,
) -> Result[str, ProcessError]:
    shell = isinstance(args, str)
    command = (args,) if isinstance(args, str) else tuple(args)

    def failed(returncode: int, stdout: str = "", stderr: str = "") -> Err[ProcessError]:
        return Err(ProcessError(command, returncode, stdout, stderr))

    try:
        proc = subprocess.run(
            args,
            cwd=str(cwd),
            env=env,
            shell=shell,
            capture_output=capture,
            text=True,
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired as e:
        partial = e.stdout if isinstance(e.stdout, str) else ""
        return failed(-1, partial, f"Command timed out after {timeout}s")
    except OSError as e:
        return failed(-1, stderr=str(e))

    stdout = proc.stdout or ""
    if proc.returncode != 0:
        return failed(proc.returncode, stdout, proc.stderr or "")
    return Ok(stdout)


def run(
    cmd: list[str],
    cwd: Path,
    env: dict[str, str] | None = None,
    *,
    timeout: float | None = None,
) -> Result[str, ProcessError]:
    """Run ``cmd`` (no shell) and return its stdout.

    Args:
        cmd: Program and arguments
        cwd: Working directory
        env: Full environment, or None to inherit ours
        timeout: Seconds before the process is killed (None waits forever)
    """
    return _execute(cmd, cwd, env=env, capture=True, timeout=timeout)


def run_shell(
    command: str,
    cwd: Path,
    env: dict[str, str] | None = None,
) -> Result[None, ProcessError]:
    """Run a shell command line with its output going to the terminal.

    There is no timeout: test suites and code generators run until they
    finish or the user interrupts.
    """
    result = _execute(command, cwd, env=env, capture=False, timeout=None)
    if isinstance(result, Err):
        return result
    return Ok(None)


def capture_shell(
    command: str,
    cwd: Path,
    *,
    timeout: float | None = None,
) -> Result[str, ProcessError]:
    """Run a shell command line and return what it printed."""
    return _execute(command, cwd, env=None, capture=True, timeout=timeout)
