"""Process execution helpers."""

from shipit.platform.process import ProcessError, capture_shell, run, run_shell

__all__ = ["ProcessError", "capture_shell", "run", "run_shell"]
