"""Typed release configuration.

Configuration is read once, before the pipeline starts, from three layers
(lowest precedence first):

1. built-in defaults,
2. the ``[release]`` table of ``shipit.toml``,
3. environment variables using the upper-case option names
   (``TEST_CMD``, ``DOC_FILES``, ``AUTO_TAG``, ...).

The result is a frozen ``ReleaseConfig`` that is passed explicitly to every
component.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Literal, get_args

from .errors import ConfigurationError
from .result import Err, Ok, Result
from .structured import (
    StrDict,
    as_str_dict,
    get_bool,
    get_str,
    get_str_list,
    get_table,
    parse_bool,
    split_list,
)

__all__ = [
    "CONFIG_FILE_NAME",
    "ExtractionMethod",
    "EXTRACTION_METHODS",
    "ReleaseConfig",
    "load_config",
]

CONFIG_FILE_NAME = "shipit.toml"

ExtractionMethod = Literal[
    "version_file",
    "package_json",
    "package_swift",
    "setup_py",
    "readme",
    "custom",
]
EXTRACTION_METHODS: tuple[str, ...] = get_args(ExtractionMethod)

DEFAULT_ACCEPTED_BRANCHES = ("main", "master")
DEFAULT_REMOTE = "origin"

# env var name -> (config key, kind)
_ENV_OPTIONS: dict[str, tuple[str, Literal["str", "bool", "list"]]] = {
    "PROJECT_NAME": ("project_name", "str"),
    "GITHUB_OWNER": ("github_owner", "str"),
    "GITHUB_REPO": ("github_repo", "str"),
    "VERSION_EXTRACTION_METHOD": ("version_extraction_method", "str"),
    "VERSION_FILE": ("version_file", "str"),
    "VERSION_PATTERN": ("version_pattern", "str"),
    "VERSION_COMMAND": ("version_command", "str"),
    "PROJECT_REGENERATE_CMD": ("project_regenerate_cmd", "str"),
    "TEST_CMD": ("test_cmd", "str"),
    "DOC_FILES": ("doc_files", "list"),
    "RELEASE_NOTES_FILE": ("release_notes_file", "str"),
    "RELEASE_NOTES_DIR": ("release_notes_dir", "str"),
    "ENABLE_GITHUB_CHECKS": ("enable_github_checks", "bool"),
    "AUTO_TAG": ("auto_tag", "bool"),
    "REQUIRE_CLEAN_GIT": ("require_clean_git", "bool"),
    "REQUIRE_MAIN_BRANCH": ("require_main_branch", "bool"),
    "TAG_PREFIX": ("tag_prefix", "str"),
    "GIT_REMOTE": ("remote", "str"),
    "ACCEPTED_BRANCHES": ("accepted_branches", "list"),
}

_BOOL_KEYS = tuple(key for key, kind in _ENV_OPTIONS.values() if kind == "bool")


@dataclass(frozen=True, slots=True)
class ReleaseConfig:
    """Release pipeline options. Immutable once loaded."""

    project_name: str | None = None
    github_owner: str | None = None
    github_repo: str | None = None

    version_extraction_method: ExtractionMethod = "version_file"
    version_file: str | None = None
    version_pattern: str | None = None
    version_command: str | None = None

    project_regenerate_cmd: str | None = None
    test_cmd: str | None = None
    doc_files: tuple[str, ...] = ()
    release_notes_file: str | None = None
    release_notes_dir: str | None = None

    enable_github_checks: bool = False
    auto_tag: bool = False
    require_clean_git: bool = True
    require_main_branch: bool = True

    tag_prefix: str = "v"
    remote: str = DEFAULT_REMOTE
    accepted_branches: tuple[str, ...] = DEFAULT_ACCEPTED_BRANCHES

    @property
    def github_slug(self) -> str | None:
        if self.github_owner and self.github_repo:
            return f"{self.github_owner}/{self.github_repo}"
        return None

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Result[ReleaseConfig, ConfigurationError]:
        """Build a config from the ``[release]`` table (or a flat mapping)."""
        table: Mapping[str, object] = get_table(data, "release") or data
        defaults = cls()

        raw_method = table.get("version_extraction_method")
        if raw_method is not None and not isinstance(raw_method, str):
            return Err(
                ConfigurationError(
                    f"version_extraction_method: expected a string, got {raw_method!r}"
                )
            )
        method = get_str(table, "version_extraction_method") or defaults.version_extraction_method
        if method not in EXTRACTION_METHODS:
            return Err(
                ConfigurationError(
                    f"unknown version_extraction_method '{method}' "
                    f"(expected one of: {', '.join(EXTRACTION_METHODS)})"
                )
            )

        flags: dict[str, bool] = {}
        for key in _BOOL_KEYS:
            value = table.get(key)
            if value is None:
                flags[key] = getattr(defaults, key)
                continue
            parsed = get_bool(table, key)
            if parsed is None:
                return Err(ConfigurationError(f"{key}: expected a boolean, got {value!r}"))
            flags[key] = parsed

        # A present list replaces the default, even when empty; validate() decides.
        accepted_branches = defaults.accepted_branches
        if table.get("accepted_branches") is not None:
            branches = get_str_list(table, "accepted_branches")
            if branches is None:
                return Err(
                    ConfigurationError(
                        "accepted_branches: expected a list of branch names, "
                        f"got {table['accepted_branches']!r}"
                    )
                )
            accepted_branches = branches

        tag_prefix = table.get("tag_prefix")
        config = cls(
            project_name=get_str(table, "project_name"),
            github_owner=get_str(table, "github_owner"),
            github_repo=get_str(table, "github_repo"),
            version_extraction_method=method,  # pyright: ignore[reportArgumentType]
            version_file=get_str(table, "version_file"),
            version_pattern=get_str(table, "version_pattern"),
            version_command=get_str(table, "version_command"),
            project_regenerate_cmd=get_str(table, "project_regenerate_cmd"),
            test_cmd=get_str(table, "test_cmd"),
            doc_files=get_str_list(table, "doc_files") or (),
            release_notes_file=get_str(table, "release_notes_file"),
            release_notes_dir=get_str(table, "release_notes_dir"),
            enable_github_checks=flags["enable_github_checks"],
            auto_tag=flags["auto_tag"],
            require_clean_git=flags["require_clean_git"],
            require_main_branch=flags["require_main_branch"],
            # An empty prefix is a valid choice, so only a missing key falls back.
            tag_prefix=tag_prefix.strip() if isinstance(tag_prefix, str) else defaults.tag_prefix,
            remote=get_str(table, "remote") or defaults.remote,
            accepted_branches=accepted_branches,
        )
        return config.validate()

    def validate(self) -> Result[ReleaseConfig, ConfigurationError]:
        """Check cross-option requirements."""
        if self.enable_github_checks and self.github_slug is None:
            return Err(
                ConfigurationError(
                    "enable_github_checks requires github_owner and github_repo"
                )
            )
        if self.version_pattern is not None:
            try:
                re.compile(self.version_pattern)
            except re.error as e:
                return Err(ConfigurationError(f"invalid version_pattern: {e}"))
        if self.require_main_branch and not self.accepted_branches:
            return Err(ConfigurationError("accepted_branches must not be empty"))
        return Ok(self)

    def with_env(self, env: Mapping[str, str]) -> Result[ReleaseConfig, ConfigurationError]:
        """Return a copy with environment variable overrides applied."""
        overrides: dict[str, object] = {}
        for name, (key, kind) in _ENV_OPTIONS.items():
            raw = env.get(name)
            if raw is None:
                continue
            match kind:
                case "str":
                    # Set-but-empty disables the option (TEST_CMD="" skips tests).
                    overrides[key] = raw.strip() or None
                case "bool":
                    parsed = parse_bool(raw)
                    if parsed is None:
                        return Err(ConfigurationError(f"{name}: expected a boolean, got '{raw}'"))
                    overrides[key] = parsed
                case "list":
                    overrides[key] = split_list(raw)

        method = overrides.get("version_extraction_method")
        if method is None and "version_extraction_method" in overrides:
            overrides.pop("version_extraction_method")
        elif method is not None and method not in EXTRACTION_METHODS:
            return Err(
                ConfigurationError(
                    f"VERSION_EXTRACTION_METHOD: unknown method '{method}' "
                    f"(expected one of: {', '.join(EXTRACTION_METHODS)})"
                )
            )
        for key in ("tag_prefix", "remote"):
            if key in overrides and overrides[key] is None:
                overrides[key] = "" if key == "tag_prefix" else DEFAULT_REMOTE

        return replace(self, **overrides).validate()  # pyright: ignore[reportArgumentType]


def _parse_toml(path: Path) -> Result[StrDict, ConfigurationError]:
    import tomllib

    try:
        data_obj: object = tomllib.loads(path.read_bytes().decode("utf-8"))
    except PermissionError:
        return Err(ConfigurationError(f"permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigurationError(f"invalid TOML syntax: {e}", path=path))
    except (OSError, UnicodeDecodeError) as e:
        return Err(ConfigurationError(f"error reading config: {e}", path=path))

    data = as_str_dict(data_obj)
    if data is None:
        return Err(ConfigurationError("config root must be a TOML table", path=path))
    return Ok(data)


def load_config(
    path: Path | None,
    env: Mapping[str, str] | None = None,
) -> Result[ReleaseConfig, ConfigurationError]:
    """Load configuration from ``path`` (optional) and ``env`` overrides.

    A missing file is not an error: defaults and the environment apply.

    Args:
        path: Path to shipit.toml, or None to skip the file layer
        env: Environment mapping (None means no overrides)

    Returns:
        Ok(ReleaseConfig) on success, Err(ConfigurationError) on failure
    """
    base: ReleaseConfig = ReleaseConfig()
    if path is not None and path.exists():
        parsed = _parse_toml(path)
        if isinstance(parsed, Err):
            return parsed
        built = ReleaseConfig.from_dict(parsed.value)
        if isinstance(built, Err):
            return Err(replace(built.error, path=path))
        base = built.value

    if not env:
        return base.validate()
    return base.with_env(env)
