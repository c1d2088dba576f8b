"""Version extraction strategies.

Each strategy is a pure function from file contents to a version string; the
active one is picked by ``ReleaseConfig.version_extraction_method``. The
``custom`` method delegates to a caller-supplied function or, from the
command line, to ``version_command``.
"""

from __future__ import annotations

import json
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from pathlib import Path

from shipit.core.config import ExtractionMethod, ReleaseConfig
from shipit.core.errors import ConfigurationError, ExtractionError
from shipit.core.result import Err, Ok, Result
from shipit.core.structured import as_str_dict
from shipit.core.version import VERSION_TEXT, Version, parse_version
from shipit.platform.process import capture_shell

__all__ = [
    "CustomExtractor",
    "DEFAULT_FILES",
    "extract_version",
    "scan_version",
]

VERSION_COMMAND_TIMEOUT_SECONDS = 60.0

CustomExtractor = Callable[[Path], str]
"""Receives the project root, returns the raw version string."""

DEFAULT_FILES: Mapping[str, str] = {
    "version_file": "VERSION",
    "package_json": "package.json",
    "package_swift": "Package.swift",
    "setup_py": "setup.py",
    "readme": "README.md",
}

_V = rf"v?{VERSION_TEXT}"

DEFAULT_PATTERNS: Mapping[str, str] = {
    # let version = "1.2.3"  /  // version: 1.2.3
    "package_swift": rf"""(?<![\w-])version\s*[:=]\s*"?({_V})"?""",
    # setup(version="1.2.3") / __version__ = '1.2.3'
    "setup_py": rf"""(?<![\w-])(?:__)?version(?:__)?\s*=\s*['"]({_V})['"]""",
    # Version: 1.2.3 / **Version** 1.2.3
    "readme": rf"""(?i)\bversion\b[*_:\s]*({_V})\b""",
}


@dataclass(frozen=True, slots=True)
class _Source:
    path: Path
    text: str


def _read(root: Path, rel: str) -> Result[_Source, ExtractionError]:
    path = root / rel
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return Err(ExtractionError("version source not found", path=path))
    except (OSError, UnicodeDecodeError) as e:
        return Err(ExtractionError(f"cannot read version source: {e}", path=path))
    return Ok(_Source(path=path, text=text))


def _whole_file(source: _Source) -> Result[str, ExtractionError]:
    value = source.text.strip()
    if not value:
        return Err(ExtractionError("version file is empty", path=source.path))
    return Ok(value)


def _json_field(source: _Source) -> Result[str, ExtractionError]:
    try:
        data = as_str_dict(json.loads(source.text))
    except json.JSONDecodeError as e:
        return Err(ExtractionError(f"invalid JSON: {e}", path=source.path))
    if data is None:
        return Err(ExtractionError("manifest root must be a JSON object", path=source.path))
    value = data.get("version")
    if not isinstance(value, str) or not value.strip():
        return Err(ExtractionError("manifest has no string \"version\" field", path=source.path))
    return Ok(value.strip())


def scan_version(text: str, pattern: str) -> Result[str, str]:
    """Find the single version ``pattern`` matches in free text.

    The version is the first capturing group, or the whole match when the
    pattern has none. Repeated matches of the same version are fine, even
    spelled with and without a leading ``v``; the first spelling is kept.
    Two different versions are ambiguous.
    """
    regex = re.compile(pattern, re.MULTILINE)
    found: list[str] = []
    seen: set[Version | str] = set()
    for m in regex.finditer(text):
        value = (m.group(1) if regex.groups else m.group(0)) or ""
        value = value.strip()
        if not value:
            continue
        key = parse_version(value) or value
        if key not in seen:
            seen.add(key)
            found.append(value)

    if not found:
        return Err(f"no match for pattern {pattern!r}")
    if len(found) > 1:
        return Err(f"ambiguous version: found {', '.join(found)}")
    return Ok(found[0])


def _regex(pattern: str) -> Callable[[_Source], Result[str, ExtractionError]]:
    def strategy(source: _Source) -> Result[str, ExtractionError]:
        scanned = scan_version(source.text, pattern)
        if isinstance(scanned, Err):
            return Err(ExtractionError(scanned.error, path=source.path))
        return scanned

    return strategy


def _strategy(
    method: ExtractionMethod, config: ReleaseConfig
) -> Callable[[_Source], Result[str, ExtractionError]]:
    match method:
        case "version_file":
            return _whole_file
        case "package_json":
            return _json_field
        case "package_swift" | "setup_py" | "readme":
            return _regex(config.version_pattern or DEFAULT_PATTERNS[method])
        case _:
            raise AssertionError(f"no file strategy for method: {method}")


def _run_custom(
    config: ReleaseConfig,
    root: Path,
    custom: CustomExtractor | None,
) -> Result[str, ExtractionError | ConfigurationError]:
    if custom is not None:
        try:
            return Ok(custom(root).strip())
        except Exception as e:
            return Err(ExtractionError(f"custom extractor failed: {e!r}"))

    if config.version_command is None:
        return Err(
            ConfigurationError(
                "version_extraction_method 'custom' needs version_command "
                "(or an extractor passed by the caller)"
            )
        )

    out = capture_shell(config.version_command, root, timeout=VERSION_COMMAND_TIMEOUT_SECONDS)
    if isinstance(out, Err):
        detail = out.error.stderr.strip() or str(out.error)
        return Err(ExtractionError(f"version_command failed: {detail}"))

    value = out.value.strip()
    if config.version_pattern is not None:
        scanned = scan_version(value, config.version_pattern)
        if isinstance(scanned, Err):
            return Err(ExtractionError(f"version_command output: {scanned.error}"))
        value = scanned.value
    return Ok(value)


def extract_version(
    config: ReleaseConfig,
    root: Path,
    *,
    custom: CustomExtractor | None = None,
) -> Result[Version, ExtractionError | ConfigurationError]:
    """Extract the current project version.

    Args:
        config: Release configuration (selects the strategy)
        root: Project root; relative file names are resolved against it
        custom: Extraction function for the ``custom`` method

    Returns:
        Ok(Version) on success. Err(ExtractionError) when the source is
        missing, unreadable or does not hold exactly one valid version;
        Err(ConfigurationError) when ``custom`` has nothing to run.
    """
    method = config.version_extraction_method
    source_path: Path | None = None

    if method == "custom":
        raw_r = _run_custom(config, root, custom)
    else:
        rel = config.version_file or DEFAULT_FILES[method]
        source = _read(root, rel)
        if isinstance(source, Err):
            return source
        source_path = source.value.path
        raw_r = _strategy(method, config)(source.value)

    if isinstance(raw_r, Err):
        return raw_r

    version = parse_version(raw_r.value)
    if version is None:
        return Err(
            ExtractionError(
                f"'{raw_r.value}' is not a valid X.Y.Z version",
                path=source_path,
            )
        )
    return Ok(version)
