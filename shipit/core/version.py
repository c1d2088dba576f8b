from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Literal, get_args


BumpType = Literal["major", "minor", "patch"]
BUMP_TYPES: tuple[str, ...] = get_args(BumpType)

VERSION_TEXT = r"(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
_VERSION_RE = re.compile(rf"^v?{VERSION_TEXT}$")


@dataclass(frozen=True, slots=True, order=True)
class Version:
    major: int
    minor: int
    patch: int

    def __post_init__(self) -> None:
        if min(self.major, self.minor, self.patch) < 0:
            raise ValueError(f"negative version component: {self.major}.{self.minor}.{self.patch}")

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"

    def to_tag(self, prefix: str = "v") -> str:
        return f"{prefix}{self}"

    def bump(self, kind: BumpType) -> Version:
        match kind:
            case "major":
                return Version(self.major + 1, 0, 0)
            case "minor":
                return Version(self.major, self.minor + 1, 0)
            case "patch":
                return Version(self.major, self.minor, self.patch + 1)
            case _:
                raise AssertionError(f"unexpected bump kind: {kind}")


def parse_version(text: str) -> Version | None:
    """Parse ``X.Y.Z`` (an optional leading ``v`` is accepted)."""
    m = _VERSION_RE.match(text.strip())
    if m is None:
        return None
    return Version(int(m.group(1)), int(m.group(2)), int(m.group(3)))


def is_bump_type(text: str) -> bool:
    return text in BUMP_TYPES
