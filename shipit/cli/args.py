from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from shipit.core.errors import UsageError
from shipit.core.result import Err, Ok, Result
from shipit.core.version import BUMP_TYPES, BumpType, Version, is_bump_type, parse_version

DEFAULT_BUMP: BumpType = "patch"


@dataclass(frozen=True, slots=True)
class ReleaseArgs:
    """Positional arguments, disambiguated by shape.

    Attributes:
        bump: Bump type (defaults to patch)
        explicit: Explicit target version, if one was given
        bump_given: True when the bump type came from the command line
    """

    bump: BumpType = DEFAULT_BUMP
    explicit: Version | None = None
    bump_given: bool = False


def parse_release_args(tokens: Sequence[str]) -> Result[ReleaseArgs, UsageError]:
    """Accept up to two tokens in either order: a bump type and/or a version."""
    if len(tokens) > 2:
        return Err(UsageError(f"expected at most 2 arguments, got {len(tokens)}"))

    bump: BumpType | None = None
    explicit: Version | None = None

    for raw in tokens:
        token = raw.strip()
        if is_bump_type(token):
            if bump is not None:
                return Err(UsageError(f"bump type given twice: {bump}, {token}"))
            bump = token  # pyright: ignore[reportAssignmentType]
            continue

        version = parse_version(token)
        if version is not None:
            if explicit is not None:
                return Err(UsageError(f"version given twice: {explicit}, {token}"))
            explicit = version
            continue

        return Err(
            UsageError(
                f"unrecognized argument '{raw}' "
                f"(expected {'|'.join(BUMP_TYPES)} or a X.Y.Z version)"
            )
        )

    return Ok(
        ReleaseArgs(
            bump=bump or DEFAULT_BUMP,
            explicit=explicit,
            bump_given=bump is not None,
        )
    )
