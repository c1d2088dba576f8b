from __future__ import annotations

import pytest

from shipit.cli.args import ReleaseArgs, parse_release_args
from shipit.core.result import Err, Ok
from shipit.core.version import Version


def test_no_tokens_defaults_to_patch() -> None:
    assert parse_release_args([]) == Ok(ReleaseArgs(bump="patch"))


def test_bump_only() -> None:
    assert parse_release_args(["minor"]) == Ok(ReleaseArgs(bump="minor", bump_given=True))


def test_version_only() -> None:
    result = parse_release_args(["2.0.0"])
    assert result == Ok(ReleaseArgs(explicit=Version(2, 0, 0)))


@pytest.mark.parametrize("tokens", [["major", "v3.0.0"], ["v3.0.0", "major"]])
def test_either_order(tokens: list[str]) -> None:
    result = parse_release_args(tokens)
    assert result == Ok(ReleaseArgs(bump="major", explicit=Version(3, 0, 0), bump_given=True))


@pytest.mark.parametrize(
    ("tokens", "needle"),
    [
        (["minor", "patch"], "bump type given twice"),
        (["1.0.0", "2.0.0"], "version given twice"),
        (["minor", "1.0.0", "extra"], "at most 2"),
        (["feature"], "unrecognized argument 'feature'"),
        (["1.2"], "unrecognized argument '1.2'"),
    ],
)
def test_usage_errors(tokens: list[str], needle: str) -> None:
    result = parse_release_args(tokens)
    assert isinstance(result, Err)
    assert needle in result.error.message
