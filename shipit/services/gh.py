from __future__ import annotations

import json
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import cast

from shipit.core.result import Err, Ok, Result
from shipit.core.structured import as_str_dict, get_str
from shipit.platform.process import run as run_process

GH_TIMEOUT_SECONDS = 60.0


@dataclass(frozen=True, slots=True)
class GhError:
    message: str
    hint: str | None = None


@dataclass(frozen=True, slots=True)
class Milestone:
    number: int
    title: str
    state: str
    open_issues: int


def ensure_gh_available() -> Result[None, GhError]:
    if shutil.which("gh") is None:
        return Err(
            GhError(message="gh: missing", hint="Install GitHub CLI: https://cli.github.com/")
        )
    return Ok(None)


def ensure_gh_auth(*, root: Path) -> Result[None, GhError]:
    result = run_process(["gh", "auth", "status"], cwd=root, timeout=GH_TIMEOUT_SECONDS)
    if isinstance(result, Err):
        return Err(GhError(message="gh auth required", hint="Run: gh auth login"))
    return Ok(None)


def _decode_pages(text: str) -> object:
    # ``gh api --paginate`` prints one JSON document per page, back to back.
    decoder = json.JSONDecoder()
    pages: list[object] = []
    pos = 0
    text = text.strip()
    while pos < len(text):
        page, pos = decoder.raw_decode(text, pos)
        pages.append(page)
        while pos < len(text) and text[pos].isspace():
            pos += 1
    if len(pages) == 1:
        return pages[0]
    if all(isinstance(p, list) for p in pages):
        return [item for p in pages for item in cast(list[object], p)]
    return pages


def gh_api_json(
    *, root: Path, endpoint: str, paginate: bool = False
) -> Result[object, GhError]:
    cmd = ["gh", "api", "--paginate", endpoint] if paginate else ["gh", "api", endpoint]
    result = run_process(cmd, cwd=root, timeout=GH_TIMEOUT_SECONDS)
    if isinstance(result, Err):
        return Err(
            GhError(
                message=f"gh api failed: {endpoint}",
                hint=result.error.stderr.strip() or None,
            )
        )
    try:
        return Ok(_decode_pages(result.value))
    except json.JSONDecodeError as e:
        return Err(GhError(message=f"gh api returned invalid JSON: {e}", hint=endpoint))


def _parse_milestone(obj: object) -> Milestone | None:
    d = as_str_dict(obj)
    if d is None:
        return None
    title = get_str(d, "title")
    number = d.get("number")
    open_issues = d.get("open_issues")
    if title is None or not isinstance(number, int) or not isinstance(open_issues, int):
        return None
    return Milestone(
        number=number,
        title=title,
        state=get_str(d, "state") or "open",
        open_issues=open_issues,
    )


def list_milestones(*, root: Path, repo: str) -> Result[list[Milestone], GhError]:
    """List every milestone (open and closed) of ``repo`` (owner/name)."""
    data = gh_api_json(
        root=root, endpoint=f"repos/{repo}/milestones?state=all&per_page=100", paginate=True
    )
    if isinstance(data, Err):
        return data
    if not isinstance(data.value, list):
        return Err(GhError(message="unexpected milestones payload", hint=repo))

    out: list[Milestone] = []
    for item in cast(list[object], data.value):
        parsed = _parse_milestone(item)
        if parsed is not None:
            out.append(parsed)
    return Ok(out)


def find_milestone(
    *, root: Path, repo: str, titles: tuple[str, ...]
) -> Result[Milestone | None, GhError]:
    """Find the milestone whose title is one of ``titles`` (e.g. "1.3.0", "v1.3.0")."""
    listed = list_milestones(root=root, repo=repo)
    if isinstance(listed, Err):
        return listed
    for milestone in listed.value:
        if milestone.title in titles:
            return Ok(milestone)
    return Ok(None)
