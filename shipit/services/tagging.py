"""Target version resolution and tag publishing.

``resolve_target`` is pure. ``publish_tag`` creates one annotated tag and
pushes it; it is the only place shipit writes anything.

Re-running after a failed push is safe: when the tag already exists locally
but not on the remote, creation is skipped and only the push is retried.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Literal

from shipit.core.errors import PushError, TagError, VersionOrderError
from shipit.core.result import Err, Ok, Result
from shipit.core.version import BumpType, Version
from shipit.git.repository import Repository

__all__ = [
    "ConfirmProvider",
    "ReleaseTarget",
    "TagResult",
    "publish_tag",
    "resolve_target",
]

ConfirmProvider = Callable[[str], bool]
"""Asked before anything is written; returns True to proceed."""

TagOutcome = Literal["created_and_pushed", "pushed_existing", "dry_run"]


@dataclass(frozen=True, slots=True)
class ReleaseTarget:
    """The version about to be released.

    Attributes:
        current: Version extracted from the project
        target: Version to tag
        bump: Bump type used, or None when the target was given explicitly
        tag: Tag name (prefix + target)
    """

    current: Version
    target: Version
    bump: BumpType | None
    tag: str


@dataclass(frozen=True, slots=True)
class TagResult:
    target: ReleaseTarget
    outcome: TagOutcome


def resolve_target(
    current: Version,
    *,
    bump: BumpType = "patch",
    explicit: Version | None = None,
    prefix: str = "v",
) -> Result[ReleaseTarget, VersionOrderError]:
    """Compute the next version.

    An explicit version wins over ``bump`` but must be strictly greater than
    ``current``.
    """
    if explicit is not None:
        if explicit <= current:
            return Err(VersionOrderError(current=str(current), requested=str(explicit)))
        return Ok(
            ReleaseTarget(current=current, target=explicit, bump=None, tag=explicit.to_tag(prefix))
        )

    target = current.bump(bump)
    return Ok(ReleaseTarget(current=current, target=target, bump=bump, tag=target.to_tag(prefix)))


def publish_tag(
    repo: Repository,
    target: ReleaseTarget,
    *,
    remote: str,
    auto: bool,
    confirm: ConfirmProvider,
    message: str | None = None,
    dry_run: bool = False,
) -> Result[TagResult, TagError | PushError]:
    """Create the annotated tag for ``target`` and push it to ``remote``.

    Args:
        repo: Repository to tag
        target: Resolved release target
        remote: Remote to push to
        auto: Skip the confirmation prompt
        confirm: Confirmation provider used when ``auto`` is False
        message: Tag annotation (defaults to "Release <tag>")
        dry_run: Report what would happen without writing anything

    Returns:
        Ok(TagResult) on success.
        Err(TagError) when the tag is already released, the user declines,
        or the tag cannot be created (nothing was written).
        Err(PushError) when the tag was created locally but the push failed.
    """
    tag = target.tag
    exists_locally = repo.tag_exists(tag)

    if exists_locally:
        on_remote = repo.remote_tag_exists(remote, tag)
        if isinstance(on_remote, Err):
            return Err(
                TagError(
                    kind="tag_failed",
                    message=f"tag {tag} exists locally; cannot check {remote}",
                    hint=on_remote.error.message,
                )
            )
        if on_remote.value:
            return Err(
                TagError(
                    kind="tag_exists",
                    message=f"tag {tag} already exists on {remote}",
                    hint="Bump to a newer version",
                )
            )

    if dry_run:
        return Ok(TagResult(target=target, outcome="dry_run"))

    if not auto:
        action = "push existing tag" if exists_locally else "create and push tag"
        if not confirm(f"{action} {tag} to {remote}?"):
            return Err(TagError(kind="declined", message=f"tag {tag} not created (declined)"))

    if not exists_locally:
        created = repo.create_tag(tag, message or f"Release {tag}")
        if isinstance(created, Err):
            return Err(
                TagError(
                    kind="tag_failed",
                    message=f"failed to create tag {tag}",
                    hint=created.error.message,
                )
            )

    pushed = repo.push_tag(remote, tag)
    if isinstance(pushed, Err):
        return Err(PushError(tag=tag, remote=remote, message=pushed.error.message))

    outcome: TagOutcome = "pushed_existing" if exists_locally else "created_and_pushed"
    return Ok(TagResult(target=target, outcome=outcome))
