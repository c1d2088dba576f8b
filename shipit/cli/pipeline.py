"""Release pipeline driver.

Stages run in a fixed order, each one a handler of the state machine in
``shipit.cli.fsm``:

    parse_args -> load_config -> extract -> resolve -> validate -> tag -> done

Any ``Err`` stops the machine in a terminal ``StageFailed(stage)``.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Literal

from shipit.cli.args import ReleaseArgs, parse_release_args
from shipit.cli.fsm import StageFailed, StepOutcome, advance, finish, run_state_machine
from shipit.core.config import ReleaseConfig
from shipit.core.errors import ConfigurationError, PipelineError
from shipit.core.result import Err, Ok, Result
from shipit.core.version import Version
from shipit.git.repository import Repository
from shipit.output.console import ConsoleProtocol, Style
from shipit.services.extract import CustomExtractor, extract_version
from shipit.services.tagging import (
    ConfirmProvider,
    ReleaseTarget,
    TagResult,
    publish_tag,
    resolve_target,
)
from shipit.services.validation import (
    ValidationContext,
    ValidationReport,
    ValidationRunner,
)

Stage = Literal["parse_args", "load_config", "extract", "resolve", "validate", "tag", "done"]

ConfigLoader = Callable[[], Result[ReleaseConfig, ConfigurationError]]


@dataclass(frozen=True, slots=True)
class PipelineState:
    stage: Stage
    tokens: tuple[str, ...]
    args: ReleaseArgs | None = None
    config: ReleaseConfig | None = None
    current: Version | None = None
    target: ReleaseTarget | None = None
    report: ValidationReport | None = None
    tag_result: TagResult | None = None


Outcome = Result[StepOutcome[PipelineState], PipelineError]


class ReleasePipeline:
    """Extract, validate and tag, stopping at the first failure.

    Args:
        root: Project root (git working tree)
        console: Output sink
        load_config: Returns the release configuration
        confirm: Asked before tagging unless auto-tag is on
        repo: Repository to inspect and tag (defaults to ``root``)
        custom_extractor: Function used by the ``custom`` extraction method
        dry_run: Validate and report, but do not tag
    """

    def __init__(
        self,
        *,
        root: Path,
        console: ConsoleProtocol,
        load_config: ConfigLoader,
        confirm: ConfirmProvider,
        repo: Repository | None = None,
        custom_extractor: CustomExtractor | None = None,
        dry_run: bool = False,
    ) -> None:
        self._root = root
        self._console = console
        self._load_config = load_config
        self._confirm = confirm
        self._repo = repo or Repository(root)
        self._custom = custom_extractor
        self._dry_run = dry_run

    def run(self, tokens: Sequence[str]) -> Result[PipelineState, StageFailed]:
        return run_state_machine(
            initial_state=PipelineState(stage="parse_args", tokens=tuple(tokens)),
            get_stage=lambda s: s.stage,
            handlers={
                "parse_args": self._parse_args,
                "load_config": self._load,
                "extract": self._extract,
                "resolve": self._resolve,
                "validate": self._validate,
                "tag": self._tag,
                "done": lambda s: Ok(finish(s)),
            },
        )

    def _parse_args(self, state: PipelineState) -> Outcome:
        parsed = parse_release_args(state.tokens)
        if isinstance(parsed, Err):
            return parsed
        return Ok(advance(replace(state, stage="load_config", args=parsed.value)))

    def _load(self, state: PipelineState) -> Outcome:
        loaded = self._load_config()
        if isinstance(loaded, Err):
            return loaded
        config = loaded.value
        if config.project_name:
            self._console.header(config.project_name)
        return Ok(advance(replace(state, stage="extract", config=config)))

    def _extract(self, state: PipelineState) -> Outcome:
        config = _require(state.config)
        extracted = extract_version(config, self._root, custom=self._custom)
        if isinstance(extracted, Err):
            return extracted
        current = extracted.value
        self._console.success(f"version: {current} ({config.version_extraction_method})")
        return Ok(advance(replace(state, stage="resolve", current=current)))

    def _resolve(self, state: PipelineState) -> Outcome:
        config = _require(state.config)
        args = _require(state.args)
        current = _require(state.current)

        resolved = resolve_target(
            current,
            bump=args.bump,
            explicit=args.explicit,
            prefix=config.tag_prefix,
        )
        if isinstance(resolved, Err):
            return resolved
        target = resolved.value

        if args.explicit is not None and args.bump_given:
            bumped = current.bump(args.bump)
            if bumped != args.explicit:
                self._console.warning(
                    f"explicit version {args.explicit} overrides {args.bump} bump ({bumped})"
                )

        how = target.bump or "explicit"
        self._console.print(f"release: {current} -> {target.target} ({how})", Style.BOLD)
        return Ok(advance(replace(state, stage="validate", target=target)))

    def _validate(self, state: PipelineState) -> Outcome:
        config = _require(state.config)
        target = _require(state.target)

        self._console.header("Validation")
        ctx = ValidationContext(
            config=config,
            root=self._root,
            repo=self._repo,
            current=target.current,
            target=target.target,
        )
        report = ValidationRunner(console=self._console).run(ctx)
        failure = report.failure
        if failure is not None:
            if report.not_run:
                self._console.print(f"not run: {', '.join(report.not_run)}", Style.DIM)
            return Err(failure.to_failure())
        return Ok(advance(replace(state, stage="tag", report=report)))

    def _tag(self, state: PipelineState) -> Outcome:
        config = _require(state.config)
        target = _require(state.target)

        self._console.header("Tag")
        message = f"{config.project_name} {target.tag}" if config.project_name else None
        published = publish_tag(
            self._repo,
            target,
            remote=config.remote,
            auto=config.auto_tag,
            confirm=self._confirm,
            message=message,
            dry_run=self._dry_run,
        )
        if isinstance(published, Err):
            return published

        result = published.value
        match result.outcome:
            case "dry_run":
                self._console.info(f"dry run: would push {target.tag} to {config.remote}")
            case "pushed_existing":
                self._console.success(f"pushed existing tag {target.tag} to {config.remote}")
            case "created_and_pushed":
                self._console.success(f"created and pushed {target.tag} to {config.remote}")
        return Ok(advance(replace(state, stage="done", tag_result=result)))


def _require[T](value: T | None) -> T:
    assert value is not None
    return value
