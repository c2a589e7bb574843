from __future__ import annotations

import logging
from typing import Iterable, Mapping

from xctasks.config import Configuration, ConfigurationError
from xctasks.executor import CommandRunner
from xctasks.report import TestReport
from xctasks.schemes import inject_environment, scheme_path

from .command import SIMULATOR_KILL_COMMAND, render_command

logger = logging.getLogger(__name__)


class Subtask:
    """A named test run owning its own copy of the task configuration."""

    def __init__(self, name: str | Mapping[str, str], config: Configuration):
        if isinstance(name, Mapping):
            if len(name) != 1:
                raise ConfigurationError(
                    f"A subtask takes a single name: scheme pair, got {dict(name)}"
                )
            ((name, scheme),) = name.items()
            config.scheme = scheme

        if not isinstance(name, str) or len(name.strip()) < 1:
            raise ConfigurationError(f"Subtask name must be a non empty string, got {name!r}")

        self.name = name.strip()
        self.config = config

    def __repr__(self) -> str:
        return f"Subtask({self.name!r})"

    @property
    def versioned(self) -> bool:
        return self.config.versioned

    def validate(self) -> None:
        if not self.config.scheme:
            raise ConfigurationError(f"A scheme must be configured for subtask '{self.name}'")
        self.config.validate()

    def option_sets(self) -> list[dict[str, str]]:
        if self.versioned:
            return [{"ios_version": version} for version in self.config.ios_versions]
        return [{}]

    def command(self, options: Mapping[str, str]) -> str:
        return render_command(self.config, options.get("ios_version"))

    def commands(self) -> list[str]:
        self.validate()
        return [self.command(options) for options in self.option_sets()]

    def prepare(self) -> None:
        if self.config.env:
            inject_environment(scheme_path(self.config), self.config.env)

    def run_commands(
        self,
        runner: CommandRunner,
        report: TestReport,
        ios_versions: Iterable[str] | None = None,
    ) -> None:
        wanted = None if ios_versions is None else set(ios_versions)

        for options in self.option_sets():
            if wanted is not None and options.get("ios_version") not in wanted:
                continue

            if self.config.simulator:
                runner(SIMULATOR_KILL_COMMAND, echo=False)

            success = runner(self.command(options), echo=True)
            logger.debug("%s %s: %s", self.name, options, "passed" if success else "failed")
            report.record_result(self, options, success)
