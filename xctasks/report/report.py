from __future__ import annotations

from typing import TYPE_CHECKING, Mapping

from rich.console import Console
from rich.text import Text

if TYPE_CHECKING:
    from xctasks.task import Subtask

Options = tuple[tuple[str, str], ...]


class TestReport:
    """Pass/fail outcomes of every command run by one invocation.

    One instance is owned by the host program for the whole run. Once a
    failure is recorded the report stays failed.
    """

    __test__ = False

    def __init__(self, console: Console | None = None):
        self.console = console or Console(highlight=False, soft_wrap=True)
        self._results: dict[Subtask, dict[Options, bool]] = {}
        self._success = True

    def record_result(
        self, subtask: Subtask, options: Mapping[str, str], success: bool
    ) -> None:
        self._results.setdefault(subtask, {})[tuple(options.items())] = success
        if not success:
            self._success = False

    def __getitem__(self, subtask: Subtask) -> dict[Options, bool]:
        return self._results[subtask]

    def __len__(self) -> int:
        return sum(len(outcomes) for outcomes in self._results.values())

    @property
    def success(self) -> bool:
        return self._success

    @property
    def failure(self) -> bool:
        return not self._success

    @property
    def exit_code(self) -> int:
        return 1 if self.failure else 0

    def failures(self) -> list[tuple[Subtask, dict[str, str]]]:
        return [
            (subtask, dict(options))
            for subtask, outcomes in self._results.items()
            for options, success in outcomes.items()
            if not success
        ]

    def report(self) -> None:
        for subtask, options in self.failures():
            self.console.print(
                Text(f"!! {subtask.name} tests failed{_describe(options)}", style="red")
            )
        if self.success:
            self.console.print(Text("** All tests executed successfully", style="green"))


def _describe(options: Mapping[str, str]) -> str:
    if not options:
        return ""
    if set(options) == {"ios_version"}:
        return f" under iOS {options['ios_version']}"
    return " (" + ", ".join(f"{k}={v}" for k, v in options.items()) + ")"
