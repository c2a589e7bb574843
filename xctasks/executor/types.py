from dataclasses import dataclass


@dataclass(frozen=True)
class RunResult:
    order: list[str]
    durations: dict[str, float]
