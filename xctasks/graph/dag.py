from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Callable, Iterable

from .types import CycleError, GraphError, UnknownStepError


class _Visit(Enum):
    UNVISITED = auto()
    VISITING = auto()
    VISITED = auto()


@dataclass(frozen=True)
class Step:
    id: str
    deps: tuple[str, ...] = ()
    action: Callable[[], None] | None = None
    description: str = ""


@dataclass
class StepGraph:
    """Named steps run in dependency order.

    Unlike a sorted build graph, declaration order is significant: steps
    and their dependencies are visited in the order they were added, so
    subtasks and OS versions run in configured order.
    """

    steps: dict[str, Step] = field(default_factory=dict)

    def add(
        self,
        step_id: str,
        deps: Iterable[str] = (),
        action: Callable[[], None] | None = None,
        description: str = "",
    ) -> Step:
        if step_id in self.steps:
            raise GraphError(f"Duplicate step: {step_id}")

        step = Step(step_id, tuple(deps), action, description)
        self.steps[step_id] = step
        return step

    def get(self, step_id: str) -> Step:
        if step_id not in self.steps:
            raise UnknownStepError(step_id)
        return self.steps[step_id]

    def step_ids(self) -> list[str]:
        return list(self.steps)

    def topo_order(self) -> list[str]:
        return self._toposort(self.steps)

    def subgraph_order(self, *targets: str) -> list[str]:
        for target in targets:
            self.get(target)
        return self._toposort(targets)

    def _toposort(self, roots: Iterable[str]) -> list[str]:
        state: dict[str, _Visit] = {}
        out: list[str] = []
        stack: list[str] = []
        pos: dict[str, int] = {}

        def visit(sid: str) -> None:
            current = state.get(sid, _Visit.UNVISITED)
            if current == _Visit.VISITING:
                start = pos[sid]
                raise CycleError(stack[start:] + [sid])
            if current == _Visit.VISITED:
                return

            state[sid] = _Visit.VISITING
            pos[sid] = len(stack)
            stack.append(sid)

            for dep in self.steps[sid].deps:
                if dep not in self.steps:
                    raise GraphError(f"Step '{sid}' has unknown dependency '{dep}'")
                visit(dep)

            stack.pop()
            pos.pop(sid)
            state[sid] = _Visit.VISITED
            out.append(sid)

        for sid in roots:
            visit(sid)

        return out
