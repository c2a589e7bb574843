import logging
import time

from xctasks.graph import StepGraph

from .types import RunResult

logger = logging.getLogger(__name__)


class Executor:
    def __init__(self, graph: StepGraph):
        self.graph = graph

    def _run(self, order: list[str]) -> RunResult:
        durations: dict[str, float] = {}

        for sid in order:
            step = self.graph.get(sid)
            start = time.monotonic()
            if step.action is not None:
                step.action()
            durations[sid] = time.monotonic() - start
            logger.debug("Step %s finished in %.3fs", sid, durations[sid])

        return RunResult(order, durations)

    def run_all(self) -> RunResult:
        return self._run(self.graph.topo_order())

    def run_target(self, *targets: str) -> RunResult:
        return self._run(self.graph.subgraph_order(*targets))
