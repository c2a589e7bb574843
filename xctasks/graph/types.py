class GraphError(Exception):
    def __init__(self, *args: object) -> None:
        super().__init__(*args)


class UnknownStepError(GraphError, KeyError):
    def __init__(self, step_id: str):
        super().__init__(f"Unknown step: {step_id}")
        self.step_id = step_id

    def __str__(self) -> str:
        return self.args[0]


class CycleError(GraphError):
    def __init__(self, cycle: list[str]):
        super().__init__("Cycle detected: " + " -> ".join(cycle))
        self.cycle = cycle
