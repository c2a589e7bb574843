from .dag import Step, StepGraph
from .types import CycleError, GraphError, UnknownStepError

__all__ = ["Step", "StepGraph", "GraphError", "CycleError", "UnknownStepError"]
