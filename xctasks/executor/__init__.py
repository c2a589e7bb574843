from .executor import Executor
from .shell import CommandRunner, run_command
from .types import RunResult

__all__ = ["Executor", "RunResult", "CommandRunner", "run_command"]
