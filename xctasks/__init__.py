from .config import (
    Configuration,
    ConfigurationError,
    Destination,
    InvalidArgument,
    RawDestination,
    load_task,
)
from .report import TestReport
from .task import Subtask, TestTask, render_command

__all__ = [
    "Configuration",
    "ConfigurationError",
    "Destination",
    "InvalidArgument",
    "RawDestination",
    "Subtask",
    "TestReport",
    "TestTask",
    "load_task",
    "render_command",
]
