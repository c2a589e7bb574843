from .destination import Destination, Platform, RawDestination
from .errors import ConfigurationError, InvalidArgument, UnsupportedConfigFormatError
from .loader import load_task
from .types import SDK, Configuration, Runner, RunnerKind, TaskConfig

__all__ = [
    "load_task",
    "Configuration",
    "TaskConfig",
    "Destination",
    "RawDestination",
    "Platform",
    "Runner",
    "RunnerKind",
    "SDK",
    "ConfigurationError",
    "InvalidArgument",
    "UnsupportedConfigFormatError",
]
