from .command import render_command
from .subtask import Subtask
from .test_task import TestTask

__all__ = ["render_command", "Subtask", "TestTask"]
