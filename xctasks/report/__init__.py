from .report import TestReport

__all__ = ["TestReport"]
