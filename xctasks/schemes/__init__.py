from .files import check_paths, install_schemes, scheme_path, truncate_log
from .scheme_xml import inject_environment
from .types import PreflightError, SchemeError

__all__ = [
    "check_paths",
    "install_schemes",
    "scheme_path",
    "truncate_log",
    "inject_environment",
    "PreflightError",
    "SchemeError",
]
