"""Core types: results and exit codes.

Configuration (`relpack.core.config`) and project paths
(`relpack.core.project`) are imported from their modules directly since the
config layer depends on the release model.
"""

from .errors import ErrorCode
from .result import Err, Ok, Result

__all__ = [
    # errors
    "ErrorCode",
    # result
    "Err",
    "Ok",
    "Result",
]
