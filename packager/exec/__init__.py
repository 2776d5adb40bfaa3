"""
Execution module for the packager.
One executor per command variant: copy, replace, run.
"""

from .copy import CopyExecutor
from .replace import ReplaceExecutor
from .run import RunExecutor
from .output_capture import RunResult

__all__ = [
    "CopyExecutor",
    "ReplaceExecutor",
    "RunExecutor",
    "RunResult",
]
