"""
Declarative packaging runner.

A configuration declares named definitions and an ordered list of commands
(copy, replace, run); ``load`` resolves and decodes it and ``execute_all``
runs the commands, collecting failures without aborting the run.
"""

from .loader import ConfigLoader, load, loads
from .models import Configuration, Copy, DefineItem, Replace, Run
from .workflow.executor import CommandCoordinator, ExecutionReport, execute_all

__all__ = [
    'CommandCoordinator',
    'ConfigLoader',
    'Configuration',
    'Copy',
    'DefineItem',
    'ExecutionReport',
    'Replace',
    'Run',
    'execute_all',
    'load',
    'loads',
]
