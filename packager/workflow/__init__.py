"""Command execution with per-command failure isolation."""

from .executor import CommandCoordinator, CommandFailure, ExecutionReport, execute_all

__all__ = ['CommandCoordinator', 'CommandFailure', 'ExecutionReport', 'execute_all']
