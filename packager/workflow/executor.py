"""
Command list executor.
Runs commands strictly in declared order and isolates per-command failures.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from ..exceptions import PackagerError
from ..exec.copy import CopyExecutor
from ..exec.replace import ReplaceExecutor
from ..exec.run import RunExecutor
from ..models import Command


@dataclass
class CommandFailure:
    """A failed command: its position in the list and the error it raised."""
    index: int
    command: Command
    error: Exception

    def to_dict(self) -> Dict[str, Any]:
        return {
            "index": self.index,
            "type": self.command.kind,
            "error": {
                "type": type(self.error).__name__,
                "message": str(self.error),
            },
        }


@dataclass
class ExecutionReport:
    """
    Aggregate result of a run.

    ``failures`` is ordered like the failing commands appeared; an empty list
    means every command succeeded.
    """
    total: int
    failures: List[CommandFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    @property
    def failure_count(self) -> int:
        return len(self.failures)

    @property
    def errors(self) -> List[Exception]:
        return [failure.error for failure in self.failures]

    def summary(self) -> str:
        if self.ok:
            return f"All {self.total} command(s) executed successfully!"
        return f"{self.failure_count} error(s) occurred in {self.total} command(s)!"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "failed": self.failure_count,
            "failures": [failure.to_dict() for failure in self.failures],
        }


class CommandCoordinator:
    """
    Main execution engine.
    Dispatches each command to the executor registered for its kind.
    """

    def __init__(
        self,
        workspace: Optional[Path] = None,
        executors: Optional[Dict[str, Any]] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize coordinator.

        Args:
            workspace: Directory relative paths are resolved against (default: cwd)
            executors: Executor per command kind, overriding the defaults
            logger: Logger shared with the default executors
        """
        self.workspace = workspace
        self.logger = logger or logging.getLogger(__name__)

        self.executors: Dict[str, Any] = {
            "copy": CopyExecutor(workspace, self.logger),
            "replace": ReplaceExecutor(workspace, self.logger),
            "run": RunExecutor(workspace, self.logger),
        }
        if executors:
            self.executors.update(executors)

    def execute_all(self, commands: Sequence[Command]) -> ExecutionReport:
        """
        Execute every command in order.

        A failing command never stops the run; its error is recorded and the
        next command starts once it has completed.

        Returns:
            ExecutionReport listing each failure with its command index
        """
        report = ExecutionReport(total=len(commands))

        for index, command in enumerate(commands):
            self.logger.info(f"[{index + 1}/{len(commands)}] {command.describe()}")

            try:
                self.executors[command.kind].execute(command)
            except (PackagerError, OSError) as e:
                report.failures.append(CommandFailure(index, command, e))
                self.logger.error(f"Command {index + 1} ({command.kind}) failed: {e}")

        if report.ok:
            self.logger.info(report.summary())
        else:
            self.logger.error(report.summary())

        return report


def execute_all(commands: Sequence[Command], workspace: Optional[Path] = None) -> ExecutionReport:
    """Execute ``commands`` in order and return the aggregate report."""
    return CommandCoordinator(workspace).execute_all(commands)
