"""
Run executor.
Executes a command line directly, falling back to the platform shell when the
program cannot be launched on its own (shell builtins, pipelines, redirects).
"""

import logging
import os
import shlex
import subprocess
from pathlib import Path
from typing import List, Optional

from ..exceptions import CommandFailed, CommandIOError
from ..models import Run
from .output_capture import RunResult, decode_output, truncate_text


def shell_argv(command: str) -> List[str]:
    """Platform shell invocation for ``command``."""
    if os.name == 'nt':
        return ["cmd", "/C", command]
    return ["sh", "-c", command]


class RunExecutor:
    """
    Executes Run commands, blocking until the process exits.

    The child gets an empty stdin, so a command waiting for input reads EOF
    instead of blocking the run.
    """

    def __init__(self, workspace: Optional[Path] = None, logger: Optional[logging.Logger] = None):
        """
        Initialize run executor.

        Args:
            workspace: Working directory for the process (default: cwd)
            logger: Logger receiving progress messages and captured output
        """
        self.workspace = workspace
        self.logger = logger or logging.getLogger(__name__)

    def execute(self, run: Run) -> RunResult:
        """
        Run ``run.command`` and capture its output.

        Returns:
            RunResult of the successful process

        Raises:
            CommandFailed: non-zero exit status (carries captured stderr)
            CommandIOError: neither the program nor the shell could be launched
        """
        self.logger.info(f"Running command: {run.command}")

        result = self._execute_direct(run.command)
        if result is None:
            self.logger.debug(f"Direct execution unavailable, falling back to shell: {run.command}")
            result = self._execute_shell(run.command)

        if not result.succeeded:
            raise CommandFailed(run.command, result.exit_code, result.stderr)

        if result.stdout:
            self.logger.info(f"Running command result: {truncate_text(result.stdout)}")
        if result.stderr:
            self.logger.debug(f"Command stderr: {truncate_text(result.stderr)}")

        return result

    def _execute_direct(self, command: str) -> Optional[RunResult]:
        """
        Execute the split command line without a shell.

        Returns:
            RunResult, or None when the command cannot be split or launched
        """
        try:
            # Parse command line into argv using shlex for proper quoting/escaping
            argv = shlex.split(command)
        except ValueError as e:
            self.logger.debug(f"Cannot split command line ({e})")
            return None

        if not argv:
            return None

        try:
            completed = subprocess.run(
                argv,
                cwd=self._cwd(),
                stdin=subprocess.DEVNULL,
                capture_output=True,
            )
        except OSError as e:
            self.logger.debug(f"Failed to launch '{argv[0]}': {e}")
            return None

        return RunResult(
            command=command,
            exit_code=completed.returncode,
            stdout=decode_output(completed.stdout),
            stderr=decode_output(completed.stderr),
        )

    def _execute_shell(self, command: str) -> RunResult:
        """Execute the command line through the platform shell."""
        argv = shell_argv(command)
        try:
            completed = subprocess.run(
                argv,
                cwd=self._cwd(),
                stdin=subprocess.DEVNULL,
                capture_output=True,
            )
        except OSError as e:
            raise CommandIOError(f"Failed to launch shell for '{command}': {e}", kind=Run.kind) from e

        return RunResult(
            command=command,
            exit_code=completed.returncode,
            stdout=decode_output(completed.stdout),
            stderr=decode_output(completed.stderr),
            used_shell=True,
        )

    def _cwd(self) -> Optional[str]:
        return str(self.workspace) if self.workspace is not None else None
