"""
Copy executor.
Recursively copies regular-file payloads from a source tree to a destination,
optionally honoring gitignore-style rules.
"""

import logging
import shutil
from pathlib import Path
from typing import Optional

from ..exceptions import CommandIOError, SourceNotFound
from ..models import Copy
from .ignore import IgnoreWalker


class CopyExecutor:
    """Executes Copy commands."""

    def __init__(self, workspace: Optional[Path] = None, logger: Optional[logging.Logger] = None):
        """
        Initialize copy executor.

        Args:
            workspace: Directory relative paths are resolved against (default: cwd)
            logger: Logger receiving progress messages
        """
        self.workspace = workspace
        self.logger = logger or logging.getLogger(__name__)

    def _resolve(self, path: str) -> Path:
        resolved = Path(path)
        if self.workspace is not None and not resolved.is_absolute():
            resolved = Path(self.workspace) / resolved
        return resolved

    def execute(self, copy: Copy) -> int:
        """
        Copy every kept regular file under ``copy.source`` to ``copy.destination``.

        Returns:
            Number of files copied

        Raises:
            SourceNotFound: source is missing or not a directory
            CommandIOError: traversal or copy failure; files copied so far stay
        """
        source = self._resolve(copy.source)
        destination = self._resolve(copy.destination)

        self.logger.info(f"Copying files from {copy.source} to {copy.destination}")
        if copy.use_ignore_rules:
            self.logger.debug(f"Using ignore rules with custom ignore file '{copy.ignore_file_name}'")
        else:
            self.logger.debug("Ignore rules disabled, copying every file")

        if not source.is_dir():
            raise SourceNotFound(copy.source)

        walker = IgnoreWalker(
            source,
            use_ignore_rules=copy.use_ignore_rules,
            extra_ignore_files=[copy.ignore_file_name],
            prune=[destination],
        )

        copied = 0
        try:
            for file_path, rel_path in walker.walk():
                target = destination.joinpath(*rel_path.split("/"))
                target.parent.mkdir(parents=True, exist_ok=True)
                # Payload only: mode bits and timestamps are not carried over
                shutil.copyfile(file_path, target)
                copied += 1
                self.logger.debug(f"Copied {rel_path}")
        except OSError as e:
            raise CommandIOError(f"Copy from '{copy.source}' failed: {e}", kind=copy.kind) from e

        self.logger.info(f"Copied {copied} file(s) to {copy.destination}")
        return copied
