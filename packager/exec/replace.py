"""
Replace executor.
Applies a regex replacement to every regular file matched by a glob pattern.
"""

import glob
import logging
import os
import re
from pathlib import Path
from typing import List, Optional

from ..exceptions import CommandIOError, GlobExpansionError, InvalidPattern, NoFilesMatched
from ..models import Replace


# $$, ${name} or $name, where a name is a run of letters, digits and underscores
TEMPLATE_REFERENCE = re.compile(r'\$(?:(\$)|\{([_0-9A-Za-z]+)\}|([_0-9A-Za-z]+))')


def translate_replacement(template: str) -> str:
    """
    Translate a ``$``-style replacement template to Python ``re`` syntax.

    ``$1``, ``${1}``, ``$name`` and ``${name}`` become group references, ``$$``
    is a literal dollar sign and backslashes are kept literally. A ``$`` not
    followed by a group name stays as written.
    """
    parts: List[str] = []
    position = 0
    for match in TEMPLATE_REFERENCE.finditer(template):
        parts.append(template[position:match.start()].replace('\\', '\\\\'))
        if match.group(1):
            parts.append('$')
        else:
            parts.append(f"\\g<{match.group(2) or match.group(3)}>")
        position = match.end()
    parts.append(template[position:].replace('\\', '\\\\'))
    return ''.join(parts)


class ReplaceExecutor:
    """Executes Replace commands."""

    def __init__(self, workspace: Optional[Path] = None, logger: Optional[logging.Logger] = None):
        """
        Initialize replace executor.

        Args:
            workspace: Directory relative globs are resolved against (default: cwd)
            logger: Logger receiving progress messages
        """
        self.workspace = workspace
        self.logger = logger or logging.getLogger(__name__)

    def expand(self, pattern: str) -> List[str]:
        """
        Expand ``pattern`` to the sorted list of matching paths (``**`` recursive).

        Raises:
            GlobExpansionError: the pattern could not be expanded
        """
        full_pattern = pattern
        if self.workspace is not None and not os.path.isabs(pattern):
            full_pattern = os.path.join(glob.escape(str(self.workspace)), pattern)

        try:
            return sorted(glob.glob(full_pattern, recursive=True))
        except (OSError, re.error, ValueError) as e:
            raise GlobExpansionError(pattern, str(e)) from e

    def execute(self, replace: Replace) -> int:
        """
        Rewrite every matched file with all non-overlapping matches replaced.

        Returns:
            Number of files rewritten

        Raises:
            InvalidPattern: regex or replacement template is invalid
            NoFilesMatched: the glob matched nothing
            CommandIOError: a file could not be read or written; earlier files keep their new contents
        """
        self.logger.info(f"Replacing {replace.regex} with {replace.replacement} in {replace.source}")

        try:
            regex = re.compile(replace.regex)
        except re.error as e:
            raise InvalidPattern(replace.regex, str(e)) from e

        template = translate_replacement(replace.replacement)

        paths = self.expand(replace.source)
        if not paths:
            raise NoFilesMatched(replace.source)

        rewritten = 0
        for path in paths:
            if not os.path.isfile(path):
                self.logger.debug(f"Skipping non-file match: {path}")
                continue

            try:
                with open(path, 'r', encoding='utf-8', newline='') as f:
                    content = f.read()
            except (OSError, UnicodeDecodeError) as e:
                raise CommandIOError(f"Failed to read '{path}': {e}", kind=replace.kind) from e

            try:
                replaced, count = regex.subn(template, content)
            except (re.error, IndexError) as e:
                raise InvalidPattern(replace.replacement, f"invalid replacement template: {e}") from e

            try:
                with open(path, 'w', encoding='utf-8', newline='') as f:
                    f.write(replaced)
            except OSError as e:
                raise CommandIOError(f"Failed to write '{path}': {e}", kind=replace.kind) from e

            rewritten += 1
            self.logger.debug(f"Replaced {count} match(es) in {path}")

        self.logger.info(f"Rewrote {rewritten} file(s) matching {replace.source}")
        return rewritten
