"""
Directory traversal with gitignore-style ignore rules.

Ignore files are read at every directory level. Their patterns are relative
to the directory holding the file; deeper files override shallower ones and
within a file the last matching pattern wins (``!`` patterns re-include).
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

import pathspec

logger = logging.getLogger(__name__)


DEFAULT_IGNORE_FILES = (".gitignore", ".ignore")


@dataclass
class IgnoreRules:
    """Patterns from one ignore file, anchored at ``base`` (relative posix path)."""
    base: str
    spec: pathspec.PathSpec

    def decide(self, rel_path: str, is_dir: bool) -> Optional[bool]:
        """
        Decide whether ``rel_path`` is ignored by these rules.

        Returns:
            True if ignored, False if explicitly re-included, None if no pattern matched
        """
        if self.base:
            if not rel_path.startswith(self.base + "/"):
                return None
            rel_path = rel_path[len(self.base) + 1:]
        if is_dir:
            rel_path += "/"

        decision = None
        for pattern in self.spec.patterns:
            if pattern.include is None:
                continue
            if pattern.match_file(rel_path) is not None:
                decision = pattern.include
        return decision


def _error(exc: OSError):
    raise exc


def _hidden(name: str) -> bool:
    return name.startswith(".")


class IgnoreWalker:
    """
    Walks a directory tree yielding regular files.

    When ``use_ignore_rules`` is false every regular file is yielded. When true
    hidden entries (``.git`` included) and the ignore files themselves are
    skipped, and the rules of the default ignore files and of
    ``extra_ignore_files`` apply. Directories listed in ``prune`` are never
    entered.
    """

    def __init__(
        self,
        root: Path,
        use_ignore_rules: bool = True,
        extra_ignore_files: Sequence[str] = (),
        prune: Sequence[Path] = ()
    ):
        self.root = root
        self.use_ignore_rules = use_ignore_rules
        self.ignore_files: List[str] = list(DEFAULT_IGNORE_FILES)
        for name in extra_ignore_files:
            if name and name not in self.ignore_files:
                self.ignore_files.append(name)
        self.prune = {os.path.normcase(os.path.abspath(p)) for p in prune}

    def walk(self) -> Iterator[Tuple[Path, str]]:
        """
        Yield (absolute path, relative posix path) for every regular file kept.

        Raises:
            OSError: on any traversal error
        """
        # Rules in effect per directory, shallowest first
        rules_by_dir: Dict[str, List[IgnoreRules]] = {"": []}

        for dirpath, dirnames, filenames in os.walk(self.root, onerror=_error):
            rel_dir = Path(dirpath).relative_to(self.root).as_posix()
            if rel_dir == ".":
                rel_dir = ""

            rules = rules_by_dir.pop(rel_dir, [])
            if self.use_ignore_rules:
                rules = rules + self._load_rules(Path(dirpath), rel_dir, filenames)

            kept_dirs = []
            for name in sorted(dirnames):
                full = os.path.join(dirpath, name)
                if os.path.normcase(os.path.abspath(full)) in self.prune:
                    logger.debug(f"Skipping destination directory inside source: {full}")
                    continue
                if os.path.islink(full):
                    continue
                rel = f"{rel_dir}/{name}" if rel_dir else name
                if self.use_ignore_rules and (_hidden(name) or self._ignored(rules, rel, True)):
                    logger.debug(f"Ignoring directory: {rel}")
                    continue
                kept_dirs.append(name)
                rules_by_dir[rel] = rules
            dirnames[:] = kept_dirs

            for name in sorted(filenames):
                full_path = Path(dirpath) / name
                if full_path.is_symlink() or not full_path.is_file():
                    continue
                rel = f"{rel_dir}/{name}" if rel_dir else name
                if self.use_ignore_rules and (_hidden(name) or name in self.ignore_files
                                              or self._ignored(rules, rel, False)):
                    logger.debug(f"Ignoring file: {rel}")
                    continue
                yield full_path, rel

    def _load_rules(self, directory: Path, rel_dir: str, filenames: List[str]) -> List[IgnoreRules]:
        """Read the ignore files present in ``directory``."""
        loaded = []
        for name in self.ignore_files:
            if name not in filenames:
                continue
            ignore_path = directory / name
            if not ignore_path.is_file():
                continue
            with open(ignore_path, 'r', encoding='utf-8', errors='replace') as f:
                spec = pathspec.PathSpec.from_lines('gitwildmatch', f)
            logger.debug(f"Loaded {len(spec.patterns)} ignore patterns from {ignore_path}")
            loaded.append(IgnoreRules(base=rel_dir, spec=spec))
        return loaded

    @staticmethod
    def _ignored(rules: List[IgnoreRules], rel_path: str, is_dir: bool) -> bool:
        """Apply rules shallowest to deepest; the last decision wins."""
        ignored = False
        for rule in rules:
            decision = rule.decide(rel_path, is_dir)
            if decision is not None:
                ignored = decision
        return ignored
