"""
Configuration model types.

Defines the typed configuration a packaging document decodes into: named
definitions and an ordered list of commands (copy, replace, run).
"""

from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, List, Tuple, Union


DEFAULT_IGNORE_FILE_NAME = ".gitignore"


@dataclass(frozen=True)
class DefineItem:
    """A declared name/value pair available for substitution."""
    key: str
    value: str


@dataclass(frozen=True)
class Copy:
    """
    Recursively copy regular files from ``source`` to ``destination``.

    Attributes:
        source: Source directory
        destination: Destination directory (created as needed)
        ignore_file_name: Custom ignore-file name honored at every level
        use_ignore_rules: Whether to apply ignore rules at all
    """
    kind: ClassVar[str] = "copy"
    document_fields: ClassVar[Tuple[str, ...]] = ("source", "destination", "gitignore_path", "use_gitignore")
    required: ClassVar[Tuple[str, ...]] = ("source", "destination")

    source: str
    destination: str
    ignore_file_name: str = DEFAULT_IGNORE_FILE_NAME
    use_ignore_rules: bool = True

    def describe(self) -> str:
        return f"copy {self.source} -> {self.destination}"


@dataclass(frozen=True)
class Replace:
    """
    Regex replacement over every file matched by the ``source`` glob.

    Attributes:
        source: Glob pattern
        regex: Pattern to search for
        replacement: Replacement template (supports group references)
    """
    kind: ClassVar[str] = "replace"
    document_fields: ClassVar[Tuple[str, ...]] = ("source", "regex", "replacement")
    required: ClassVar[Tuple[str, ...]] = ("source", "regex", "replacement")

    source: str
    regex: str
    replacement: str

    def describe(self) -> str:
        return f"replace /{self.regex}/ in {self.source}"


@dataclass(frozen=True)
class Run:
    """A full shell command line."""
    kind: ClassVar[str] = "run"
    document_fields: ClassVar[Tuple[str, ...]] = ("command",)
    required: ClassVar[Tuple[str, ...]] = ("command",)

    command: str

    def describe(self) -> str:
        return f"run {self.command}"


Command = Union[Copy, Replace, Run]

COMMAND_TYPES: Dict[str, Any] = {
    Copy.kind: Copy,
    Replace.kind: Replace,
    Run.kind: Run,
}


@dataclass(frozen=True)
class Configuration:
    """Decoded configuration. ``command`` order is the execution order."""
    define_items: Tuple[DefineItem, ...] = field(default_factory=tuple)
    command: Tuple[Command, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, Any]:
        """Convert back to the document shape."""
        commands: List[Dict[str, Any]] = []
        for command in self.command:
            if isinstance(command, Copy):
                commands.append({
                    "type": command.kind,
                    "source": command.source,
                    "destination": command.destination,
                    "gitignore_path": command.ignore_file_name,
                    "use_gitignore": command.use_ignore_rules,
                })
            elif isinstance(command, Replace):
                commands.append({
                    "type": command.kind,
                    "source": command.source,
                    "regex": command.regex,
                    "replacement": command.replacement,
                })
            else:
                commands.append({"type": command.kind, "command": command.command})

        return {
            "define_items": [{"key": item.key, "value": item.value} for item in self.define_items],
            "command": commands,
        }
