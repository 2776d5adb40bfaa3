"""Configuration loader: variable substitution plus strict document validation."""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Set, Union
import yaml

from packager.exceptions import (
    ConfigReadError,
    DecodeError,
    InvalidCommandShape,
    ValidationError,
)
from packager.models import (
    COMMAND_TYPES,
    DEFAULT_IGNORE_FILE_NAME,
    Command,
    Configuration,
    Copy,
    DefineItem,
    Replace,
    Run,
)
from packager.variables.substitution import VariableSubstitutor

logger = logging.getLogger(__name__)


class PreservingLoader(yaml.SafeLoader):
    """Custom YAML loader that preserves strings like 'on' instead of converting to bool."""
    pass


# Drop the implicit bool resolvers for 'on'/'off' so they stay plain strings
PreservingLoader.yaml_implicit_resolvers = dict(PreservingLoader.yaml_implicit_resolvers)
for _first in ('o', 'O'):
    if _first in PreservingLoader.yaml_implicit_resolvers:
        PreservingLoader.yaml_implicit_resolvers[_first] = [
            (tag, regexp) for tag, regexp in PreservingLoader.yaml_implicit_resolvers[_first]
            if tag != 'tag:yaml.org,2002:bool'
        ]


class ConfigLoader:
    """
    Loads a packaging configuration.

    With ``use_define`` enabled the raw document text is substituted with the
    resolved ``define_items`` before it is decoded, so ${name} references may
    appear anywhere in the document. With it disabled the text is decoded as-is.
    """

    KNOWN_FIELDS = {'define_items', 'command'}
    DEFINE_FIELDS = {'key', 'value'}

    def __init__(self, use_define: bool = True):
        """Initialize loader."""
        self.use_define = use_define
        self.substitutor = VariableSubstitutor()
        self.errors: List[ValidationError] = []

    def load(self, config_path: Union[str, Path]) -> Configuration:
        """Read and decode the configuration at ``config_path``."""
        path = Path(config_path)
        try:
            text = path.read_text(encoding='utf-8')
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigReadError(str(path), str(e)) from e

        logger.debug(f"Read configuration: {path}")
        return self.loads(text)

    def loads(self, text: str) -> Configuration:
        """Decode configuration text."""
        self.errors = []

        if self.use_define:
            text = self.substitute(text)

        document = self._decode(text)
        define_items = self._parse_define_items(document.get('define_items'))
        commands = self._parse_commands(document)

        if self.errors:
            self._raise_validation_errors()

        return Configuration(define_items=tuple(define_items), command=tuple(commands))

    def substitute(self, text: str) -> str:
        """
        Resolve the document's definitions and substitute them over ``text``.

        Definitions are decoded from a first pass over the raw text and resolved
        in declaration order, so a value stored in the table only has references
        to earlier keys substituted. References in the document text are then
        resolved recursively against the complete table.
        """
        document = self._decode(text)
        define_items = self._parse_define_items(document.get('define_items'))
        if self.errors:
            self._raise_validation_errors()

        table = self.substitutor.build_name_table((item.key, item.value) for item in define_items)
        substituted = self.substitutor.resolve(text, table)

        unresolved = sorted(set(self.substitutor.find_references(substituted)))
        if unresolved:
            logger.warning(f"Unresolved variable references left in configuration: {unresolved}")

        return substituted

    def _decode(self, text: str) -> Dict[str, Any]:
        """Decode YAML text into the top-level mapping."""
        try:
            document = yaml.load(text, Loader=PreservingLoader)
        except yaml.YAMLError as e:
            self._add_error(f"Failed to parse configuration: {e}")
            self._raise_validation_errors()

        if document is None or not isinstance(document, dict):
            self._add_error("Configuration must be a YAML object/dictionary")
            self._raise_validation_errors()

        for key in document.keys():
            if key not in self.KNOWN_FIELDS:
                self._add_error(f"Unknown field '{key}'")

        return document

    def _parse_define_items(self, define_items: Any) -> List[DefineItem]:
        """Validate definitions and convert them to DefineItem values."""
        if define_items is None:
            return []
        if not isinstance(define_items, list):
            self._add_error("'define_items' must be a list", "define_items")
            return []

        items: List[DefineItem] = []
        seen: Set[str] = set()

        for i, item in enumerate(define_items):
            path = f"define_items[{i}]"
            if not isinstance(item, dict):
                self._add_error("definition must be a dictionary", path)
                continue

            unknown = sorted(str(k) for k in item.keys() if k not in self.DEFINE_FIELDS)
            if unknown:
                self._add_error(f"unknown fields {unknown}", path)

            key = item.get('key')
            if not isinstance(key, str) or not key:
                self._add_error("'key' must be a non-empty string", path)
                continue
            if key in seen:
                self._add_error(f"duplicate definition key '{key}'", path)
                continue
            seen.add(key)

            if 'value' not in item:
                self._add_error(f"definition '{key}' missing required 'value' field", path)
                continue
            value = self.substitutor.to_text(item['value'])
            if value is None:
                self._add_error(f"definition '{key}' value must be a scalar", path)
                continue

            items.append(DefineItem(key=key, value=value))

        return items

    def _parse_commands(self, document: Dict[str, Any]) -> List[Command]:
        """Validate command entries and decode each into exactly one variant."""
        if 'command' not in document:
            self._add_error("'command' field is required")
            return []

        entries = document['command']
        if entries is None:
            return []
        if not isinstance(entries, list):
            self._add_error("'command' must be a list", "command")
            return []

        commands: List[Command] = []
        for i, entry in enumerate(entries):
            command = self._parse_command(entry, f"command[{i}]")
            if command is not None:
                commands.append(command)
        return commands

    def _parse_command(self, entry: Any, path: str) -> Optional[Command]:
        """Decode one command entry, recording shape errors."""
        if not isinstance(entry, dict):
            self._add_shape_error("command must be a dictionary", path)
            return None

        kind = entry.get('type')
        if kind is None:
            self._add_shape_error(
                f"missing required 'type' field, expected one of {sorted(COMMAND_TYPES)}", path
            )
            return None
        if not isinstance(kind, str) or kind not in COMMAND_TYPES:
            self._add_shape_error(
                f"unknown command type '{kind}', expected one of {sorted(COMMAND_TYPES)}", path
            )
            return None

        command_cls = COMMAND_TYPES[kind]
        error_count = len(self.errors)

        # Fields belonging to another variant make the entry ambiguous
        for key in entry.keys():
            if key == 'type' or key in command_cls.document_fields:
                continue
            owners = [name for name, cls in COMMAND_TYPES.items() if key in cls.document_fields]
            if owners:
                self._add_shape_error(
                    f"field '{key}' belongs to {owners} and cannot be used with type '{kind}'", path
                )
            else:
                self._add_shape_error(f"unknown field '{key}' for type '{kind}'", path)

        missing = [name for name in command_cls.required if name not in entry]
        if missing:
            self._add_shape_error(f"type '{kind}' missing required fields {missing}", path)
            return None

        if command_cls is Copy:
            command = self._build_copy(entry, path)
        elif command_cls is Replace:
            command = self._build_replace(entry, path)
        else:
            command = self._build_run(entry, path)

        if len(self.errors) > error_count:
            return None
        return command

    def _build_copy(self, entry: Dict[str, Any], path: str) -> Optional[Copy]:
        source = self._string_field(entry, 'source', path)
        destination = self._string_field(entry, 'destination', path)
        ignore_file_name = self._string_field(entry, 'gitignore_path', path, DEFAULT_IGNORE_FILE_NAME)

        use_ignore_rules = entry.get('use_gitignore', True)
        if not isinstance(use_ignore_rules, bool):
            self._add_shape_error("'use_gitignore' must be a boolean", path)
            return None

        if source is None or destination is None or ignore_file_name is None:
            return None
        return Copy(
            source=source,
            destination=destination,
            ignore_file_name=ignore_file_name,
            use_ignore_rules=use_ignore_rules,
        )

    def _build_replace(self, entry: Dict[str, Any], path: str) -> Optional[Replace]:
        source = self._string_field(entry, 'source', path)
        regex = self._string_field(entry, 'regex', path)
        replacement = self._string_field(entry, 'replacement', path, allow_empty=True)

        if source is None or regex is None or replacement is None:
            return None
        return Replace(source=source, regex=regex, replacement=replacement)

    def _build_run(self, entry: Dict[str, Any], path: str) -> Optional[Run]:
        command = self._string_field(entry, 'command', path)
        if command is None:
            return None
        return Run(command=command)

    def _string_field(
        self,
        entry: Dict[str, Any],
        name: str,
        path: str,
        default: Optional[str] = None,
        allow_empty: bool = False
    ) -> Optional[str]:
        """Read a scalar field as text, recording a shape error when invalid."""
        if name not in entry and default is not None:
            return default

        raw = entry.get(name)
        if raw is None:
            if allow_empty:
                return ""
            self._add_shape_error(f"'{name}' must be a string", path)
            return None

        value = None if isinstance(raw, bool) else self.substitutor.to_text(raw)
        if value is None:
            self._add_shape_error(f"'{name}' must be a string", path)
            return None
        if not value and not allow_empty:
            self._add_shape_error(f"'{name}' cannot be empty", path)
            return None
        return value

    def _add_error(self, message: str, path: str = ""):
        """Add validation error."""
        self.errors.append(ValidationError(message, path))

    def _add_shape_error(self, message: str, path: str):
        """Add a command shape error."""
        self.errors.append(ValidationError(message, path, shape=True))

    def _raise_validation_errors(self):
        """Raise the accumulated errors; shape-only problems raise InvalidCommandShape."""
        errors = list(self.errors)
        if all(error.shape for error in errors):
            raise InvalidCommandShape(errors)
        raise DecodeError(errors)


def load(config_path: Union[str, Path], use_define: bool = True) -> Configuration:
    """Load the configuration at ``config_path``."""
    return ConfigLoader(use_define=use_define).load(config_path)


def loads(text: str, use_define: bool = True) -> Configuration:
    """Decode configuration text."""
    return ConfigLoader(use_define=use_define).loads(text)
