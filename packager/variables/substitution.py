"""
Variable substitution implementation.
Resolves ${name} references against a flat table of definitions.
"""

import re
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Tuple


class VariableSubstitutor:
    """
    Handles ${name} substitution in text.

    Values in the table may themselves contain references; they are resolved
    recursively at arbitrary depth. A reference to an unknown name, or to a
    name already being resolved further up the call stack (a cycle), stops
    substitution and leaves the remaining text verbatim.
    """

    # Pattern to match ${identifier}, identifier = one or more word characters
    VAR_PATTERN = re.compile(r'\$\{(\w+)\}')

    def resolve(self, text: str, table: Dict[str, str]) -> str:
        """
        Substitute every resolvable reference in ``text``.

        Args:
            text: String containing ${name} references
            table: Name -> value table

        Returns:
            Text with references replaced by their resolved values
        """
        result, _ = self._resolve(text, table, frozenset())
        return result

    def _resolve(
        self,
        text: str,
        table: Dict[str, str],
        resolving: FrozenSet[str]
    ) -> Tuple[str, bool]:
        """
        Resolve ``text`` while ``resolving`` holds the names on the call stack.

        Returns:
            Tuple of (resolved text, whether substitution ran to completion)
        """
        position = 0
        while True:
            match = self.VAR_PATTERN.search(text, position)
            if match is None:
                return text, True

            name = match.group(1)
            if name not in table or name in resolving:
                return text, False

            value, complete = self._resolve(table[name], table, resolving | {name})
            text = text[:match.start()] + value + text[match.end():]

            if not complete:
                # The inserted value still carries an unresolvable reference
                return text, False

            # Continue from the same position: the value is fully resolved,
            # but joining it with the following text may form a new reference.
            position = match.start()

    def build_name_table(self, items: Iterable[Tuple[str, str]]) -> Dict[str, str]:
        """
        Build the name table from (key, value) pairs in declaration order.

        Each value is resolved against the definitions declared before it, so
        a definition may only reference earlier keys. Later references stay
        literal in the resolved value.
        """
        table: Dict[str, str] = {}
        for key, value in items:
            table[key] = self.resolve(value, table)
        return table

    def find_references(self, text: str) -> List[str]:
        """Return the names referenced in ``text``, in order of appearance."""
        return [match.group(1) for match in self.VAR_PATTERN.finditer(text)]

    @staticmethod
    def to_text(value: Any) -> Optional[str]:
        """
        Convert a scalar definition value to its substitution text.

        Returns:
            String form of the value, or None for non-scalar values
        """
        if isinstance(value, bool):
            return 'true' if value else 'false'
        elif isinstance(value, (int, float)):
            return str(value)
        elif isinstance(value, str):
            return value
        elif value is None:
            return ''
        return None


_default_substitutor = VariableSubstitutor()


def resolve(text: str, table: Dict[str, str]) -> str:
    """Resolve ${name} references in ``text`` against ``table``."""
    return _default_substitutor.resolve(text, table)


def build_name_table(items: Iterable[Tuple[str, str]]) -> Dict[str, str]:
    """Build a fully resolved name table from (key, value) pairs."""
    return _default_substitutor.build_name_table(items)
