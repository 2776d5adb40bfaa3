"""
Variable substitution module.
Implements ${name} resolution against the configuration's definitions.
"""

from .substitution import VariableSubstitutor, build_name_table, resolve

__all__ = ['VariableSubstitutor', 'build_name_table', 'resolve']
