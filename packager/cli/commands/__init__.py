"""CLI command handlers."""

from .run import run_config

__all__ = ['run_config']
