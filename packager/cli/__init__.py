"""Command-line interface for packager."""
