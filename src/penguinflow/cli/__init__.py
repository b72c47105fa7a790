"""Command-line interface for penguinflow."""
