"""Command-line interface for photo duplicate checker."""
