"""Command line interface for lexidrill."""
