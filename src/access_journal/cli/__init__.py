"""Command-line interface for the access journal."""
