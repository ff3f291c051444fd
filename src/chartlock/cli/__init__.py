"""Command-line interface for chartlock."""
