"""Command-line interface for atp-explorer."""
