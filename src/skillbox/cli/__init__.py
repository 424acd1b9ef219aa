"""Command-line interface for skillbox."""
