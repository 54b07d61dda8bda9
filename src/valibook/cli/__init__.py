"""Command-line interface for Valibook."""
