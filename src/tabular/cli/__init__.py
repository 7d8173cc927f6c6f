"""Command-line interface for Tabular (``tabular`` console script)."""
