"""Command-line interface for the DepMap HR pipeline."""
