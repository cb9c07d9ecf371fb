"""Command line interface for deep-report."""
