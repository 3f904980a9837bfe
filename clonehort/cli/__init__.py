"""Command line interface for clonehort."""
