"""Command-line renderer for reactive pages."""

__version__ = "0.1.0"
