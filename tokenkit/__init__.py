"""Token identity resolution and record enrichment."""

__version__ = "0.1.0"
