"""daybook — local journal store with backup export and reconciling import."""

__version__ = "0.1.0"
