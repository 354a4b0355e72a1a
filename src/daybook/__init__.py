"""daybook: a local journal record store with filtering and one-step undo."""

__version__ = "0.1.0"
