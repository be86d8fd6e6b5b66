"""Gmail Router - recipient-based inbox filtering for an owned domain."""

__version__ = "0.1.0"
