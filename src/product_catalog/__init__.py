"""Product catalog: command/query dispatch with domain and integration events."""

__version__ = "0.1.0"
