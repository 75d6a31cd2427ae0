"""seabattle: a turn-based grid battle engine."""

__version__ = "0.1.0"
