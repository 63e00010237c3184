"""org-pulse: GitHub organization activity metrics."""

__version__ = "0.1.0"
