"""Retention and revenue analytics for grooming-business dashboards."""

__version__ = "0.1.0"
