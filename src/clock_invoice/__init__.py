"""Billing reports from outline time-tracking data."""

__version__ = "0.1.0"
