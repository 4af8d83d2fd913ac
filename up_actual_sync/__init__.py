"""Sync settled Up Bank transactions into Actual Budget."""

__version__ = "1.0.0"
