"""Report scheduling and multi-format export engine for the field management dashboard."""

__version__ = "1.0.0"
