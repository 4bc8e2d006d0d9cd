"""Event ticketing backend with an overbooking-safe seat reservation engine."""

__version__ = "1.0.0"
