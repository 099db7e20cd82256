"""Domain exceptions for the analytics core."""


class AnalyticsError(ValueError):
    """Base exception for all errors raised by the analytics core."""
    pass


class InvalidInputError(AnalyticsError):
    """Malformed argument (negative count, non-positive day window)."""
    pass


class InvalidRangeError(AnalyticsError):
    """Date range whose start is after its end."""
    pass


class InvalidGoalError(AnalyticsError):
    """Revenue goal amount that is zero or negative."""
    pass
