"""Errors raised by the meal log."""


class MealDashboardError(Exception):
    """Base error for the meal dashboard."""


class ValidationError(MealDashboardError):
    """A quick add submission was rejected before reaching the store."""


class GatewayError(MealDashboardError):
    """The meal store failed to list, create or delete meals."""


class SessionClosedError(MealDashboardError):
    """An intent was issued against a torn-down session."""
