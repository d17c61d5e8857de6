"""Errors raised by the nutrition engine."""


class DietPlannerError(Exception):
    """Base class for diet planner errors."""


class ParseError(DietPlannerError, ValueError):
    """Raised when a measure string is malformed."""


class UnsupportedUnitError(DietPlannerError, ValueError):
    """Raised when a unit cannot be converted to grams."""


class MissingDensityError(DietPlannerError, ValueError):
    """Raised when a volume measure has no density."""


class ValidationError(DietPlannerError, ValueError):
    """Raised when calculation input is malformed."""


class NotFoundError(DietPlannerError, LookupError):
    """Raised when a referenced entity does not exist."""


class UnknownIngredientError(NotFoundError):
    """Raised when an ingredient id has no nutrient profile."""


class UnknownRecipeError(NotFoundError):
    """Raised when a recipe id is unknown."""


class UnknownMenuError(NotFoundError):
    """Raised when a menu id is unknown."""


class UnknownDailyPlanError(NotFoundError):
    """Raised when a daily plan id is unknown."""
