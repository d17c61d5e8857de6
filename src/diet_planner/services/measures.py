"""Measure parsing and conversion to grams."""

import math

from diet_planner.domain.errors import (
    MissingDensityError,
    ParseError,
    UnsupportedUnitError,
)
from diet_planner.domain.measures import MassUnit, Measure

_MEASURE_TOKENS = 2
_UNITS_PER_GRAM = {
    MassUnit.GRAM.value: 1,
    MassUnit.MILLIGRAM.value: 1000,
    MassUnit.MICROGRAM.value: 1_000_000,
}


def parse_measure(text: str) -> Measure:
    """Parse ``"<number> <unit>"`` into a Measure."""
    if not isinstance(text, str):
        raise ParseError(f"Measure must be a string, got {text!r}")
    tokens = text.split()
    if len(tokens) != _MEASURE_TOKENS:
        raise ParseError(f'Measure "{text}" must be "<amount> <unit>"')
    raw_amount, unit = tokens
    try:
        amount = float(raw_amount)
    except ValueError as exc:
        raise ParseError(f'Measure "{text}" amount is not a number') from exc
    if not math.isfinite(amount):
        raise ParseError(f'Measure "{text}" amount is not finite')
    return Measure(amount=amount, unit=unit)


def to_grams(measure: Measure, density: float | None = None) -> float:
    """Convert a measure to grams; ``ml`` needs a density in g/ml."""
    if measure.unit == MassUnit.MILLILITER.value:
        if not density or density < 0:
            raise MissingDensityError(
                f'Liquid density required to convert "{measure}" to grams'
            )
        return measure.amount * density
    divisor = _UNITS_PER_GRAM.get(measure.unit)
    if divisor is None:
        raise UnsupportedUnitError(f'Measure "{measure}" not supported')
    return measure.amount / divisor


def measure_to_grams(text: str, density: float | None = None) -> float:
    """Parse a measure string and convert it to grams."""
    return to_grams(parse_measure(text), density)
