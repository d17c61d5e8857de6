"""Measure domain models."""

from dataclasses import dataclass
from enum import Enum


class MassUnit(Enum):
    """Units that can be converted to grams."""

    GRAM = "g"
    MILLIGRAM = "mg"
    MICROGRAM = "mcg"
    MILLILITER = "ml"


@dataclass(frozen=True)
class Measure:
    """An amount with its unit token, e.g. ``300 mg``."""

    amount: float
    unit: str

    def __str__(self) -> str:
        return f"{self.amount:g} {self.unit}"
