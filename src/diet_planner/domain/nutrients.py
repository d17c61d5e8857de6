"""Nutrient profile and totals models."""

from dataclasses import dataclass, field

from diet_planner.domain.measures import Measure

CALORIES = "calories"
OXALATES = "oxalates"

NutrientValue = float | Measure


@dataclass(frozen=True)
class NutrientProfile:
    """Per-serving nutrient table for one ingredient.

    ``calories`` is a bare number; every other nutrient is a ``Measure`` whose
    unit is kept for display only. ``density`` (g/ml) is required when the
    serving or a consumed amount is given in ``ml``.
    """

    ingredient_id: str
    serving: Measure
    nutrients: dict[str, NutrientValue]
    density: float | None = None
    oxalate_per_gram: float = 0.0
    name: str | None = None

    def units(self) -> dict[str, str]:
        """Return the display unit of every measured nutrient."""
        return {
            key: value.unit
            for key, value in self.nutrients.items()
            if isinstance(value, Measure)
        }


@dataclass(frozen=True)
class NutritionTotals:
    """Accumulated nutrient totals with oxalate mass kept apart."""

    totals: dict[str, float] = field(default_factory=dict)
    oxalate_mg: float = 0.0


@dataclass(frozen=True)
class IngredientDetail:
    """Scaled contribution of one ingredient entry."""

    ingredient_id: str
    grams: float
    scaling_factor: float
    nutrition_scaled: dict[str, float]
    oxalate_mg: float
