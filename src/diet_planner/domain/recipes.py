"""Recipe domain models."""

from dataclasses import dataclass, field

from diet_planner.domain.assessment import AssessmentResult
from diet_planner.domain.nutrients import IngredientDetail, NutritionTotals


@dataclass(frozen=True)
class RecipeItem:
    """One ingredient line of a recipe."""

    ingredient_id: str
    amount: float
    unit: str


@dataclass(frozen=True)
class Recipe:
    """A named, ordered list of ingredient lines."""

    recipe_id: str
    name: str
    items: list[RecipeItem]
    density: float | None = None


@dataclass(frozen=True)
class RecipeNutrition:
    """Recipe totals with optional per-ingredient details."""

    nutrition: NutritionTotals
    details: list[IngredientDetail] | None = None
    contributions: dict[str, dict[str, float]] | None = None

    @property
    def totals(self) -> dict[str, float]:
        return self.nutrition.totals

    @property
    def oxalate_mg(self) -> float:
        return self.nutrition.oxalate_mg


@dataclass(frozen=True)
class PreparedRecipe:
    """Recipe totals together with the mass of the whole recipe as prepared."""

    recipe_id: str
    nutrition: NutritionTotals
    total_grams: float
    density: float | None = None


@dataclass(frozen=True)
class RecipeReport:
    """Display view of a recipe's nutrition."""

    recipe_id: str
    name: str
    totals: dict[str, float]
    oxalate_mg: float
    ingredients: list[IngredientDetail]
    assessment: AssessmentResult | None = None


@dataclass(frozen=True)
class NutrientChange:
    """Difference of one nutrient between two recipe versions."""

    absolute: float
    percent: float


@dataclass(frozen=True)
class RecipeVersion:
    """Totals of one side of a recipe comparison."""

    name: str
    totals: dict[str, float]
    oxalate_mg: float
    contributions: dict[str, dict[str, float]] | None = None
    assessment: AssessmentResult | None = None


@dataclass(frozen=True)
class RecipeComparison:
    """Original recipe compared against a modified copy."""

    recipe_id: str
    removed: list[str]
    variations: dict[str, str]
    added: dict[str, str]
    original: RecipeVersion
    modified: RecipeVersion
    changes: dict[str, NutrientChange] = field(default_factory=dict)
