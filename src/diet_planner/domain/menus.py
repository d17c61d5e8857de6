"""Menu domain models."""

from dataclasses import dataclass

from diet_planner.domain.nutrients import NutritionTotals


@dataclass(frozen=True)
class MenuRecipe:
    """Amount of a recipe served within a menu."""

    recipe_id: str
    amount: float
    unit: str


@dataclass(frozen=True)
class Menu:
    """A named, ordered list of recipe servings."""

    menu_id: str
    name: str
    recipes: list[MenuRecipe]


@dataclass(frozen=True)
class MenuRecipeNutrition:
    """A recipe's contribution to a menu after serving scaling."""

    recipe_id: str
    serving_grams: float
    recipe_grams: float
    scaling_factor: float
    nutrition: NutritionTotals


@dataclass(frozen=True)
class MenuNutrition:
    """Menu totals with the per-recipe breakdown."""

    nutrition: NutritionTotals
    recipes: list[MenuRecipeNutrition]

    @property
    def totals(self) -> dict[str, float]:
        return self.nutrition.totals

    @property
    def oxalate_mg(self) -> float:
        return self.nutrition.oxalate_mg
