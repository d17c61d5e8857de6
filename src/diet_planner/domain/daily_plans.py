"""Daily plan domain models."""

from dataclasses import dataclass
from enum import Enum

from diet_planner.domain.menus import MenuNutrition
from diet_planner.domain.nutrients import NutritionTotals


class MealType(Enum):
    """Meal labels used to group menus for display."""

    BREAKFAST = "Breakfast"
    LUNCH = "Lunch"
    DINNER = "Dinner"
    SNACK = "Snack"
    OTHER = "Other"


@dataclass(frozen=True)
class DailyPlanMenu:
    """A menu eaten at a given meal."""

    menu_id: str
    meal_type: MealType = MealType.OTHER


@dataclass(frozen=True)
class DailyPlan:
    """A named, ordered list of menus for one day."""

    plan_id: str
    name: str
    menus: list[DailyPlanMenu]


@dataclass(frozen=True)
class PlannedMenuNutrition:
    """A menu's nutrition as it appears in a daily plan."""

    menu_id: str
    meal_type: MealType
    nutrition: MenuNutrition


@dataclass(frozen=True)
class DailyPlanNutrition:
    """Daily totals with the per-menu breakdown."""

    nutrition: NutritionTotals
    menus: list[PlannedMenuNutrition]

    @property
    def totals(self) -> dict[str, float]:
        return self.nutrition.totals

    @property
    def oxalate_mg(self) -> float:
        return self.nutrition.oxalate_mg
