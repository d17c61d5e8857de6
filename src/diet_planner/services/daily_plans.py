"""Daily plan nutrition aggregation."""

import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import Protocol

from diet_planner.domain.daily_plans import (
    DailyPlan,
    DailyPlanMenu,
    DailyPlanNutrition,
    MealType,
    PlannedMenuNutrition,
)
from diet_planner.domain.errors import UnknownDailyPlanError, UnknownMenuError
from diet_planner.domain.menus import MenuNutrition
from diet_planner.domain.nutrients import NutritionTotals
from diet_planner.services.menus import MenuService, sum_nutrition

_logger = logging.getLogger(__name__)

MenuLookup = Callable[[str], MenuNutrition | None]


class DailyPlanRepository(Protocol):
    """Read access to daily plans."""

    def get_daily_plan(self, plan_id: str) -> DailyPlan | None:
        """Return a daily plan by id, if present."""


def sum_across_menus(menus: Iterable[MenuNutrition]) -> NutritionTotals:
    """Sum menu totals; menus in a plan are eaten in full."""
    return sum_nutrition(menu.nutrition for menu in menus)


def calculate_daily_plan_nutrition(
    entries: Sequence[DailyPlanMenu], menu_lookup: MenuLookup
) -> DailyPlanNutrition:
    """Sum the totals of every menu referenced by a plan."""
    menus: list[PlannedMenuNutrition] = []
    for entry in entries:
        nutrition = menu_lookup(entry.menu_id)
        if nutrition is None:
            raise UnknownMenuError(f'Menu "{entry.menu_id}" not found')
        menus.append(
            PlannedMenuNutrition(
                menu_id=entry.menu_id,
                meal_type=entry.meal_type,
                nutrition=nutrition,
            )
        )
    return DailyPlanNutrition(
        nutrition=sum_across_menus(menu.nutrition for menu in menus),
        menus=menus,
    )


def group_by_meal_type(
    plan: DailyPlanNutrition,
) -> dict[MealType, list[PlannedMenuNutrition]]:
    """Group a plan's menus by meal, in meal order, for display."""
    groups: dict[MealType, list[PlannedMenuNutrition]] = {}
    for meal_type in MealType:
        matching = [menu for menu in plan.menus if menu.meal_type is meal_type]
        if matching:
            groups[meal_type] = matching
    return groups


@dataclass
class DailyPlanService:
    """Service computing daily plan nutrition from stored plans."""

    menu_service: MenuService
    plans: DailyPlanRepository
    debug: bool = False

    def get_daily_plan(self, plan_id: str) -> DailyPlan:
        """Return a daily plan or raise ``UnknownDailyPlanError``."""
        plan = self.plans.get_daily_plan(plan_id)
        if plan is None:
            _logger.warning("Daily plan %s not found", plan_id)
            raise UnknownDailyPlanError(f'Daily plan "{plan_id}" not found')
        return plan

    def calculate(self, plan_id: str) -> DailyPlanNutrition:
        """Compute totals for a stored daily plan."""
        plan = self.get_daily_plan(plan_id)
        result = self.calculate_menus(plan.menus)
        if self.debug:
            _logger.info(
                "Daily plan nutrition: plan_id=%s menus=%s oxalate_mg=%.2f",
                plan_id,
                len(result.menus),
                result.oxalate_mg,
            )
        return result

    def calculate_menus(self, entries: Sequence[DailyPlanMenu]) -> DailyPlanNutrition:
        """Compute totals for an unsaved list of planned menus."""
        computed: dict[str, MenuNutrition] = {}

        def lookup(menu_id: str) -> MenuNutrition:
            if menu_id not in computed:
                computed[menu_id] = self.menu_service.calculate(menu_id)
            return computed[menu_id]

        return calculate_daily_plan_nutrition(entries, lookup)
