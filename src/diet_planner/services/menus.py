"""Menu nutrition aggregation."""

import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import Protocol

from diet_planner.domain.errors import (
    UnknownIngredientError,
    UnknownMenuError,
    UnknownRecipeError,
    ValidationError,
)
from diet_planner.domain.measures import Measure
from diet_planner.domain.menus import (
    Menu,
    MenuNutrition,
    MenuRecipe,
    MenuRecipeNutrition,
)
from diet_planner.domain.nutrients import NutritionTotals
from diet_planner.domain.recipes import PreparedRecipe, Recipe, RecipeItem
from diet_planner.services.measures import to_grams
from diet_planner.services.recipes import (
    ProfileLookup,
    RecipeService,
    calculate_recipe_nutrition,
)

_logger = logging.getLogger(__name__)

PreparedRecipeLookup = Callable[[str], PreparedRecipe | None]


class MenuRepository(Protocol):
    """Read access to menus."""

    def get_menu(self, menu_id: str) -> Menu | None:
        """Return a menu by id, if present."""


def recipe_total_grams(items: Iterable[RecipeItem], lookup: ProfileLookup) -> float:
    """Return the mass of a recipe as prepared, summed over its own items."""
    total = 0.0
    for item in items:
        if item.amount == 0:
            continue
        profile = lookup(item.ingredient_id)
        if profile is None:
            raise UnknownIngredientError(
                f'Ingredient "{item.ingredient_id}" not found'
            )
        total += to_grams(Measure(item.amount, item.unit), profile.density)
    return total


def prepare_recipe(recipe: Recipe, lookup: ProfileLookup) -> PreparedRecipe:
    """Compute a recipe's totals and total mass for use in menus.

    A serving given in ``ml`` is converted with the recipe's own density when
    it declares one, else with the density of its first ingredient.
    """
    nutrition = calculate_recipe_nutrition(recipe.items, lookup).nutrition
    density = recipe.density
    if density is None and recipe.items:
        first = lookup(recipe.items[0].ingredient_id)
        density = first.density if first is not None else None
    return PreparedRecipe(
        recipe_id=recipe.recipe_id,
        nutrition=nutrition,
        total_grams=recipe_total_grams(recipe.items, lookup),
        density=density,
    )


def menu_scaling_factor(prepared: PreparedRecipe, serving: MenuRecipe) -> float:
    """Return the served fraction (or multiple) of the whole recipe."""
    if prepared.total_grams <= 0:
        raise ValidationError(
            f'Recipe "{prepared.recipe_id}" has no mass to serve from'
        )
    serving_grams = to_grams(Measure(serving.amount, serving.unit), prepared.density)
    return serving_grams / prepared.total_grams


def scale_recipe_into_menu(
    nutrition: NutritionTotals, scaling_factor: float
) -> NutritionTotals:
    """Apply the menu serving scale on top of the recipe totals."""
    return NutritionTotals(
        totals={
            key: value * scaling_factor for key, value in nutrition.totals.items()
        },
        oxalate_mg=nutrition.oxalate_mg * scaling_factor,
    )


def sum_nutrition(nutritions: Iterable[NutritionTotals]) -> NutritionTotals:
    """Sum totals in the given order; missing keys count as zero."""
    totals: dict[str, float] = {}
    oxalate_mg = 0.0
    for nutrition in nutritions:
        for key, value in nutrition.totals.items():
            if value is None:
                continue
            totals[key] = totals.get(key, 0.0) + value
        oxalate_mg += nutrition.oxalate_mg
    return NutritionTotals(totals=totals, oxalate_mg=oxalate_mg)


def calculate_menu_nutrition(
    servings: Sequence[MenuRecipe], recipe_lookup: PreparedRecipeLookup
) -> MenuNutrition:
    """Scale each served recipe and sum the results into menu totals."""
    recipes: list[MenuRecipeNutrition] = []
    for serving in servings:
        prepared = recipe_lookup(serving.recipe_id)
        if prepared is None:
            raise UnknownRecipeError(f'Recipe "{serving.recipe_id}" not found')
        scaling_factor = menu_scaling_factor(prepared, serving)
        recipes.append(
            MenuRecipeNutrition(
                recipe_id=serving.recipe_id,
                serving_grams=to_grams(
                    Measure(serving.amount, serving.unit), prepared.density
                ),
                recipe_grams=prepared.total_grams,
                scaling_factor=scaling_factor,
                nutrition=scale_recipe_into_menu(prepared.nutrition, scaling_factor),
            )
        )
    return MenuNutrition(
        nutrition=sum_nutrition(recipe.nutrition for recipe in recipes),
        recipes=recipes,
    )


@dataclass
class MenuService:
    """Service computing menu nutrition from stored menus."""

    recipe_service: RecipeService
    menus: MenuRepository
    debug: bool = False

    def get_menu(self, menu_id: str) -> Menu:
        """Return a menu or raise ``UnknownMenuError``."""
        menu = self.menus.get_menu(menu_id)
        if menu is None:
            _logger.warning("Menu %s not found", menu_id)
            raise UnknownMenuError(f'Menu "{menu_id}" not found')
        return menu

    def prepare_recipe(self, recipe_id: str) -> PreparedRecipe:
        """Return a stored recipe's totals and prepared mass."""
        recipe = self.recipe_service.get_recipe(recipe_id)
        return prepare_recipe(recipe, self.recipe_service.ingredients.get_profile)

    def calculate(self, menu_id: str) -> MenuNutrition:
        """Compute totals for a stored menu."""
        menu = self.get_menu(menu_id)
        result = self.calculate_servings(menu.recipes)
        if self.debug:
            _logger.info(
                "Menu nutrition: menu_id=%s recipes=%s oxalate_mg=%.2f",
                menu_id,
                len(result.recipes),
                result.oxalate_mg,
            )
        return result

    def calculate_servings(self, servings: Sequence[MenuRecipe]) -> MenuNutrition:
        """Compute totals for an unsaved list of recipe servings."""
        prepared: dict[str, PreparedRecipe] = {}

        def lookup(recipe_id: str) -> PreparedRecipe:
            if recipe_id not in prepared:
                prepared[recipe_id] = self.prepare_recipe(recipe_id)
            return prepared[recipe_id]

        return calculate_menu_nutrition(servings, lookup)
