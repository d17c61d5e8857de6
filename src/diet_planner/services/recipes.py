"""Recipe nutrition calculation."""

import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import Protocol

from diet_planner.domain.assessment import AssessmentResult, AssessmentType
from diet_planner.domain.errors import (
    UnknownIngredientError,
    UnknownRecipeError,
    ValidationError,
)
from diet_planner.domain.measures import Measure
from diet_planner.domain.nutrients import (
    OXALATES,
    IngredientDetail,
    NutrientProfile,
    NutritionTotals,
)
from diet_planner.domain.recipes import (
    NutrientChange,
    Recipe,
    RecipeComparison,
    RecipeItem,
    RecipeNutrition,
    RecipeReport,
    RecipeVersion,
)
from diet_planner.services.assessment import DietaryAssessmentService
from diet_planner.services.measures import parse_measure, to_grams

SUMMARY_FIELDS = (
    "calories",
    "sodium",
    "cholesterol",
    "protein",
    "calcium",
    "phosphorus",
    "potassium",
)

_logger = logging.getLogger(__name__)

ProfileLookup = Callable[[str], NutrientProfile | None]


class IngredientRepository(Protocol):
    """Read access to ingredient nutrient profiles."""

    def get_profile(self, ingredient_id: str) -> NutrientProfile | None:
        """Return the nutrient profile for an ingredient, if present."""


class RecipeRepository(Protocol):
    """Read access to recipes."""

    def get_recipe(self, recipe_id: str) -> Recipe | None:
        """Return a recipe by id, if present."""


def scale_ingredient(profile: NutrientProfile, measure: Measure) -> IngredientDetail:
    """Scale an ingredient's per-serving profile to the consumed measure."""
    grams_per_serving = to_grams(profile.serving, profile.density)
    if grams_per_serving <= 0:
        raise ValidationError(
            f'Ingredient "{profile.ingredient_id}" has a non-positive serving'
            f' "{profile.serving}"'
        )
    consumed_grams = to_grams(measure, profile.density)
    scaling_factor = consumed_grams / grams_per_serving

    scaled: dict[str, float] = {}
    for key, value in profile.nutrients.items():
        if isinstance(value, Measure):
            scaled[key] = value.amount * scaling_factor
        elif value is not None:
            scaled[key] = float(value) * scaling_factor

    oxalate_mg = profile.oxalate_per_gram * consumed_grams
    scaled[OXALATES] = oxalate_mg
    return IngredientDetail(
        ingredient_id=profile.ingredient_id,
        grams=consumed_grams,
        scaling_factor=scaling_factor,
        nutrition_scaled=scaled,
        oxalate_mg=oxalate_mg,
    )


def calculate_recipe_nutrition(
    items: Iterable[RecipeItem],
    lookup: ProfileLookup,
    *,
    include_details: bool = False,
    track_contributions: Sequence[str] = (),
) -> RecipeNutrition:
    """Sum scaled ingredient contributions into recipe totals.

    Entries with a zero amount are skipped. Unknown ingredients raise
    ``UnknownIngredientError``. Oxalate mass is accumulated apart from the
    nutrient totals; it only shows up as ``oxalates`` in detail rows and
    contributions.
    """
    totals: dict[str, float] = {}
    oxalate_mg = 0.0
    details: list[IngredientDetail] = []
    contributions: dict[str, dict[str, float]] = {
        nutrient: {} for nutrient in track_contributions
    }

    for item in items:
        if item.amount == 0:
            continue
        profile = lookup(item.ingredient_id)
        if profile is None:
            raise UnknownIngredientError(
                f'Ingredient "{item.ingredient_id}" not found'
            )
        detail = scale_ingredient(profile, Measure(item.amount, item.unit))

        for key, value in detail.nutrition_scaled.items():
            if key == OXALATES:
                continue
            totals[key] = totals.get(key, 0.0) + value
        oxalate_mg += detail.oxalate_mg

        if include_details:
            details.append(detail)
        for nutrient in track_contributions:
            if nutrient in detail.nutrition_scaled:
                tracked = contributions[nutrient]
                tracked[item.ingredient_id] = (
                    tracked.get(item.ingredient_id, 0.0)
                    + detail.nutrition_scaled[nutrient]
                )

    return RecipeNutrition(
        nutrition=NutritionTotals(totals=totals, oxalate_mg=oxalate_mg),
        details=details if include_details else None,
        contributions=contributions if track_contributions else None,
    )


@dataclass
class RecipeService:
    """Service computing recipe nutrition from stored recipes.

    Reports and comparisons carry a recipe assessment when ``assessment`` is
    set.
    """

    ingredients: IngredientRepository
    recipes: RecipeRepository
    debug: bool = False
    assessment: DietaryAssessmentService | None = None

    def get_recipe(self, recipe_id: str) -> Recipe:
        """Return a recipe or raise ``UnknownRecipeError``."""
        recipe = self.recipes.get_recipe(recipe_id)
        if recipe is None:
            _logger.warning("Recipe %s not found", recipe_id)
            raise UnknownRecipeError(f'Recipe "{recipe_id}" not found')
        return recipe

    def calculate(
        self,
        recipe_id: str,
        include_details: bool = False,
        track_contributions: Sequence[str] = (),
    ) -> RecipeNutrition:
        """Compute totals for a stored recipe."""
        recipe = self.get_recipe(recipe_id)
        result = self.calculate_items(
            recipe.items,
            include_details=include_details,
            track_contributions=track_contributions,
        )
        if self.debug:
            _logger.info(
                "Recipe nutrition: recipe_id=%s nutrients=%s oxalate_mg=%.2f",
                recipe_id,
                len(result.totals),
                result.oxalate_mg,
            )
        return result

    def calculate_items(
        self,
        items: Iterable[RecipeItem],
        include_details: bool = False,
        track_contributions: Sequence[str] = (),
    ) -> RecipeNutrition:
        """Compute totals for an unsaved list of ingredient lines."""
        return calculate_recipe_nutrition(
            items,
            self.ingredients.get_profile,
            include_details=include_details,
            track_contributions=track_contributions,
        )

    def get_report(self, recipe_id: str, summary: bool = False) -> RecipeReport:
        """Return recipe totals and per-ingredient details for display."""
        recipe = self.get_recipe(recipe_id)
        result = self.calculate_items(recipe.items, include_details=True)
        fields = SUMMARY_FIELDS if summary else tuple(result.totals)
        return RecipeReport(
            recipe_id=recipe.recipe_id,
            name=recipe.name,
            totals={
                field: result.totals[field]
                for field in fields
                if field in result.totals
            },
            oxalate_mg=result.oxalate_mg,
            ingredients=result.details or [],
            assessment=self.assess(result.nutrition),
        )

    def assess(self, nutrition: NutritionTotals) -> AssessmentResult | None:
        """Assess recipe totals, or return None without an assessment service."""
        if self.assessment is None:
            return None
        return self.assessment.assess(nutrition, AssessmentType.RECIPE)

    def compare(  # noqa: PLR0913
        self,
        recipe_id: str,
        variations: dict[str, str] | None = None,
        added: dict[str, str] | None = None,
        removed: Sequence[str] = (),
        summary: bool = False,
        explained: Sequence[str] = (),
    ) -> RecipeComparison:
        """Compare a recipe with a copy that has ingredients varied, added or removed.

        ``variations`` and ``added`` map ingredient ids to ``"<amount> <unit>"``.
        """
        recipe = self.get_recipe(recipe_id)
        variations = variations or {}
        added = added or {}

        for ingredient_id in [*variations, *added]:
            if self.ingredients.get_profile(ingredient_id) is None:
                raise UnknownIngredientError(
                    f'Ingredient "{ingredient_id}" not found'
                )
        original_ids = [item.ingredient_id for item in recipe.items]
        for ingredient_id in variations:
            if ingredient_id not in original_ids:
                raise ValidationError(
                    f'Variation ingredient "{ingredient_id}" not in original recipe'
                )
        for ingredient_id in removed:
            if ingredient_id not in original_ids:
                raise ValidationError(
                    f'Cannot remove "{ingredient_id}": not in original recipe'
                )

        modified_items = _modified_items(recipe.items, variations, added, removed)
        original = self.calculate_items(recipe.items, track_contributions=explained)
        modified = self.calculate_items(modified_items, track_contributions=explained)

        if summary:
            fields = list(SUMMARY_FIELDS)
        else:
            fields = list(dict.fromkeys([*original.totals, *modified.totals]))

        changes: dict[str, NutrientChange] = {}
        original_totals: dict[str, float] = {}
        modified_totals: dict[str, float] = {}
        for field in fields:
            before = original.totals.get(field, 0.0)
            after = modified.totals.get(field, 0.0)
            original_totals[field] = before
            modified_totals[field] = after
            changes[field] = NutrientChange(
                absolute=after - before,
                percent=(after - before) / before * 100 if before != 0 else 0.0,
            )

        return RecipeComparison(
            recipe_id=recipe.recipe_id,
            removed=list(removed),
            variations=dict(variations),
            added=dict(added),
            original=RecipeVersion(
                name=recipe.name,
                totals=original_totals,
                oxalate_mg=original.oxalate_mg,
                contributions=original.contributions,
                assessment=self.assess(original.nutrition),
            ),
            modified=RecipeVersion(
                name=f"{recipe.name} (Modified)",
                totals=modified_totals,
                oxalate_mg=modified.oxalate_mg,
                contributions=modified.contributions,
                assessment=self.assess(modified.nutrition),
            ),
            changes=changes,
        )


def _modified_items(
    items: list[RecipeItem],
    variations: dict[str, str],
    added: dict[str, str],
    removed: Sequence[str],
) -> list[RecipeItem]:
    modified: list[RecipeItem] = []
    for item in items:
        if item.ingredient_id in removed:
            continue
        if item.ingredient_id in variations:
            measure = parse_measure(variations[item.ingredient_id])
            modified.append(
                RecipeItem(item.ingredient_id, measure.amount, measure.unit)
            )
        else:
            modified.append(item)

    present = {item.ingredient_id for item in modified}
    for ingredient_id, text in added.items():
        if ingredient_id in present:
            raise ValidationError(
                f'Added ingredient "{ingredient_id}" already exists in recipe'
            )
        measure = parse_measure(text)
        modified.append(RecipeItem(ingredient_id, measure.amount, measure.unit))
    return modified
