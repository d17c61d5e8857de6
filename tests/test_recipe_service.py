"""Tests for recipe nutrition."""

import pytest

from diet_planner.domain.assessment import OxalateLevel
from diet_planner.domain.errors import (
    MissingDensityError,
    UnknownIngredientError,
    UnknownRecipeError,
    ValidationError,
)
from diet_planner.domain.measures import Measure
from diet_planner.domain.nutrients import OXALATES, NutrientProfile
from diet_planner.domain.recipes import RecipeItem
from diet_planner.services.assessment import DietaryAssessmentService
from diet_planner.services.recipes import (
    SUMMARY_FIELDS,
    RecipeService,
    calculate_recipe_nutrition,
    scale_ingredient,
)
from tests.conftest import (
    InMemoryIngredientRepository,
    InMemoryRecipeRepository,
    build_profiles,
    build_recipes,
)


def test_single_ingredient_recipe() -> None:
    profiles = build_profiles()

    result = calculate_recipe_nutrition(
        [RecipeItem("oats", 100, "g")], profiles.get
    )

    assert result.totals == pytest.approx(
        {"calories": 200, "sodium": 300, "dietary_fiber": 5}
    )
    assert result.oxalate_mg == pytest.approx(10.0)
    assert OXALATES not in result.totals
    assert result.details is None
    assert result.contributions is None


def test_recipe_sums_ingredients(recipe_service: RecipeService) -> None:
    result = recipe_service.calculate("porridge")

    assert result.totals == pytest.approx(
        {
            "calories": 300,
            "sodium": 300,
            "dietary_fiber": 5,
            "protein": 8,
            "calcium": 300,
        }
    )
    assert result.oxalate_mg == pytest.approx(10.0)


def test_recipe_skips_zero_amounts(
    recipe_service: RecipeService,
    ingredient_repository: InMemoryIngredientRepository,
) -> None:
    result = recipe_service.calculate("salad")

    assert "oats" not in ingredient_repository.lookups
    assert "sodium" not in result.totals
    assert result.totals["potassium"] == pytest.approx(560)
    assert result.oxalate_mg == pytest.approx(400)


def test_recipe_scales_linearly() -> None:
    profiles = build_profiles()

    single = calculate_recipe_nutrition([RecipeItem("spinach", 30, "g")], profiles.get)
    triple = calculate_recipe_nutrition([RecipeItem("spinach", 90, "g")], profiles.get)

    for key, value in single.totals.items():
        assert triple.totals[key] == pytest.approx(value * 3)
    assert triple.oxalate_mg == pytest.approx(single.oxalate_mg * 3)


def test_recipe_totals_are_additive() -> None:
    profiles = build_profiles()
    first = [RecipeItem("oats", 40, "g")]
    second = [RecipeItem("milk", 100, "ml"), RecipeItem("spinach", 20, "g")]

    combined = calculate_recipe_nutrition(first + second, profiles.get)
    parts = [
        calculate_recipe_nutrition(first, profiles.get),
        calculate_recipe_nutrition(second, profiles.get),
    ]

    for key, value in combined.totals.items():
        assert value == pytest.approx(sum(part.totals.get(key, 0) for part in parts))
    assert combined.oxalate_mg == pytest.approx(sum(p.oxalate_mg for p in parts))


def test_scale_ingredient_liquid_serving() -> None:
    milk = build_profiles()["milk"]

    detail = scale_ingredient(milk, Measure(100, "ml"))

    assert detail.grams == pytest.approx(150)
    assert detail.scaling_factor == pytest.approx(0.5)
    assert detail.nutrition_scaled["calcium"] == pytest.approx(150)
    assert detail.nutrition_scaled[OXALATES] == 0


def test_scale_ingredient_missing_density() -> None:
    syrup = build_profiles()["syrup"]

    with pytest.raises(MissingDensityError):
        scale_ingredient(syrup, Measure(50, "ml"))


def test_scale_ingredient_rejects_empty_serving() -> None:
    profile = NutrientProfile(
        ingredient_id="air", serving=Measure(0, "g"), nutrients={"calories": 1}
    )

    with pytest.raises(ValidationError):
        scale_ingredient(profile, Measure(10, "g"))


def test_unknown_ingredient_fails(recipe_service: RecipeService) -> None:
    with pytest.raises(UnknownIngredientError):
        recipe_service.calculate_items([RecipeItem("unicorn", 10, "g")])


def test_unknown_recipe_fails(recipe_service: RecipeService) -> None:
    with pytest.raises(UnknownRecipeError):
        recipe_service.calculate("missing")


def test_recipe_details_and_contributions(recipe_service: RecipeService) -> None:
    result = recipe_service.calculate(
        "porridge", include_details=True, track_contributions=["calories", OXALATES]
    )

    assert [detail.ingredient_id for detail in result.details or []] == [
        "oats",
        "milk",
    ]
    assert result.contributions == {
        "calories": {"oats": pytest.approx(200), "milk": pytest.approx(100)},
        OXALATES: {"oats": pytest.approx(10), "milk": 0},
    }


def test_recipe_report_summary(recipe_service: RecipeService) -> None:
    report = recipe_service.get_report("porridge", summary=True)

    assert report.name == "Porridge"
    assert list(report.totals) == [
        field for field in SUMMARY_FIELDS if field in report.totals
    ]
    assert set(report.totals) == {"calories", "sodium", "protein", "calcium"}
    assert len(report.ingredients) == 2
    assert report.oxalate_mg == pytest.approx(10)


def test_compare_variation(recipe_service: RecipeService) -> None:
    comparison = recipe_service.compare("porridge", variations={"oats": "50 g"})

    assert comparison.modified.name == "Porridge (Modified)"
    assert comparison.original.totals["calories"] == pytest.approx(300)
    assert comparison.modified.totals["calories"] == pytest.approx(200)
    assert comparison.changes["calories"].absolute == pytest.approx(-100)
    assert comparison.changes["calories"].percent == pytest.approx(-100 / 3)
    assert comparison.modified.oxalate_mg == pytest.approx(5)


def test_compare_add_and_remove(recipe_service: RecipeService) -> None:
    comparison = recipe_service.compare(
        "porridge", added={"spinach": "50 g"}, removed=["milk"], explained=["calories"]
    )

    assert comparison.modified.totals["calcium"] == 0
    assert comparison.changes["calcium"].percent == pytest.approx(-100)
    assert comparison.original.totals["potassium"] == 0
    assert comparison.changes["potassium"].percent == 0
    assert comparison.modified.contributions == {
        "calories": {"oats": pytest.approx(200), "spinach": pytest.approx(10)}
    }


def test_compare_summary_fields(recipe_service: RecipeService) -> None:
    comparison = recipe_service.compare("porridge", summary=True)

    assert list(comparison.changes) == list(SUMMARY_FIELDS)
    assert all(change.absolute == 0 for change in comparison.changes.values())


@pytest.mark.parametrize(
    ("kwargs", "error"),
    [
        ({"variations": {"unicorn": "1 g"}}, UnknownIngredientError),
        ({"added": {"unicorn": "1 g"}}, UnknownIngredientError),
        ({"variations": {"spinach": "1 g"}}, ValidationError),
        ({"removed": ["spinach"]}, ValidationError),
        ({"added": {"oats": "1 g"}}, ValidationError),
    ],
)
def test_compare_rejects_invalid_changes(
    recipe_service: RecipeService, kwargs: dict[str, object], error: type
) -> None:
    with pytest.raises(error):
        recipe_service.compare("porridge", **kwargs)  # type: ignore[arg-type]


def test_contributions_sum_repeated_ingredient() -> None:
    profiles = build_profiles()

    result = calculate_recipe_nutrition(
        [RecipeItem("oats", 100, "g"), RecipeItem("oats", 50, "g")],
        profiles.get,
        track_contributions=["calories", OXALATES],
    )

    assert result.totals["calories"] == pytest.approx(300)
    assert result.contributions == {
        "calories": {"oats": pytest.approx(300)},
        OXALATES: {"oats": pytest.approx(15)},
    }


def test_report_and_comparison_carry_assessment(
    ingredient_repository: InMemoryIngredientRepository,
    assessment_service: DietaryAssessmentService,
) -> None:
    service = RecipeService(
        ingredients=ingredient_repository,
        recipes=InMemoryRecipeRepository(recipes=build_recipes()),
        assessment=assessment_service,
    )

    report = service.get_report("salad")
    comparison = service.compare("salad", variations={"spinach": "10 g"})

    assert report.assessment is not None
    assert report.assessment.oxalate_level is OxalateLevel.VERY_HIGH
    assert comparison.original.assessment is not None
    assert comparison.modified.assessment is not None
    assert comparison.original.assessment.oxalate_level is OxalateLevel.VERY_HIGH
    assert comparison.modified.assessment.oxalate_level is OxalateLevel.LOW
    assert (
        comparison.modified.assessment.nutrition_score
        > comparison.original.assessment.nutrition_score
    )


def test_report_without_assessment_service(recipe_service: RecipeService) -> None:
    report = recipe_service.get_report("porridge")
    comparison = recipe_service.compare("porridge")

    assert report.assessment is None
    assert comparison.original.assessment is None
    assert comparison.modified.assessment is None
