"""Shared test fixtures."""

from dataclasses import dataclass, field

import pytest

from diet_planner.config import Settings
from diet_planner.domain.assessment import RiskLevel, UserProfile
from diet_planner.domain.daily_plans import DailyPlan, DailyPlanMenu, MealType
from diet_planner.domain.measures import Measure
from diet_planner.domain.menus import Menu, MenuRecipe
from diet_planner.domain.nutrients import NutrientProfile
from diet_planner.domain.recipes import Recipe, RecipeItem
from diet_planner.services.assessment import DietaryAssessmentService
from diet_planner.services.daily_plans import DailyPlanRepository, DailyPlanService
from diet_planner.services.menus import MenuRepository, MenuService
from diet_planner.services.recipes import (
    IngredientRepository,
    RecipeRepository,
    RecipeService,
)


@dataclass
class InMemoryIngredientRepository(IngredientRepository):
    """In-memory ingredient repository for tests."""

    profiles: dict[str, NutrientProfile] = field(default_factory=dict)
    lookups: list[str] = field(default_factory=list)

    def get_profile(self, ingredient_id: str) -> NutrientProfile | None:
        self.lookups.append(ingredient_id)
        return self.profiles.get(ingredient_id)


@dataclass
class InMemoryRecipeRepository(RecipeRepository):
    """In-memory recipe repository for tests."""

    recipes: dict[str, Recipe] = field(default_factory=dict)

    def get_recipe(self, recipe_id: str) -> Recipe | None:
        return self.recipes.get(recipe_id)


@dataclass
class InMemoryMenuRepository(MenuRepository):
    """In-memory menu repository for tests."""

    menus: dict[str, Menu] = field(default_factory=dict)

    def get_menu(self, menu_id: str) -> Menu | None:
        return self.menus.get(menu_id)


@dataclass
class InMemoryDailyPlanRepository(DailyPlanRepository):
    """In-memory daily plan repository for tests."""

    plans: dict[str, DailyPlan] = field(default_factory=dict)

    def get_daily_plan(self, plan_id: str) -> DailyPlan | None:
        return self.plans.get(plan_id)


def build_profiles() -> dict[str, NutrientProfile]:
    """Return a small set of ingredient profiles."""
    return {
        "oats": NutrientProfile(
            ingredient_id="oats",
            serving=Measure(100, "g"),
            nutrients={
                "calories": 200,
                "sodium": Measure(300, "mg"),
                "dietary_fiber": Measure(5, "g"),
            },
            oxalate_per_gram=0.1,
        ),
        "milk": NutrientProfile(
            ingredient_id="milk",
            serving=Measure(200, "ml"),
            nutrients={
                "calories": 100,
                "protein": Measure(8, "g"),
                "calcium": Measure(300, "mg"),
            },
            density=1.5,
        ),
        "spinach": NutrientProfile(
            ingredient_id="spinach",
            serving=Measure(50, "g"),
            nutrients={
                "calories": 10,
                "potassium": Measure(280, "mg"),
                "magnesium": Measure(40, "mg"),
            },
            oxalate_per_gram=4.0,
        ),
        "syrup": NutrientProfile(
            ingredient_id="syrup",
            serving=Measure(8, "ml"),
            nutrients={"calories": 20, "sugars": Measure(5, "g")},
            density=None,
        ),
    }


def build_recipes() -> dict[str, Recipe]:
    """Return recipes built from ``build_profiles``."""
    return {
        "porridge": Recipe(
            recipe_id="porridge",
            name="Porridge",
            items=[
                RecipeItem("oats", 100, "g"),
                RecipeItem("milk", 200, "ml"),
            ],
        ),
        "salad": Recipe(
            recipe_id="salad",
            name="Spinach Salad",
            items=[
                RecipeItem("spinach", 100, "g"),
                RecipeItem("oats", 0, "g"),
            ],
        ),
    }


def build_menus() -> dict[str, Menu]:
    """Return menus built from ``build_recipes``."""
    return {
        "breakfast": Menu(
            menu_id="breakfast",
            name="Breakfast",
            recipes=[MenuRecipe("porridge", 400, "g")],
        ),
        "lunch": Menu(
            menu_id="lunch",
            name="Lunch",
            recipes=[
                MenuRecipe("salad", 50, "g"),
                MenuRecipe("porridge", 200, "g"),
            ],
        ),
    }


def build_plans() -> dict[str, DailyPlan]:
    """Return daily plans built from ``build_menus``."""
    return {
        "monday": DailyPlan(
            plan_id="monday",
            name="Monday",
            menus=[
                DailyPlanMenu("lunch", MealType.LUNCH),
                DailyPlanMenu("breakfast", MealType.BREAKFAST),
            ],
        )
    }


@pytest.fixture
def settings() -> Settings:
    return Settings(
        default_calories_per_day=2000,
        default_kidney_stone_risk="Normal",
        kidney_stone_risk_levels="Normal:200,High:100",
        catalog_path=None,
    )


@pytest.fixture
def ingredient_repository() -> InMemoryIngredientRepository:
    return InMemoryIngredientRepository(profiles=build_profiles())


@pytest.fixture
def recipe_service(
    ingredient_repository: InMemoryIngredientRepository,
) -> RecipeService:
    return RecipeService(
        ingredients=ingredient_repository,
        recipes=InMemoryRecipeRepository(recipes=build_recipes()),
    )


@pytest.fixture
def menu_service(recipe_service: RecipeService) -> MenuService:
    return MenuService(
        recipe_service=recipe_service,
        menus=InMemoryMenuRepository(menus=build_menus()),
    )


@pytest.fixture
def daily_plan_service(menu_service: MenuService) -> DailyPlanService:
    return DailyPlanService(
        menu_service=menu_service,
        plans=InMemoryDailyPlanRepository(plans=build_plans()),
    )


@pytest.fixture
def risk_levels() -> dict[str, RiskLevel]:
    return {
        "Normal": RiskLevel(max_oxalates_per_day=200),
        "High": RiskLevel(max_oxalates_per_day=100),
    }


@pytest.fixture
def profile() -> UserProfile:
    return UserProfile(calories_per_day=2000, kidney_stone_risk="Normal")


@pytest.fixture
def assessment_service(
    risk_levels: dict[str, RiskLevel], profile: UserProfile
) -> DietaryAssessmentService:
    return DietaryAssessmentService(risk_levels=risk_levels, default_profile=profile)
