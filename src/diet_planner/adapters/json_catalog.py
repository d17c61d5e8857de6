"""JSON-backed catalog of ingredients, recipes, menus and daily plans."""

import json
from dataclasses import dataclass, field
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from diet_planner.domain.daily_plans import DailyPlan, DailyPlanMenu, MealType
from diet_planner.domain.errors import ValidationError
from diet_planner.domain.measures import Measure
from diet_planner.domain.menus import Menu, MenuRecipe
from diet_planner.domain.nutrients import NutrientProfile, NutrientValue
from diet_planner.domain.recipes import Recipe, RecipeItem
from diet_planner.services.daily_plans import DailyPlanRepository
from diet_planner.services.measures import parse_measure
from diet_planner.services.menus import MenuRepository
from diet_planner.services.recipes import IngredientRepository, RecipeRepository

_OXALATE_UNIT = "mg/g"


class IngredientModel(BaseModel):
    """Ingredient ("brand") entry with its per-serving nutrients."""

    model_config = ConfigDict(populate_by_name=True)

    name: str | None = None
    serving: str
    density: float | None = None
    oxalate_per_gram: float = Field(default=0.0, alias="oxalatePerGram", ge=0)
    nutrients: dict[str, float | str] = Field(default_factory=dict, alias="data")

    @field_validator("serving")
    @classmethod
    def _check_serving(cls, value: str) -> str:
        parse_measure(value)
        return value

    @field_validator("oxalate_per_gram", mode="before")
    @classmethod
    def _parse_oxalate(cls, value: object) -> object:
        if isinstance(value, str):
            measure = parse_measure(value)
            if measure.unit != _OXALATE_UNIT:
                raise ValueError(f'oxalate must be in mg/g (is "{value}")')
            return measure.amount
        return value

    @field_validator("nutrients")
    @classmethod
    def _check_nutrients(cls, value: dict[str, float | str]) -> dict[str, float | str]:
        for measure in value.values():
            if isinstance(measure, str):
                parse_measure(measure)
        return value

    def to_domain(self, ingredient_id: str) -> NutrientProfile:
        nutrients: dict[str, NutrientValue] = {
            key: parse_measure(value) if isinstance(value, str) else float(value)
            for key, value in self.nutrients.items()
        }
        return NutrientProfile(
            ingredient_id=ingredient_id,
            name=self.name,
            serving=parse_measure(self.serving),
            nutrients=nutrients,
            density=self.density,
            oxalate_per_gram=self.oxalate_per_gram,
        )


class RecipeModel(BaseModel):
    """Recipe entry mapping ingredient ids to ``"<amount> <unit>"``."""

    name: str
    density: float | None = None
    ingredients: dict[str, str]

    @field_validator("ingredients")
    @classmethod
    def _check_ingredients(cls, value: dict[str, str]) -> dict[str, str]:
        for measure in value.values():
            parse_measure(measure)
        return value

    def to_domain(self, recipe_id: str) -> Recipe:
        items = []
        for ingredient_id, text in self.ingredients.items():
            measure: Measure = parse_measure(text)
            items.append(RecipeItem(ingredient_id, measure.amount, measure.unit))
        return Recipe(
            recipe_id=recipe_id, name=self.name, items=items, density=self.density
        )


class MenuRecipeModel(BaseModel):
    """Serving of a recipe within a menu."""

    id: str
    amount: float
    unit: str


class MenuModel(BaseModel):
    """Menu entry."""

    name: str
    recipes: list[MenuRecipeModel]

    def to_domain(self, menu_id: str) -> Menu:
        return Menu(
            menu_id=menu_id,
            name=self.name,
            recipes=[
                MenuRecipe(recipe_id=entry.id, amount=entry.amount, unit=entry.unit)
                for entry in self.recipes
            ],
        )


class DailyPlanMenuModel(BaseModel):
    """Menu reference within a daily plan."""

    model_config = ConfigDict(populate_by_name=True)

    menu_id: str = Field(alias="menuId")
    meal_type: MealType = Field(default=MealType.OTHER, alias="type")


class DailyPlanModel(BaseModel):
    """Daily plan entry."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    menus: list[DailyPlanMenuModel] = Field(alias="dailyPlanMenus")

    def to_domain(self, plan_id: str) -> DailyPlan:
        return DailyPlan(
            plan_id=plan_id,
            name=self.name,
            menus=[
                DailyPlanMenu(menu_id=entry.menu_id, meal_type=entry.meal_type)
                for entry in self.menus
            ],
        )


class CatalogModel(BaseModel):
    """Top-level catalog document."""

    model_config = ConfigDict(populate_by_name=True)

    ingredients: dict[str, IngredientModel] = Field(default_factory=dict)
    recipes: dict[str, RecipeModel] = Field(default_factory=dict)
    menus: dict[str, MenuModel] = Field(default_factory=dict)
    daily_plans: dict[str, DailyPlanModel] = Field(
        default_factory=dict, alias="dailyPlans"
    )


@dataclass
class JsonCatalogRepository(
    IngredientRepository, RecipeRepository, MenuRepository, DailyPlanRepository
):
    """Read-only catalog loaded from a JSON document."""

    profiles: dict[str, NutrientProfile] = field(default_factory=dict)
    recipes: dict[str, Recipe] = field(default_factory=dict)
    menus: dict[str, Menu] = field(default_factory=dict)
    daily_plans: dict[str, DailyPlan] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, payload: dict[str, object]) -> "JsonCatalogRepository":
        """Build a catalog from an already decoded JSON document."""
        try:
            catalog = CatalogModel.model_validate(payload)
        except PydanticValidationError as exc:
            raise ValidationError(f"Invalid catalog: {exc}") from exc
        return cls(
            profiles={
                key: entry.to_domain(key) for key, entry in catalog.ingredients.items()
            },
            recipes={
                key: entry.to_domain(key) for key, entry in catalog.recipes.items()
            },
            menus={key: entry.to_domain(key) for key, entry in catalog.menus.items()},
            daily_plans={
                key: entry.to_domain(key) for key, entry in catalog.daily_plans.items()
            },
        )

    @classmethod
    def from_path(cls, path: str | Path) -> "JsonCatalogRepository":
        """Load a catalog from a JSON file."""
        with Path(path).open(encoding="utf-8") as handle:
            payload = json.load(handle)
        if not isinstance(payload, dict):
            raise ValidationError(f"Catalog {path} must hold a JSON object")
        return cls.from_dict(payload)

    def get_profile(self, ingredient_id: str) -> NutrientProfile | None:
        """Return the nutrient profile for an ingredient, if present."""
        return self.profiles.get(ingredient_id)

    def get_recipe(self, recipe_id: str) -> Recipe | None:
        """Return a recipe by id, if present."""
        return self.recipes.get(recipe_id)

    def get_menu(self, menu_id: str) -> Menu | None:
        """Return a menu by id, if present."""
        return self.menus.get(menu_id)

    def get_daily_plan(self, plan_id: str) -> DailyPlan | None:
        """Return a daily plan by id, if present."""
        return self.daily_plans.get(plan_id)
