"""Dependency container wiring for the application."""

from dataclasses import dataclass

from diet_planner.adapters.json_catalog import JsonCatalogRepository
from diet_planner.app_logging import configure_logging
from diet_planner.config import Settings, parse_risk_levels
from diet_planner.services.assessment import DietaryAssessmentService
from diet_planner.services.daily_plans import DailyPlanService
from diet_planner.services.menus import MenuService
from diet_planner.services.recipes import RecipeService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    catalog: JsonCatalogRepository
    recipe_service: RecipeService
    menu_service: MenuService
    daily_plan_service: DailyPlanService
    assessment_service: DietaryAssessmentService


def build_container(
    settings: Settings | None = None, catalog: JsonCatalogRepository | None = None
) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    debug = resolved_settings.debug
    if debug:
        configure_logging()
    if catalog is None:
        if resolved_settings.catalog_path:
            catalog = JsonCatalogRepository.from_path(resolved_settings.catalog_path)
        else:
            catalog = JsonCatalogRepository()

    assessment_service = DietaryAssessmentService(
        risk_levels=parse_risk_levels(resolved_settings.kidney_stone_risk_levels),
        default_profile=resolved_settings.default_profile(),
        debug=debug,
    )
    recipe_service = RecipeService(
        ingredients=catalog,
        recipes=catalog,
        debug=debug,
        assessment=assessment_service,
    )
    menu_service = MenuService(
        recipe_service=recipe_service, menus=catalog, debug=debug
    )
    daily_plan_service = DailyPlanService(
        menu_service=menu_service, plans=catalog, debug=debug
    )

    return AppContainer(
        settings=resolved_settings,
        catalog=catalog,
        recipe_service=recipe_service,
        menu_service=menu_service,
        daily_plan_service=daily_plan_service,
        assessment_service=assessment_service,
    )
