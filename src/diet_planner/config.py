"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

from diet_planner.domain.assessment import RiskLevel, UserProfile
from diet_planner.domain.errors import ValidationError

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    default_calories_per_day: float = 2000
    default_kidney_stone_risk: str = "Normal"
    kidney_stone_risk_levels: str = "Normal:200,High:100,Extremely High:50"
    catalog_path: str | None = None
    debug: bool = False
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    def default_profile(self) -> UserProfile:
        """Return the profile used when a caller supplies none."""
        return UserProfile(
            calories_per_day=self.default_calories_per_day,
            kidney_stone_risk=self.default_kidney_stone_risk,
        )


def parse_risk_levels(raw: str | None) -> dict[str, RiskLevel]:
    """Parse ``"Name:limit,Name:limit"`` into oxalate limits per risk level."""
    if raw is None:
        return {}
    levels: dict[str, RiskLevel] = {}
    for chunk in raw.split(","):
        value = chunk.strip()
        if not value:
            continue
        name, separator, limit = value.rpartition(":")
        name = name.strip()
        if not separator or not name:
            raise ValidationError(f'Risk level "{value}" must be "<name>:<mg>"')
        try:
            max_oxalates = float(limit)
        except ValueError as exc:
            raise ValidationError(
                f'Risk level "{value}" limit is not a number'
            ) from exc
        if max_oxalates <= 0:
            raise ValidationError(f'Risk level "{value}" limit must be positive')
        levels[name] = RiskLevel(max_oxalates_per_day=max_oxalates)
    return levels
