"""Dietary assessment domain models."""

from dataclasses import dataclass
from enum import Enum


class AssessmentType(Enum):
    """Level of the totals being assessed."""

    RECIPE = "recipe"
    MENU = "menu"
    DAILY_PLAN = "daily_plan"


class Adherence(Enum):
    """DASH adherence rating."""

    EXCELLENT = "Excellent"
    GOOD = "Good"
    FAIR = "Fair"
    POOR = "Poor"


class OxalateLevel(Enum):
    """Absolute oxalate category."""

    LOW = "Low"
    MODERATE = "Moderate"
    HIGH = "High"
    VERY_HIGH = "Very High"


class OxalateRiskStatus(Enum):
    """Oxalate load relative to a user's daily limit."""

    SAFE = "safe"
    WARNING = "warning"
    DANGER = "danger"


@dataclass(frozen=True)
class UserProfile:
    """User inputs to the assessment."""

    calories_per_day: float
    kidney_stone_risk: str


@dataclass(frozen=True)
class RiskLevel:
    """Oxalate limit for a kidney stone risk profile."""

    max_oxalates_per_day: float


@dataclass(frozen=True)
class OxalateRisk:
    """Personalized oxalate risk."""

    status: OxalateRiskStatus
    percent: float
    message: str


@dataclass(frozen=True)
class CriterionResult:
    """Evaluation of one nutrient criterion."""

    value: float
    assessment: str
    target: str
    calorie_percent: float | None = None


@dataclass(frozen=True)
class AssessmentResult:
    """Complete dietary assessment of a set of totals."""

    adherence: Adherence
    reasons: list[str]
    oxalate_level: OxalateLevel
    oxalate_risk: OxalateRisk
    recommendations: list[str]
    nutrition_score: int
    breakdown: dict[str, CriterionResult]
    excellent_count: int
    good_count: int
    poor_count: int
