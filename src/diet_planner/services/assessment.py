"""Dietary assessment: DASH adherence, oxalate level and oxalate risk."""

import logging
import math
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from enum import Enum

from diet_planner.domain.assessment import (
    Adherence,
    AssessmentResult,
    AssessmentType,
    CriterionResult,
    OxalateLevel,
    OxalateRisk,
    OxalateRiskStatus,
    RiskLevel,
    UserProfile,
)
from diet_planner.domain.errors import ValidationError
from diet_planner.domain.nutrients import CALORIES, NutritionTotals

EXCELLENT = "excellent"
GOOD = "good"
MODERATE = "moderate"
POOR = "poor"
LOW = "low"
HIGH = "high"

_POOR_ASSESSMENTS = {POOR, LOW, HIGH}

POOR_ADHERENCE_POOR_COUNT = 4
FAIR_ADHERENCE_POOR_COUNT = 2
FAIR_ADHERENCE_GOOD_COUNT = 8
EXCELLENT_ADHERENCE_EXCELLENT_COUNT = 3
EXCELLENT_ADHERENCE_GOOD_COUNT = 12
GOOD_ADHERENCE_GOOD_COUNT = 10

OXALATE_WARNING_PERCENT = 50
OXALATE_DANGER_PERCENT = 100

OXALATE_LEVEL_LIMITS = (
    (50.0, OxalateLevel.LOW),
    (100.0, OxalateLevel.MODERATE),
    (200.0, OxalateLevel.HIGH),
)

ADHERENCE_POINTS = {
    Adherence.EXCELLENT: 40,
    Adherence.GOOD: 30,
    Adherence.FAIR: 20,
    Adherence.POOR: 10,
}

OXALATE_RISK_POINTS = {
    OxalateRiskStatus.SAFE: 10,
    OxalateRiskStatus.WARNING: 5,
    OxalateRiskStatus.DANGER: -10,
}

EXCELLENT_BALANCE = (
    "🌟 Excellent nutritional balance! This is a great choice for your dietary goals."
)
OXALATE_WARNING_ADVICE = (
    "Consider substituting high-oxalate ingredients with lower-oxalate alternatives"
)
OXALATE_DANGER_ADVICE = (
    "⚠️ This exceeds your oxalate limit. Consider choosing different ingredients"
    " or reducing portion sizes"
)

_logger = logging.getLogger(__name__)


class TierLogic(Enum):
    """How a value is compared against a criterion's thresholds."""

    AT_MOST = "at_most"
    AT_LEAST = "at_least"
    WITHIN = "within"


@dataclass(frozen=True)
class Thresholds:
    """Tier boundaries; ``*_upper`` bound the range for ``WITHIN`` criteria."""

    good: float
    moderate: float
    excellent: float | None = None
    good_upper: float | None = None
    moderate_upper: float | None = None


@dataclass(frozen=True)
class Criterion:
    """One row of the DASH rule table.

    When ``kcal_per_gram`` is set the nutrient is judged as a share of total
    calories instead of by amount. A poor result of a criterion with
    ``poor_target_moderate`` is pointed at the moderate bound instead of the
    good one.
    """

    key: str
    nutrient: str
    label: str
    unit: str
    tier: TierLogic
    thresholds: Thresholds
    advice: str
    good_weight: int = 2
    poor_weight: int = 1
    kcal_per_gram: float | None = None
    source: str = "of calories"
    poor_target_moderate: bool = False


CRITERIA: tuple[Criterion, ...] = (
    Criterion(
        key="sodium",
        nutrient="sodium",
        label="sodium",
        unit="mg",
        tier=TierLogic.AT_MOST,
        thresholds=Thresholds(excellent=1500, good=2300, moderate=3000),
        advice="Consider reducing sodium. Current: {current}, Target: {target}",
        poor_weight=2,
    ),
    Criterion(
        key="saturated_fat",
        nutrient="saturated_fat",
        label="saturated fat",
        unit="%",
        tier=TierLogic.AT_MOST,
        thresholds=Thresholds(good=6, moderate=10),
        advice="Try reducing saturated fat. Current: {current}, Target: {target}",
        poor_weight=2,
        kcal_per_gram=9,
    ),
    Criterion(
        key="total_fat",
        nutrient="fat",
        label="total fat",
        unit="%",
        tier=TierLogic.AT_MOST,
        thresholds=Thresholds(good=27, moderate=35),
        advice=(
            "Try choosing leaner foods to lower total fat."
            " Current: {current}, Target: {target}"
        ),
        good_weight=1,
        kcal_per_gram=9,
    ),
    Criterion(
        key="sugar",
        nutrient="sugars",
        label="sugar",
        unit="%",
        tier=TierLogic.AT_MOST,
        thresholds=Thresholds(good=5, moderate=10),
        advice=(
            "Consider reducing added sugars."
            " Current: {current}, WHO recommends <10%"
        ),
        poor_weight=2,
        kcal_per_gram=4,
        source="WHO",
        poor_target_moderate=True,
    ),
    Criterion(
        key="potassium",
        nutrient="potassium",
        label="potassium",
        unit="mg",
        tier=TierLogic.AT_LEAST,
        thresholds=Thresholds(excellent=4700, good=3500, moderate=2500),
        advice=(
            "Consider adding potassium-rich foods like bananas, potatoes,"
            " or spinach. Current: {current}, Target: {target}"
        ),
    ),
    Criterion(
        key="fiber",
        nutrient="dietary_fiber",
        label="fiber",
        unit="g",
        tier=TierLogic.AT_LEAST,
        thresholds=Thresholds(excellent=30, good=25, moderate=15),
        advice=(
            "Consider adding more fiber-rich foods like beans, whole grains,"
            " or vegetables. Current: {current}, Target: {target}"
        ),
    ),
    Criterion(
        key="protein",
        nutrient="protein",
        label="protein",
        unit="%",
        tier=TierLogic.WITHIN,
        thresholds=Thresholds(good=15, good_upper=25, moderate=10, moderate_upper=35),
        advice="Adjust protein toward {target} of calories. Current: {current}",
        kcal_per_gram=4,
    ),
    Criterion(
        key="calcium",
        nutrient="calcium",
        label="calcium",
        unit="mg",
        tier=TierLogic.AT_LEAST,
        thresholds=Thresholds(excellent=1250, good=1000, moderate=700),
        advice=(
            "Consider adding calcium-rich foods like low-fat dairy or fortified"
            " alternatives. Current: {current}, Target: {target}"
        ),
    ),
    Criterion(
        key="magnesium",
        nutrient="magnesium",
        label="magnesium",
        unit="mg",
        tier=TierLogic.AT_LEAST,
        thresholds=Thresholds(excellent=500, good=420, moderate=300),
        advice=(
            "Consider adding magnesium-rich foods like nuts, seeds, or legumes."
            " Current: {current}, Target: {target}"
        ),
    ),
    Criterion(
        key="cholesterol",
        nutrient="cholesterol",
        label="cholesterol",
        unit="mg",
        tier=TierLogic.AT_MOST,
        thresholds=Thresholds(good=150, moderate=300),
        advice=(
            "Consider limiting egg yolks and fatty meats to lower cholesterol."
            " Current: {current}, Target: {target}"
        ),
        good_weight=1,
    ),
    Criterion(
        key="carbohydrates",
        nutrient="carbohydrates",
        label="carbohydrate",
        unit="%",
        tier=TierLogic.WITHIN,
        thresholds=Thresholds(good=45, good_upper=60, moderate=40, moderate_upper=65),
        advice="Adjust carbohydrates toward {target} of calories. Current: {current}",
        kcal_per_gram=4,
    ),
)


def _at_most(value: float, thresholds: Thresholds) -> str:
    if thresholds.excellent is not None and value < thresholds.excellent:
        return EXCELLENT
    if value < thresholds.good:
        return GOOD
    if value <= thresholds.moderate:
        return MODERATE
    return POOR


def _at_least(value: float, thresholds: Thresholds) -> str:
    if thresholds.excellent is not None and value >= thresholds.excellent:
        return EXCELLENT
    if value >= thresholds.good:
        return GOOD
    if value >= thresholds.moderate:
        return MODERATE
    return LOW


def _within(value: float, thresholds: Thresholds) -> str:
    if thresholds.good <= value <= (thresholds.good_upper or math.inf):
        return GOOD
    if thresholds.moderate <= value <= (thresholds.moderate_upper or math.inf):
        return MODERATE
    return LOW if value < thresholds.good else HIGH


_TIERS: dict[TierLogic, Callable[[float, Thresholds], str]] = {
    TierLogic.AT_MOST: _at_most,
    TierLogic.AT_LEAST: _at_least,
    TierLogic.WITHIN: _within,
}


def evaluate_criterion(
    criterion: Criterion, totals: Mapping[str, float]
) -> CriterionResult:
    """Rate one nutrient of the totals against its criterion."""
    value = _amount(totals, criterion.nutrient)
    calorie_percent = None
    judged = value
    if criterion.kcal_per_gram is not None:
        calories = _amount(totals, CALORIES)
        calorie_percent = (
            value * criterion.kcal_per_gram / calories * 100 if calories > 0 else 0.0
        )
        judged = calorie_percent
    assessment = _TIERS[criterion.tier](judged, criterion.thresholds)
    return CriterionResult(
        value=value,
        assessment=assessment,
        target=_target(criterion, assessment),
        calorie_percent=calorie_percent,
    )


def calculate_adherence(
    excellent_count: int, good_count: int, poor_count: int
) -> Adherence:
    """Derive the overall rating from the weighted counters."""
    if poor_count >= POOR_ADHERENCE_POOR_COUNT:
        return Adherence.POOR
    if (
        poor_count >= FAIR_ADHERENCE_POOR_COUNT
        or good_count < FAIR_ADHERENCE_GOOD_COUNT
    ):
        return Adherence.FAIR
    if (
        excellent_count >= EXCELLENT_ADHERENCE_EXCELLENT_COUNT
        and good_count >= EXCELLENT_ADHERENCE_GOOD_COUNT
    ):
        return Adherence.EXCELLENT
    if good_count >= GOOD_ADHERENCE_GOOD_COUNT:
        return Adherence.GOOD
    return Adherence.FAIR


def calculate_oxalate_level(oxalate_mg: float) -> OxalateLevel:
    """Categorize an absolute oxalate mass."""
    for limit, level in OXALATE_LEVEL_LIMITS:
        if oxalate_mg < limit:
            return level
    return OxalateLevel.VERY_HIGH


def calculate_oxalate_risk(
    oxalate_mg: float, max_oxalates_per_day: float
) -> OxalateRisk:
    """Compare an oxalate mass with a personal daily limit."""
    percent = oxalate_mg / max_oxalates_per_day * 100
    if percent < OXALATE_WARNING_PERCENT:
        return OxalateRisk(status=OxalateRiskStatus.SAFE, percent=percent, message="")
    if percent < OXALATE_DANGER_PERCENT:
        return OxalateRisk(
            status=OxalateRiskStatus.WARNING,
            percent=percent,
            message=(
                f"Approaching your daily oxalate limit ({max_oxalates_per_day:g}mg)"
            ),
        )
    return OxalateRisk(
        status=OxalateRiskStatus.DANGER,
        percent=percent,
        message=(
            f"Exceeds your daily oxalate limit ({max_oxalates_per_day:g}mg)."
            f" This contains {oxalate_mg:.1f}mg oxalates, which is"
            f" {percent - 100:.0f}% over your limit."
        ),
    )


def generate_recommendations(
    breakdown: Mapping[str, CriterionResult],
    adherence: Adherence,
    oxalate_risk: OxalateRisk,
) -> list[str]:
    """Build advice sentences from the breakdown and oxalate risk."""
    recommendations: list[str] = []
    if adherence is Adherence.EXCELLENT and (
        oxalate_risk.status is OxalateRiskStatus.SAFE
    ):
        recommendations.append(EXCELLENT_BALANCE)
    for criterion in CRITERIA:
        result = breakdown.get(criterion.key)
        if result is None or result.assessment in {EXCELLENT, GOOD}:
            continue
        recommendations.append(
            criterion.advice.format(
                current=_current(criterion, result), target=result.target
            )
        )
    if oxalate_risk.status is OxalateRiskStatus.WARNING:
        recommendations.append(OXALATE_WARNING_ADVICE)
    elif oxalate_risk.status is OxalateRiskStatus.DANGER:
        recommendations.append(OXALATE_DANGER_ADVICE)
    return recommendations


def calculate_nutrition_score(
    adherence: Adherence,
    excellent_count: int,
    good_count: int,
    poor_count: int,
    oxalate_risk: OxalateRisk,
) -> int:
    """Return the 0-100 composite score."""
    score = 50.0
    score += ADHERENCE_POINTS[adherence]
    score += min(good_count * 1.5, 20)
    score += min(excellent_count * 2, 10)
    score -= min(poor_count * 8, 25)
    score += OXALATE_RISK_POINTS[oxalate_risk.status]
    return max(0, min(100, math.floor(score + 0.5)))


def assess(
    totals: Mapping[str, float],
    oxalate_mg: float,
    assessment_type: AssessmentType | str,
    profile: UserProfile,
    risk_levels: Mapping[str, RiskLevel],
) -> AssessmentResult:
    """Assess totals of a recipe, menu or daily plan.

    ``assessment_type`` is validated but does not change the thresholds.
    """
    _validate_totals(totals)
    _validate_oxalate(oxalate_mg)
    _coerce_assessment_type(assessment_type)
    risk_level = _resolve_risk_level(profile, risk_levels)

    excellent_count = 0
    good_count = 0
    poor_count = 0
    reasons: list[str] = []
    breakdown: dict[str, CriterionResult] = {}
    for criterion in CRITERIA:
        result = evaluate_criterion(criterion, totals)
        breakdown[criterion.key] = result
        reasons.append(_reason(criterion, result))
        if result.assessment == EXCELLENT:
            excellent_count += 1
            good_count += criterion.good_weight
        elif result.assessment == GOOD:
            good_count += criterion.good_weight
        elif result.assessment in _POOR_ASSESSMENTS:
            poor_count += criterion.poor_weight

    adherence = calculate_adherence(excellent_count, good_count, poor_count)
    oxalate_risk = calculate_oxalate_risk(
        oxalate_mg, risk_level.max_oxalates_per_day
    )
    return AssessmentResult(
        adherence=adherence,
        reasons=reasons,
        oxalate_level=calculate_oxalate_level(oxalate_mg),
        oxalate_risk=oxalate_risk,
        recommendations=generate_recommendations(breakdown, adherence, oxalate_risk),
        nutrition_score=calculate_nutrition_score(
            adherence, excellent_count, good_count, poor_count, oxalate_risk
        ),
        breakdown=breakdown,
        excellent_count=excellent_count,
        good_count=good_count,
        poor_count=poor_count,
    )


@dataclass
class DietaryAssessmentService:
    """Assess nutrition totals for a user's kidney stone risk profile."""

    risk_levels: dict[str, RiskLevel]
    default_profile: UserProfile
    debug: bool = False

    def assess(
        self,
        nutrition: NutritionTotals,
        assessment_type: AssessmentType | str,
        profile: UserProfile | None = None,
    ) -> AssessmentResult:
        """Assess the totals of any aggregation level."""
        return self.assess_totals(
            nutrition.totals, nutrition.oxalate_mg, assessment_type, profile
        )

    def assess_totals(
        self,
        totals: Mapping[str, float],
        oxalate_mg: float,
        assessment_type: AssessmentType | str,
        profile: UserProfile | None = None,
    ) -> AssessmentResult:
        """Assess raw totals and oxalate mass."""
        result = assess(
            totals,
            oxalate_mg,
            assessment_type,
            profile or self.default_profile,
            self.risk_levels,
        )
        if self.debug:
            _logger.info(
                "Assessment: type=%s adherence=%s score=%s oxalate=%s",
                assessment_type,
                result.adherence.value,
                result.nutrition_score,
                result.oxalate_risk.status.value,
            )
        return result

    def oxalate_risk(
        self, oxalate_mg: float, profile: UserProfile | None = None
    ) -> OxalateRisk:
        """Return the personalized oxalate risk alone."""
        _validate_oxalate(oxalate_mg)
        risk_level = _resolve_risk_level(
            profile or self.default_profile, self.risk_levels
        )
        return calculate_oxalate_risk(oxalate_mg, risk_level.max_oxalates_per_day)


def _amount(totals: Mapping[str, float], key: str) -> float:
    value = totals.get(key)
    if value is None:
        return 0.0
    return float(value)


def _is_number(value: object) -> bool:
    return (
        isinstance(value, int | float)
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


def _validate_totals(totals: object) -> None:
    if not isinstance(totals, Mapping):
        raise ValidationError("totals must be a mapping of nutrient to amount")
    for key, value in totals.items():
        if value is not None and not _is_number(value):
            raise ValidationError(f'totals["{key}"] must be a number, got {value!r}')


def _validate_oxalate(oxalate_mg: object) -> None:
    if not _is_number(oxalate_mg) or oxalate_mg < 0:
        raise ValidationError(
            f"oxalate_mg must be a non-negative number, got {oxalate_mg!r}"
        )


def _coerce_assessment_type(value: AssessmentType | str) -> AssessmentType:
    if isinstance(value, AssessmentType):
        return value
    try:
        return AssessmentType(value)
    except ValueError as exc:
        raise ValidationError(
            f"assessment type must be recipe, menu, or daily_plan, got {value!r}"
        ) from exc


def _resolve_risk_level(
    profile: UserProfile, risk_levels: Mapping[str, RiskLevel]
) -> RiskLevel:
    if not _is_number(profile.calories_per_day) or profile.calories_per_day <= 0:
        raise ValidationError(
            f"calories_per_day must be positive, got {profile.calories_per_day!r}"
        )
    risk_level = risk_levels.get(profile.kidney_stone_risk)
    if risk_level is None:
        raise ValidationError(
            f'No oxalate limit for kidney stone risk "{profile.kidney_stone_risk}"'
        )
    if not _is_number(risk_level.max_oxalates_per_day) or (
        risk_level.max_oxalates_per_day <= 0
    ):
        raise ValidationError(
            f'Oxalate limit for "{profile.kidney_stone_risk}" must be positive'
        )
    return risk_level


def _format_unit(amount: float, unit: str) -> str:
    return f"{amount:g}{unit}"


def _target(criterion: Criterion, assessment: str) -> str:
    thresholds = criterion.thresholds
    if criterion.tier is TierLogic.WITHIN:
        return f"{thresholds.good:g}-{thresholds.good_upper:g}%"
    bound = thresholds.good
    if assessment == EXCELLENT and thresholds.excellent is not None:
        bound = thresholds.excellent
    elif assessment == POOR and criterion.poor_target_moderate:
        bound = thresholds.moderate
    sign = "<" if criterion.tier is TierLogic.AT_MOST else ">"
    return f"{sign}{_format_unit(bound, criterion.unit)}"


def _current(criterion: Criterion, result: CriterionResult) -> str:
    if result.calorie_percent is not None:
        return f"{result.calorie_percent:.1f}% of calories"
    if criterion.unit == "g":
        return f"{result.value:.1f}g"
    return f"{result.value:.0f}{criterion.unit}"


def _reason(criterion: Criterion, result: CriterionResult) -> str:
    label = criterion.label
    percent = result.calorie_percent
    assessment = result.assessment
    if assessment == EXCELLENT:
        return f"excellent {label} ✓✓"
    if assessment == GOOD:
        prefix = "low" if criterion.tier is TierLogic.AT_MOST else "good"
        return f"{prefix} {label} ✓"
    if assessment == POOR:
        if percent is not None:
            return (
                f"high {label} ({percent:.0f}% >"
                f" {criterion.thresholds.moderate:g}% {criterion.source}) ⚠"
            )
        return f"high {label} ✗"
    detail = f" ({percent:.0f}% of calories)" if percent is not None else ""
    return f"{assessment} {label}{detail} ⚠"
