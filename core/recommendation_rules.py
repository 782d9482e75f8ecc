"""
Recommendation Rules - ASTM C876 technical recommendations

Maps (statistics, gradients, survey parameters) to an ordered list of
recommendations. Rules are grouped; groups are evaluated in a fixed order
and each group contributes at most one recommendation (the first rule of
the group whose predicate holds). Groups are independent, so several
recommendations co-occur:

    1. High-risk share        (>50% urgent, >20% urgent, >5% warning)
    2. Uncertain share        (>50% warning, >30% info)
    3. Potential gradients    (max >150 mV/m urgent, >100 mV/m warning)
    4. Cover depth            (>75 mm info, <20 mm info)
    5. Resistivity, if measured (>50 kΩ·cm info, <10 kΩ·cm warning)
    6. Passive condition      (>90% low with no severe cell, >80% low)
    7. Dispersion             (std dev >50 mV info)

Output order is generation order; severity is carried in the
recommendation type, never implied by position. Identical inputs always
produce an identical list.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

from core.gradient_backend import summarize_gradients
from core.schemas import (
    GradientPoint,
    PotentialStatistics,
    Recommendation,
    RecommendationType,
    SurveyParameters,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Rule cut-offs
# ---------------------------------------------------------------------------

SEVERE_RATIO_GENERALIZED = 0.5
SEVERE_RATIO_LOCALIZED = 0.2
SEVERE_RATIO_SPOTS = 0.05

UNCERTAIN_RATIO_LARGE = 0.5
UNCERTAIN_RATIO_MODERATE = 0.3

GRADIENT_MACROCELL_MV_M = 150.0
GRADIENT_SIGNIFICANT_MV_M = 100.0

COVER_HIGH_MM = 75
COVER_LOW_MM = 20

RESISTIVITY_HIGH_KOHM_CM = 50.0
RESISTIVITY_LOW_KOHM_CM = 10.0

LOW_RATIO_CONFIRMED = 0.9
LOW_RATIO_PREDOMINANT = 0.8

STD_DEV_HIGH_MV = 50.0

# ASTM C876-15 clauses cited by the rules
REF_SEVERE = "ASTM C876-15, Section 6.2"
REF_UNCERTAIN = "ASTM C876-15, Section 6.3"
REF_GRADIENT = "ASTM C876-15, Annex X1"
REF_COVER = "ASTM C876-15, Section 5.4"
REF_RESISTIVITY = "ASTM C876-15, Section 5.2"
REF_PASSIVE = "ASTM C876-15, Section 6.1"


@dataclass(frozen=True)
class RuleInputs:
    """Values the rule predicates and templates read"""
    stats: PotentialStatistics
    params: SurveyParameters
    max_gradient_mV_m: float
    critical_gradient_count: int

    @property
    def severe_ratio(self) -> float:
        return self.stats.severe.percentage / 100

    @property
    def uncertain_ratio(self) -> float:
        return self.stats.uncertain.percentage / 100

    @property
    def low_ratio(self) -> float:
        return self.stats.low.percentage / 100

    @classmethod
    def from_analysis(
        cls,
        stats: PotentialStatistics,
        gradients: Sequence[GradientPoint],
        params: SurveyParameters,
    ) -> "RuleInputs":
        summary = summarize_gradients(list(gradients))
        return cls(
            stats=stats,
            params=params,
            max_gradient_mV_m=summary.max_gradient_mV_m,
            critical_gradient_count=summary.critical_count,
        )


@dataclass(frozen=True)
class Rule:
    """Predicate and the recommendation it produces"""
    name: str
    applies: Callable[[RuleInputs], bool]
    build: Callable[[RuleInputs], Recommendation]


def format_verbatim(value: float) -> str:
    """Shortest round-trip text of a number, without a trailing ".0" (60.0 → "60")."""
    text = repr(float(value))
    return text[:-2] if text.endswith(".0") else text



# ---------------------------------------------------------------------------
# Group 1: high-risk share
# ---------------------------------------------------------------------------

SEVERE_RULES = (
    Rule(
        name="generalized_active_corrosion",
        applies=lambda i: i.severe_ratio > SEVERE_RATIO_GENERALIZED,
        build=lambda i: Recommendation(
            type=RecommendationType.URGENT,
            title="GENERALIZED ACTIVE CORROSION",
            description=(
                f"More than 50% of the area ({i.stats.severe.percentage:.1f}%) shows potentials "
                f"indicating active corrosion. According to ASTM C876, there is a greater than 90% "
                f"probability of corrosion in these regions. Immediate investigation with "
                f"complementary techniques (resistivity, corrosion rate) and an urgent structural "
                f"assessment are recommended."
            ),
            standard_ref=REF_SEVERE,
        ),
    ),
    Rule(
        name="significant_localized_corrosion",
        applies=lambda i: i.severe_ratio > SEVERE_RATIO_LOCALIZED,
        build=lambda i: Recommendation(
            type=RecommendationType.URGENT,
            title="SIGNIFICANT LOCALIZED CORROSION",
            description=(
                f"{i.stats.severe.percentage:.1f}% of the area shows a high risk of corrosion. "
                f"Corrective action is required in the affected zones. Detailed mapping of the "
                f"critical areas and verification of reinforcement integrity are recommended."
            ),
            standard_ref=REF_SEVERE,
        ),
    ),
    Rule(
        name="localized_corrosion_spots",
        applies=lambda i: i.severe_ratio > SEVERE_RATIO_SPOTS,
        build=lambda i: Recommendation(
            type=RecommendationType.WARNING,
            title="Localized Corrosion Spots",
            description=(
                f"{i.stats.severe.count} points ({i.stats.severe.percentage:.1f}%) indicate active "
                f"corrosion. Monitor their evolution and consider preventive intervention at the "
                f"identified points."
            ),
            standard_ref=REF_SEVERE,
        ),
    ),
)

# ---------------------------------------------------------------------------
# Group 2: uncertain share
# ---------------------------------------------------------------------------

UNCERTAIN_RULES = (
    Rule(
        name="large_transition_zone",
        applies=lambda i: i.uncertain_ratio > UNCERTAIN_RATIO_LARGE,
        build=lambda i: Recommendation(
            type=RecommendationType.WARNING,
            title="LARGE AREA IN TRANSITION ZONE",
            description=(
                f"{i.stats.uncertain.percentage:.1f}% of the points lie in the uncertain zone. Per "
                f"ASTM C876, this range does not allow a definitive conclusion about corrosion "
                f"activity. Recommended: (1) check the moisture condition of the concrete, "
                f"(2) repeat measurements with the concrete at different saturation states, "
                f"(3) consider complementary techniques such as linear polarization resistance."
            ),
            standard_ref=REF_UNCERTAIN,
        ),
    ),
    Rule(
        name="moderate_transition_zone",
        applies=lambda i: i.uncertain_ratio > UNCERTAIN_RATIO_MODERATE,
        build=lambda i: Recommendation(
            type=RecommendationType.INFO,
            title="Moderate Uncertainty Zone",
            description=(
                f"{i.stats.uncertain.percentage:.1f}% of the area is in the transition zone. "
                f"Periodic monitoring is recommended to detect a possible evolution toward active "
                f"corrosion."
            ),
            standard_ref=REF_UNCERTAIN,
        ),
    ),
)

# ---------------------------------------------------------------------------
# Group 3: potential gradients
# ---------------------------------------------------------------------------

GRADIENT_RULES = (
    Rule(
        name="macrocell_gradients",
        applies=lambda i: i.max_gradient_mV_m > GRADIENT_MACROCELL_MV_M,
        build=lambda i: Recommendation(
            type=RecommendationType.URGENT,
            title="HIGH POTENTIAL GRADIENTS",
            description=(
                f"Maximum gradient of {i.max_gradient_mV_m:.0f} mV/m detected. Gradients above "
                f"150 mV/m indicate the formation of active corrosion macrocells. "
                f"{i.critical_gradient_count} points show critical gradients (>100 mV/m). "
                f"Immediate investigation of these regions is required."
            ),
            standard_ref=REF_GRADIENT,
        ),
    ),
    Rule(
        name="significant_gradients",
        applies=lambda i: i.max_gradient_mV_m > GRADIENT_SIGNIFICANT_MV_M,
        build=lambda i: Recommendation(
            type=RecommendationType.WARNING,
            title="Significant Potential Gradients",
            description=(
                f"Maximum gradient of {i.max_gradient_mV_m:.0f} mV/m detected. "
                f"{i.critical_gradient_count} points with gradients above 100 mV/m. Monitor these "
                f"areas for macrocell development."
            ),
            standard_ref=REF_GRADIENT,
        ),
    ),
)

# ---------------------------------------------------------------------------
# Group 4: cover depth
# ---------------------------------------------------------------------------

COVER_RULES = (
    Rule(
        name="cover_depth_elevated",
        applies=lambda i: i.params.cover_depth_mm > COVER_HIGH_MM,
        build=lambda i: Recommendation(
            type=RecommendationType.INFO,
            title="High Concrete Cover",
            description=(
                f"A cover of {i.params.cover_depth_mm} mm may attenuate the readings. ASTM C876 "
                f"notes that covers above 75 mm can yield potentials more positive than the actual "
                f"ones. Take this influence into account in the interpretation."
            ),
            standard_ref=REF_COVER,
        ),
    ),
    Rule(
        name="cover_depth_reduced",
        applies=lambda i: i.params.cover_depth_mm < COVER_LOW_MM,
        build=lambda i: Recommendation(
            type=RecommendationType.INFO,
            title="Reduced Concrete Cover",
            description=(
                f"A cover of {i.params.cover_depth_mm} mm is below the code minimum for adequate "
                f"protection of the reinforcement. This may contribute to accelerated corrosion "
                f"regardless of the measured potentials."
            ),
        ),
    ),
)

# ---------------------------------------------------------------------------
# Group 5: resistivity (only when measured)
# ---------------------------------------------------------------------------

RESISTIVITY_RULES = (
    Rule(
        name="high_resistivity",
        applies=lambda i: (
            i.params.resistivity_kohm_cm is not None
            and i.params.resistivity_kohm_cm > RESISTIVITY_HIGH_KOHM_CM
        ),
        build=lambda i: Recommendation(
            type=RecommendationType.INFO,
            title="High Concrete Resistivity",
            description=(
                f"A resistivity of {format_verbatim(i.params.resistivity_kohm_cm)} kΩ·cm indicates dry or "
                f"low-porosity concrete. Values above 50 kΩ·cm may mask corrosion detection by the "
                f"potential method. Measuring on pre-wetted concrete is recommended."
            ),
            standard_ref=REF_RESISTIVITY,
        ),
    ),
    Rule(
        name="low_resistivity",
        applies=lambda i: (
            i.params.resistivity_kohm_cm is not None
            and i.params.resistivity_kohm_cm < RESISTIVITY_LOW_KOHM_CM
        ),
        build=lambda i: Recommendation(
            type=RecommendationType.WARNING,
            title="Low Resistivity",
            description=(
                f"A resistivity of {format_verbatim(i.params.resistivity_kohm_cm)} kΩ·cm indicates high "
                f"conductivity, possibly from chloride contamination or carbonation. The corrosion "
                f"rate may be high in areas with active potentials."
            ),
        ),
    ),
)

# ---------------------------------------------------------------------------
# Group 6: passive condition
# ---------------------------------------------------------------------------

PASSIVE_RULES = (
    Rule(
        name="passive_condition_confirmed",
        applies=lambda i: i.low_ratio > LOW_RATIO_CONFIRMED and i.severe_ratio == 0,
        build=lambda i: Recommendation(
            type=RecommendationType.SUCCESS,
            title="PASSIVE CONDITION CONFIRMED",
            description=(
                f"{i.stats.low.percentage:.1f}% of the area shows potentials indicating passive "
                f"reinforcement. According to ASTM C876, there is a greater than 90% probability "
                f"of no active corrosion. The structure is in good condition."
            ),
            standard_ref=REF_PASSIVE,
        ),
    ),
    Rule(
        name="predominantly_passive",
        applies=lambda i: i.low_ratio > LOW_RATIO_PREDOMINANT,
        build=lambda i: Recommendation(
            type=RecommendationType.SUCCESS,
            title="Predominantly Passive Condition",
            description=(
                f"{i.stats.low.percentage:.1f}% of the area shows a low risk of corrosion. "
                f"Periodic monitoring is recommended to maintain this condition."
            ),
            standard_ref=REF_PASSIVE,
        ),
    ),
)

# ---------------------------------------------------------------------------
# Group 7: dispersion
# ---------------------------------------------------------------------------

DISPERSION_RULES = (
    Rule(
        name="high_variability",
        applies=lambda i: i.stats.std_dev_mV > STD_DEV_HIGH_MV,
        build=lambda i: Recommendation(
            type=RecommendationType.INFO,
            title="High Potential Variability",
            description=(
                f"A standard deviation of {i.stats.std_dev_mV:.0f} mV indicates significant "
                f"heterogeneity of the electrochemical conditions. Possible causes: (1) variation "
                f"in concrete quality, (2) different degrees of carbonation, (3) localized chloride "
                f"contamination."
            ),
        ),
    ),
)

RULE_GROUPS: Tuple[Tuple[Rule, ...], ...] = (
    SEVERE_RULES,
    UNCERTAIN_RULES,
    GRADIENT_RULES,
    COVER_RULES,
    RESISTIVITY_RULES,
    PASSIVE_RULES,
    DISPERSION_RULES,
)


def _first_match(group: Sequence[Rule], inputs: RuleInputs) -> Optional[Recommendation]:
    for rule in group:
        if rule.applies(inputs):
            logger.debug(f"Rule fired: {rule.name}")
            return rule.build(inputs)
    return None


def generate_recommendations(
    stats: PotentialStatistics,
    gradients: Sequence[GradientPoint],
    params: SurveyParameters,
) -> List[Recommendation]:
    """
    Evaluate every rule group in order.

    Args:
        stats: Band statistics of the survey
        gradients: Gradient point list (may be empty)
        params: Survey parameters (cover depth, resistivity)

    Returns:
        Recommendations in generation order

    Example:
        >>> params = SurveyParameters(cover_depth_mm=80)
        >>> [r.title for r in generate_recommendations(stats, [], params)]
        ['High Concrete Cover', ...]
    """
    inputs = RuleInputs.from_analysis(stats, gradients, params)

    recommendations = []
    for group in RULE_GROUPS:
        rec = _first_match(group, inputs)
        if rec is not None:
            recommendations.append(rec)

    logger.info(
        f"Generated {len(recommendations)} recommendations "
        f"({', '.join(r.type.value for r in recommendations) or 'none'})"
    )
    return recommendations
