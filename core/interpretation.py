"""
Overall ASTM C876 verdict for a survey.

Four mutually exclusive tiers, evaluated in priority order:

    severe ratio > 0.5  → critical, generalized active corrosion
    severe ratio > 0.2  → attention required, localized corrosion
    low ratio > 0.8     → satisfactory, predominantly passive
    otherwise           → intermediate, continued monitoring
"""

from core.schemas import PotentialStatistics

SEVERE_RATIO_CRITICAL = 0.5
SEVERE_RATIO_ATTENTION = 0.2
LOW_RATIO_SATISFACTORY = 0.8


def interpret_statistics(stats: PotentialStatistics) -> str:
    """Single-sentence verdict derived from the band percentages."""
    severe_ratio = stats.severe.percentage / 100
    low_ratio = stats.low.percentage / 100

    if severe_ratio > SEVERE_RATIO_CRITICAL:
        return "CRITICAL CONDITION: The analysis indicates generalized active corrosion in the inspected structure."
    elif severe_ratio > SEVERE_RATIO_ATTENTION:
        return "ATTENTION REQUIRED: Significant localized corrosion detected. Intervention recommended."
    elif low_ratio > LOW_RATIO_SATISFACTORY:
        return "SATISFACTORY CONDITION: Structure predominantly in a passive state."
    return "INTERMEDIATE CONDITION: Continued monitoring recommended."
