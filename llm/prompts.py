"""
Prompts for the reservoir AI layer.

System prompts set the persona per analysis type, user prompts carry the
query plus reservoir data rendered as plain text.
"""

from typing import Optional
import logging

from data.models import AnalysisType, InsightRequest, ReservoirSnapshot
from data.reservoirs import ReservoirDataProvider

logger = logging.getLogger(__name__)


# === System prompts (persona per analysis type) ===

SYSTEM_PROMPTS = {
    AnalysisType.PREDICTION: (
        "You are a water resource prediction expert for Kenya. "
        "Provide accurate forecasts based on data analysis, seasonal patterns, and consumption trends."
    ),
    AnalysisType.RECOMMENDATION: (
        "You are a water management consultant for Kenya. "
        "Provide actionable recommendations for reservoir management and water conservation."
    ),
    AnalysisType.ANALYSIS: (
        "You are a water data analyst for Kenya. "
        "Provide detailed analysis of water reservoir conditions and trends."
    ),
    AnalysisType.GENERAL: (
        "You are a helpful water management assistant for Kenya's water reservoir system. "
        "Provide informative and accurate responses about water management."
    ),
}


# === Fixed scenario prompts ===

PREDICTION_SYSTEM_PROMPT = (
    "You are a water management expert specializing in reservoir level predictions for Kenya. "
    "Provide accurate predictions based on current data, seasonal patterns, and consumption trends."
)

PREDICTION_PROMPT = (
    "Based on the following reservoir data, predict water levels for the next {days_ahead} days:\n"
    "{context}\n"
    "Consider seasonal rainfall patterns in Kenya, current consumption rates, "
    "and provide specific predictions."
)

CRISIS_SYSTEM_PROMPT = (
    "You are a water crisis management expert for Kenya. "
    "Provide actionable recommendations for managing critical water reservoir situations."
)

CRITICAL_RESERVOIRS_PROMPT = (
    "The following reservoirs are in critical condition (below {threshold:.0f}% capacity):\n"
    "{context}\n"
    "Provide immediate action recommendations, resource allocation suggestions, and emergency measures."
)

RESERVOIR_CONTEXT_TEMPLATE = """\
Reservoir: {name}
Location: {ward}, {sub_county}, {county}
Current Level: {level_pct:.2f}% ({level_m3:.2f}/{capacity_m3:.2f} cubic meters)
Status: {status}
Last Updated: {last_updated}
"""

UNKNOWN = "Unknown"


def build_system_prompt(analysis_type: Optional[str]) -> str:
    """Persona for the analysis type; anything unrecognised gets the general assistant."""
    return SYSTEM_PROMPTS[AnalysisType.resolve(analysis_type)]


def build_user_prompt(
    request: InsightRequest,
    provider: Optional[ReservoirDataProvider] = None
) -> str:
    """
    Query + optional context + current system overview.

    The overview is best effort: if the provider fails, the prompt is
    built without it.

    Args:
        request: the user's request
        provider: source of the system overview (optional)
    """
    prompt = request.query

    if request.context is not None and request.context.strip():
        prompt += f"\n\nContext: {request.context}"

    if provider is not None:
        try:
            stats = provider.get_statistics()
            prompt += (
                "\n\nCurrent System Overview:"
                f"\n- Total Reservoirs: {stats.total_reservoirs}"
                f"\n- Critical Reservoirs: {stats.critical_reservoirs}"
                f"\n- Average Water Level: {stats.average_water_level}%"
            )
        except Exception as e:
            logger.debug(f"System overview skipped, statistics unavailable: {e}")

    return prompt


def build_reservoir_context(reservoir: ReservoirSnapshot) -> str:
    """Multi-line description of one reservoir for the prediction prompt."""
    return RESERVOIR_CONTEXT_TEMPLATE.format(
        name=reservoir.name,
        ward=reservoir.ward or UNKNOWN,
        sub_county=reservoir.sub_county or UNKNOWN,
        county=reservoir.county,
        level_pct=reservoir.current_level_percentage,
        level_m3=reservoir.current_level_m3,
        capacity_m3=reservoir.total_capacity_m3,
        status=reservoir.status,
        last_updated=reservoir.last_updated.isoformat() if reservoir.last_updated else UNKNOWN,
    )


def build_critical_reservoirs_context(reservoirs: list[ReservoirSnapshot]) -> str:
    """One bullet line per critical reservoir; empty list gives an empty string."""
    return "".join(
        f"- {r.name} ({r.county}): {r.current_level_percentage:.1f}% capacity remaining\n"
        for r in reservoirs
    )
