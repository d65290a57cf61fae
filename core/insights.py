"""
Insight orchestration — ties prompts, the completion client and the
response parser into the three public operations.

Every operation is a single pipeline:
1. Build prompts (may read reservoir data)
2. One blocking call to the completion endpoint
3. Parse the completion
4. Apply the confidence policy

No operation raises: failures come back as InsightResult(success=False).
"""

from typing import Optional
import logging

from config import InflectionSettings, Settings
from data.models import AnalysisType, Confidence, InsightRequest, InsightResult
from data.reservoirs import ReservoirDataProvider
from llm.client import CompletionClient, GatewayError, get_completion_client
from llm.prompts import (
    CRISIS_SYSTEM_PROMPT,
    CRITICAL_RESERVOIRS_PROMPT,
    PREDICTION_PROMPT,
    PREDICTION_SYSTEM_PROMPT,
    build_critical_reservoirs_context,
    build_reservoir_context,
    build_system_prompt,
    build_user_prompt,
)
from llm.response_parser import parse_completion

logger = logging.getLogger(__name__)

RESERVOIR_NOT_FOUND = "Reservoir not found"
NO_CRITICAL_RESERVOIRS = "Great news! No reservoirs are currently in critical condition."


class InsightService:
    """
    Public AI operations for the reservoir domain.

    Holds no mutable state, so one instance can serve concurrent callers.
    """

    def __init__(
        self,
        client: CompletionClient,
        provider: ReservoirDataProvider,
        settings: Optional[Settings] = None,
    ):
        self.client = client
        self.provider = provider
        self.critical_threshold = settings.critical_threshold_pct if settings else 40.0

    @classmethod
    def from_settings(
        cls,
        inflection: InflectionSettings,
        provider: ReservoirDataProvider,
        settings: Optional[Settings] = None,
    ) -> "InsightService":
        return cls(get_completion_client(inflection), provider, settings)

    def get_insight(self, request: InsightRequest) -> InsightResult:
        """
        Answers a free-text query.

        Args:
            request: validated InsightRequest

        Returns:
            InsightResult echoing request.analysis_type
        """
        logger.info(f"Insight requested (type={request.analysis_type or AnalysisType.GENERAL.value})")

        try:
            system_prompt = build_system_prompt(request.analysis_type)
            user_prompt = build_user_prompt(request, self.provider)

            raw_response = self.client.complete(system_prompt, user_prompt)
            return parse_completion(raw_response, request.analysis_type)

        except GatewayError as e:
            return _failed("Error getting AI insight", e)
        except Exception as e:
            logger.exception("Unexpected error while getting AI insight")
            return _failed("Error getting AI insight", e)

    def predict_water_levels(self, reservoir_id: int, days_ahead: int) -> InsightResult:
        """
        Forecast for one reservoir over the next days_ahead days.

        Confidence is always MEDIUM on success.
        """
        logger.info(f"Prediction requested (reservoir={reservoir_id}, days_ahead={days_ahead})")

        try:
            reservoir = self.provider.get_by_id(reservoir_id)
            if reservoir is None:
                logger.info(f"Reservoir {reservoir_id} not found")
                return InsightResult.failure(RESERVOIR_NOT_FOUND)

            user_prompt = PREDICTION_PROMPT.format(
                days_ahead=days_ahead,
                context=build_reservoir_context(reservoir),
            )

            raw_response = self.client.complete(PREDICTION_SYSTEM_PROMPT, user_prompt)
            result = parse_completion(raw_response, AnalysisType.PREDICTION.value)

            if result.success:
                result.confidence = Confidence.MEDIUM
            return result

        except GatewayError as e:
            return _failed("Error predicting water levels", e)
        except Exception as e:
            logger.exception("Unexpected error while predicting water levels")
            return _failed("Error predicting water levels", e)

    def get_critical_reservoir_recommendations(self) -> InsightResult:
        """
        Action plan for reservoirs below the critical threshold.

        With no critical reservoirs the endpoint is not called.
        Confidence is always HIGH on success.
        """
        logger.info("Critical reservoir recommendations requested")

        try:
            critical = self.provider.get_critical()

            if not critical:
                result = InsightResult.ok(NO_CRITICAL_RESERVOIRS, AnalysisType.RECOMMENDATION.value)
                result.confidence = Confidence.HIGH
                return result

            logger.info(f"{len(critical)} critical reservoirs")

            user_prompt = CRITICAL_RESERVOIRS_PROMPT.format(
                threshold=self.critical_threshold,
                context=build_critical_reservoirs_context(critical),
            )

            raw_response = self.client.complete(CRISIS_SYSTEM_PROMPT, user_prompt)
            result = parse_completion(raw_response, AnalysisType.RECOMMENDATION.value)

            if result.success:
                result.confidence = Confidence.HIGH
            return result

        except GatewayError as e:
            return _failed("Error getting recommendations", e)
        except Exception as e:
            logger.exception("Unexpected error while getting recommendations")
            return _failed("Error getting recommendations", e)


def _failed(prefix: str, error: Exception) -> InsightResult:
    logger.error(f"{prefix}: {error}")
    return InsightResult.failure(f"{prefix}: {error}")
