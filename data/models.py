"""
Pydantic data models for Reservoir Insights.

Models:
- InsightRequest: a user query for the AI layer
- InsightResult: structured answer (or failure) returned to the caller
- ReservoirSnapshot: current state of one reservoir
- ReservoirStatistics: system-wide aggregates
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

MAX_QUERY_LENGTH = 1000


class AnalysisType(str, Enum):
    """Analysis category, selects the system persona"""
    PREDICTION = "PREDICTION"
    RECOMMENDATION = "RECOMMENDATION"
    ANALYSIS = "ANALYSIS"
    GENERAL = "GENERAL"

    @classmethod
    def resolve(cls, value: Optional[str]) -> "AnalysisType":
        """Case-insensitive lookup; None or unknown values map to GENERAL."""
        if value is None:
            return cls.GENERAL
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            return cls.GENERAL


class Confidence(str, Enum):
    """How much to trust an insight (assigned by policy, not by the model)"""
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


class InsightRequest(BaseModel):
    """
    A query for the AI layer.

    Required: query
    Optional: context, analysis_type (PREDICTION, RECOMMENDATION, ANALYSIS, GENERAL)
    """
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    query: str
    context: Optional[str] = None
    analysis_type: Optional[str] = None

    @field_validator("query")
    @classmethod
    def _check_query(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("Query is required")
        if len(value) > MAX_QUERY_LENGTH:
            raise ValueError(f"Query must not exceed {MAX_QUERY_LENGTH} characters")
        return value


class InsightResult(BaseModel):
    """
    Result of one AI operation.

    On success: insight is set, error_message is None.
    On failure: insight is None, error_message explains what went wrong.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    insight: Optional[str] = None
    analysis_type: Optional[str] = None
    recommendations: Optional[list[str]] = None
    confidence: Optional[Confidence] = None
    timestamp: datetime = Field(default_factory=datetime.now)
    success: bool = True
    error_message: Optional[str] = None

    @model_validator(mode="after")
    def _check_outcome(self) -> "InsightResult":
        if self.success and self.error_message is not None:
            raise ValueError("successful result must not carry an error message")
        if not self.success and (self.error_message is None or self.insight is not None):
            raise ValueError("failed result needs an error message and no insight")
        return self

    @classmethod
    def ok(cls, insight: str, analysis_type: Optional[str] = None) -> "InsightResult":
        return cls(insight=insight, analysis_type=analysis_type)

    @classmethod
    def failure(cls, error_message: str) -> "InsightResult":
        return cls(success=False, error_message=error_message)


class ReservoirSnapshot(BaseModel):
    """Current state of a single reservoir (read-only)"""
    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    ward: Optional[str] = None
    sub_county: Optional[str] = None
    county: str
    current_level_percentage: float = Field(..., ge=0)
    current_level_m3: float = Field(0.0, ge=0, description="Stored volume, m³")
    total_capacity_m3: float = Field(0.0, ge=0, description="Capacity, m³")
    status: str = "NORMAL"
    last_updated: Optional[datetime] = None


class ReservoirStatistics(BaseModel):
    """System-wide aggregates (read-only)"""
    model_config = ConfigDict(frozen=True)

    total_reservoirs: int = Field(..., ge=0)
    critical_reservoirs: int = Field(..., ge=0)
    average_water_level: float  # %
