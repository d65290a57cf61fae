"""
Data module — models, reservoir register reading and providers.
"""

from data.models import (
    AnalysisType,
    Confidence,
    InsightRequest,
    InsightResult,
    ReservoirSnapshot,
    ReservoirStatistics,
)
from data.cleaner import ParseError, clean_reservoir_frame, clean_number, normalize_column_name
from data.parser import RegisterFile, find_header_row, read_register
from data.reservoirs import ReservoirDataProvider, TableReservoirProvider

__all__ = [
    # Models
    "AnalysisType",
    "Confidence",
    "InsightRequest",
    "InsightResult",
    "ReservoirSnapshot",
    "ReservoirStatistics",
    # Register reading
    "RegisterFile",
    "find_header_row",
    "read_register",
    # Cleaner
    "ParseError",
    "clean_reservoir_frame",
    "clean_number",
    "normalize_column_name",
    # Providers
    "ReservoirDataProvider",
    "TableReservoirProvider",
]
