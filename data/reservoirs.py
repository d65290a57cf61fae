"""
Reservoir data providers.

- ReservoirDataProvider: the interface the AI layer consumes
- TableReservoirProvider: pandas-backed implementation over a register file
"""

from pathlib import Path
from typing import Optional, Protocol, Union, runtime_checkable
import logging

import pandas as pd

from data.cleaner import clean_reservoir_frame
from data.models import ReservoirSnapshot, ReservoirStatistics
from data.parser import read_register, source_label

logger = logging.getLogger(__name__)

DEFAULT_CRITICAL_THRESHOLD = 40.0


@runtime_checkable
class ReservoirDataProvider(Protocol):
    """
    Source of reservoir data for the AI layer.

    Implementations may hit a database or a remote service; the AI layer
    only relies on these three reads.
    """

    def get_by_id(self, reservoir_id: int) -> Optional[ReservoirSnapshot]:
        """Snapshot of one reservoir, or None if the id is unknown."""
        ...

    def get_critical(self) -> list[ReservoirSnapshot]:
        """Reservoirs below the critical capacity threshold."""
        ...

    def get_statistics(self) -> ReservoirStatistics:
        """System-wide aggregates."""
        ...


class TableReservoirProvider:
    """
    Read-only provider over a cleaned reservoir table.

    Expects the columns produced by clean_reservoir_frame().
    """

    def __init__(self, df: pd.DataFrame, critical_threshold: float = DEFAULT_CRITICAL_THRESHOLD):
        self.critical_threshold = critical_threshold
        self._snapshots = [_row_to_snapshot(row) for _, row in df.iterrows()]
        self._by_id = {s.id: s for s in self._snapshots}

        logger.info(
            f"Reservoir provider ready: {len(self._snapshots)} reservoirs, "
            f"critical threshold {critical_threshold:.0f}%"
        )

    @classmethod
    def from_file(
        cls,
        file_path: Union[str, Path],
        critical_threshold: float = DEFAULT_CRITICAL_THRESHOLD
    ) -> "TableReservoirProvider":
        """
        Loads a CSV/Excel register.

        Raises:
            ParseError: unreadable file or missing required columns
        """
        register = read_register(file_path)
        df, warnings = clean_reservoir_frame(register.frame, critical_threshold)
        for warning in warnings:
            logger.warning(f"{Path(file_path).name} ({source_label(register)}): {warning}")
        return cls(df, critical_threshold)

    def get_by_id(self, reservoir_id: int) -> Optional[ReservoirSnapshot]:
        return self._by_id.get(reservoir_id)

    def get_critical(self) -> list[ReservoirSnapshot]:
        critical = [
            s for s in self._snapshots
            if s.current_level_percentage < self.critical_threshold
        ]
        return sorted(critical, key=lambda s: s.current_level_percentage)

    def get_statistics(self) -> ReservoirStatistics:
        levels = [s.current_level_percentage for s in self._snapshots]
        average = round(sum(levels) / len(levels), 2) if levels else 0.0

        return ReservoirStatistics(
            total_reservoirs=len(self._snapshots),
            critical_reservoirs=len(self.get_critical()),
            average_water_level=average,
        )


def _row_to_snapshot(row: pd.Series) -> ReservoirSnapshot:
    """DataFrame row -> ReservoirSnapshot (NaN/NaT become None)."""
    last_updated = row.get('last_updated')

    return ReservoirSnapshot(
        id=int(row['id']),
        name=row['name'],
        ward=_optional(row.get('ward')),
        sub_county=_optional(row.get('sub_county')),
        county=row['county'],
        current_level_percentage=float(row['current_level_percentage']),
        current_level_m3=float(row['current_level_m3']),
        total_capacity_m3=float(row['total_capacity_m3']),
        status=row['status'],
        last_updated=None if pd.isna(last_updated) else pd.Timestamp(last_updated).to_pydatetime(),
    )


def _optional(value):
    if value is None:
        return None
    try:
        if pd.isna(value):
            return None
    except (TypeError, ValueError):
        pass
    return value
