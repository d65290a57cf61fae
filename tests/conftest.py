import json
import os
from datetime import datetime

import pytest

# Offline, deterministic settings; nothing here talks to a real endpoint
os.environ.setdefault("INFLECTION_API_KEY", "test-key")
os.environ.setdefault(
    "INFLECTION_API_ENDPOINT", "https://inflection.test/external/api/inference/openai/v1/chat/completions"
)

from config import InflectionSettings  # noqa: E402
from data.models import ReservoirSnapshot, ReservoirStatistics  # noqa: E402
from llm.client import GatewayError  # noqa: E402


def completion_body(content: str) -> str:
    """OpenAI-style response body carrying one message."""
    return json.dumps(
        {
            "id": "cmpl-1",
            "object": "chat.completion",
            "choices": [{"index": 0, "message": {"role": "assistant", "content": content}}],
        }
    )


class FakeProvider:
    def __init__(self, snapshots=None, stats=None, stats_error=None):
        self.snapshots = list(snapshots or [])
        self.stats = stats or ReservoirStatistics(
            total_reservoirs=len(self.snapshots),
            critical_reservoirs=sum(1 for s in self.snapshots if s.current_level_percentage < 40),
            average_water_level=55.5,
        )
        self.stats_error = stats_error

    def get_by_id(self, reservoir_id):
        return next((s for s in self.snapshots if s.id == reservoir_id), None)

    def get_critical(self):
        return [s for s in self.snapshots if s.current_level_percentage < 40]

    def get_statistics(self):
        if self.stats_error is not None:
            raise self.stats_error
        return self.stats


class FakeClient:
    """Records prompts; returns a fixed body or raises."""

    def __init__(self, body=None, error=None):
        self.body = body
        self.error = error
        self.calls = []

    def complete(self, system_prompt, user_prompt):
        self.calls.append((system_prompt, user_prompt))
        if self.error is not None:
            raise self.error
        return self.body


@pytest.fixture
def inflection_settings() -> InflectionSettings:
    return InflectionSettings(
        key="test-key",
        endpoint="https://inflection.test/external/api/inference/openai/v1/chat/completions",
        model="inflection_3_pi",
        timeout=2500,
    )


@pytest.fixture
def masinga() -> ReservoirSnapshot:
    return ReservoirSnapshot(
        id=1,
        name="Masinga Dam",
        ward="Masinga Central",
        sub_county="Masinga",
        county="Machakos",
        current_level_percentage=72.456,
        current_level_m3=1014384.0,
        total_capacity_m3=1400000.0,
        status="NORMAL",
        last_updated=datetime(2024, 3, 1, 8, 30),
    )


@pytest.fixture
def thika() -> ReservoirSnapshot:
    return ReservoirSnapshot(
        id=2,
        name="Thika Dam",
        ward="Gituamba",
        sub_county="Gatanga",
        county="Murang'a",
        current_level_percentage=31.25,
        current_level_m3=21875.0,
        total_capacity_m3=70000.0,
        status="CRITICAL",
        last_updated=datetime(2024, 3, 1, 9, 0),
    )


@pytest.fixture
def provider(masinga, thika) -> FakeProvider:
    return FakeProvider([masinga, thika])


@pytest.fixture
def gateway_down() -> FakeClient:
    return FakeClient(error=GatewayError("Completion endpoint returned HTTP 503", status_code=503))
