"""Shared pytest fixtures for ski_corridor workflow tests.

Workflow tests drive a RideSession the way a host application does: build
chunks as the rider advances, query heights, discard what lies behind.
Minimal fixtures: keep conftest.py minimal.
"""

import pytest

from ski_corridor.generators.ride_session import RideSession
from ski_corridor.model.settings import GenerationSettings, TerrainSettings

WORKFLOW_SEED = 42


@pytest.fixture
def session() -> RideSession:
    """Fresh session, nothing generated yet."""
    return RideSession(seed=WORKFLOW_SEED)


@pytest.fixture
def two_chunk_session() -> RideSession:
    """Session with the first two chunks built."""
    ride = RideSession(seed=WORKFLOW_SEED)
    ride.build_next_chunk()
    ride.build_next_chunk()
    return ride


@pytest.fixture
def short_run_settings() -> GenerationSettings:
    """A 320m run: finished after the second chunk (chunk 2 ends at 41 * 8 = 328m)."""
    return GenerationSettings(terrain=TerrainSettings(total_length=320.0))
