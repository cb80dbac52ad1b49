"""Pytest fixtures and configuration."""
import fakeredis
import pytest

from bd_scoring.config import Settings
from bd_scoring.models import ComparableCompany, DevelopmentStage, MarketContext
from bd_scoring.scoring.pillars import build_pillars

from tests.factories import FakeClock, make_company, make_scenario_company, today


@pytest.fixture
def settings():
    """Settings isolated from the environment."""
    return Settings(_env_file=None)


@pytest.fixture
def company():
    """Fully populated phase 2 oncology company."""
    return make_company()


@pytest.fixture
def scenario_company():
    """Phase 3 company with a $12B market, no competitors and 24 months of runway."""
    return make_scenario_company()


@pytest.fixture
def market_context():
    """Context with six oncology comparables."""
    return MarketContext(
        comparable_companies=[
            ComparableCompany(name=f"Comp {i}", stage=DevelopmentStage.PHASE2, therapeutic_areas=["Oncology"])
            for i in range(6)
        ],
    )


@pytest.fixture
def pillars():
    """All six pillars on a fixed calendar."""
    return build_pillars(today=today)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def redis_client():
    """In-process Redis using fakeredis."""
    return fakeredis.FakeRedis(decode_responses=True)
