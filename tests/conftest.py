"""Pytest configuration and shared fixtures."""

import pytest

from dutyroster.domain.models import DutyPreset, SkillMatrix, Worker


def pytest_configure(config):
    """Configure pytest."""
    # Add custom markers
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests (deselect with '-m \"not integration\"')"
    )
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )


@pytest.fixture
def zero_rng():
    """Deterministic random source: always the first candidate of the final run."""
    return lambda: 0.0


@pytest.fixture
def make_worker():
    def _make(name, start=600, end=1320, shift_type="afternoon", employment=""):
        return Worker(name, shift_type, start, end, employment)

    return _make


@pytest.fixture
def two_post_day(make_worker):
    """Three all-day workers and two posts, everybody level 2 everywhere."""
    workers = [make_worker("Aoki"), make_worker("Baba"), make_worker("Chiba")]
    skills = SkillMatrix({w.name: {"P1": 2, "P2": 2} for w in workers})
    presets = [
        DutyPreset("P1", order=1),
        DutyPreset("P2", order=2),
    ]
    return presets, workers, skills
