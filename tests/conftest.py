"""
Pytest configuration for apromise tests.

Every test runs with a fresh ManualScheduler installed as the default, so
reactions only run when a test drains the scheduler explicitly.
"""

import pytest

from apromise import ManualScheduler, config, use_scheduler


@pytest.fixture(autouse=True)
def scheduler(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(config, "DEBUG_PROMISES", False)
    with use_scheduler(ManualScheduler()) as manual:
        yield manual
