"""
Pytest configuration and shared fixtures.
"""

import os

import pytest


SETTINGS_ENV_VARS = (
    "JOBQUEUE_TICK_INTERVAL_MS",
    "JOBQUEUE_MAX_CONCURRENCY",
    "JOBQUEUE_MIN_EXECUTION_MS",
    "JOBQUEUE_MAX_EXECUTION_MS",
    "JOBQUEUE_FAILURE_RATE",
    "JOBQUEUE_AUTO_START",
    "JOBQUEUE_LOG_LEVEL",
    "JOBQUEUE_LOG_DIR",
    "JOBQUEUE_LOG_TO_FILE",
    "API_HOST",
    "API_PORT",
)


@pytest.fixture(autouse=True, scope="function")
def clean_settings_env(monkeypatch):
    """
    Remove job queue settings from the environment before each test.

    Tests that exercise JobQueueSettings.from_env() set exactly the
    variables they need.
    """
    for name in SETTINGS_ENV_VARS:
        if name in os.environ:
            monkeypatch.delenv(name)
    yield
