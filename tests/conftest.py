"""
Pytest configuration and shared fixtures.
"""

import os
import pytest


JOBFLOW_ENV_VARS = (
    "JOBFLOW_DB_PATH",
    "JOBFLOW_LOG_LEVEL",
    "JOBFLOW_LOG_DIR",
    "JOBFLOW_LOG_TO_FILE",
    "JOBFLOW_BUSY_TIMEOUT",
    "JOBFLOW_API_HOST",
    "JOBFLOW_API_PORT",
    "JOBFLOW_SEED_TECHNICIANS",
)


@pytest.fixture(autouse=True, scope="function")
def reset_jobflow_env():
    """
    Clear jobflow settings and the API service singleton around each test.

    Tests that need a setting apply it with monkeypatch.setenv.
    """
    original = {key: os.environ.get(key) for key in JOBFLOW_ENV_VARS}
    for key in JOBFLOW_ENV_VARS:
        os.environ.pop(key, None)

    yield

    for key, value in original.items():
        if value is not None:
            os.environ[key] = value
        else:
            os.environ.pop(key, None)

    from jobflow.api._service_state import shutdown_lifecycle_service
    shutdown_lifecycle_service()
