"""
Lifecycle service state management for API integration.

Provides singleton access to the LifecycleService instance.
Initialized during FastAPI lifespan.

Usage:
    from ._service_state import get_lifecycle_service, init_lifecycle_service

    # In lifespan:
    init_lifecycle_service(db_path)

    # In routers:
    service = get_lifecycle_service()
"""

from pathlib import Path
from typing import Optional

from jobflow.lifecycle.persistence import DEFAULT_BUSY_TIMEOUT
from jobflow.lifecycle.service import LifecycleService


# Global lifecycle service instance
_lifecycle_service: Optional[LifecycleService] = None


def init_lifecycle_service(
    db_path: str | Path,
    busy_timeout: float = DEFAULT_BUSY_TIMEOUT,
) -> LifecycleService:
    """
    Initialize the lifecycle service singleton.

    Called during FastAPI lifespan startup. Idempotent.
    """
    global _lifecycle_service

    if _lifecycle_service is not None:
        return _lifecycle_service

    _lifecycle_service = LifecycleService.create(db_path=db_path, busy_timeout=busy_timeout)
    return _lifecycle_service


def get_lifecycle_service() -> LifecycleService:
    """
    Get the lifecycle service singleton.

    Raises:
        RuntimeError: If lifecycle service not initialized
    """
    if _lifecycle_service is None:
        raise RuntimeError(
            "Lifecycle service not initialized. "
            "Ensure init_lifecycle_service() is called during startup."
        )

    return _lifecycle_service


def shutdown_lifecycle_service() -> None:
    """Drop the singleton. Called during FastAPI lifespan shutdown."""
    global _lifecycle_service
    _lifecycle_service = None
