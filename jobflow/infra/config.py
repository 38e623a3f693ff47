"""
Runtime configuration for jobflow.

Settings are read from environment variables (a .env file is loaded by the
entry points via python-dotenv before this module is consulted).

Directory structure:
data/
 └── jobflow.db                # SQLite database (jobs, appointments, invoices, payments)
logs/
 └── jobflow_YYYYMMDD_<HHMMSS>.log

Environment Variables:
- JOBFLOW_DB_PATH: Database file (default: data/jobflow.db, relative to project root)
- JOBFLOW_LOG_LEVEL: Logging level (default: INFO)
- JOBFLOW_LOG_DIR: Log directory (default: logs)
- JOBFLOW_LOG_TO_FILE: Write the daily log file (default: true)
- JOBFLOW_BUSY_TIMEOUT: Seconds a transaction waits for the write lock (default: 5.0)
- JOBFLOW_API_HOST: API bind host (default: 127.0.0.1)
- JOBFLOW_API_PORT: API bind port (default: 8000)
- JOBFLOW_SEED_TECHNICIANS: Seed the default technicians on startup (default: false)
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_DB_PATH = "data/jobflow.db"
DEFAULT_LOG_DIR = "logs"


# =============================================================================
# Environment Variable Helpers
# =============================================================================

def _get_env_bool(key: str, default: bool = False) -> bool:
    """Get boolean value from environment variable."""
    val = os.getenv(key, "").lower()
    if val in ("true", "1", "yes", "on"):
        return True
    elif val in ("false", "0", "no", "off"):
        return False
    return default


def _get_env_int(key: str, default: int) -> int:
    """Get integer value from environment variable."""
    val = os.getenv(key)
    if val is not None:
        try:
            return int(val)
        except ValueError:
            logger.warning(f"[Config] Invalid integer for {key}: {val}, using default: {default}")
    return default


def _get_env_float(key: str, default: float) -> float:
    val = os.getenv(key)
    if val is not None:
        try:
            return float(val)
        except ValueError:
            logger.warning(f"[Config] Invalid number for {key}: {val}, using default: {default}")
    return default


# =============================================================================
# Paths
# =============================================================================

def get_project_root() -> Path:
    """
    Get the project root directory.

    File is at jobflow/infra/config.py, so project root is 2 levels up.
    """
    return Path(__file__).parent.parent.parent.resolve()


def resolve_path(value: str | Path) -> Path:
    """Resolve a relative path against the project root."""
    path = Path(value).expanduser()
    if not path.is_absolute():
        path = get_project_root() / path
    return path


@dataclass
class Settings:
    db_path: Path
    log_level: str = "INFO"
    log_dir: Path = Path(DEFAULT_LOG_DIR)
    log_to_file: bool = True
    busy_timeout: float = 5.0
    api_host: str = "127.0.0.1"
    api_port: int = 8000
    seed_technicians: bool = False

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            db_path=resolve_path(os.getenv("JOBFLOW_DB_PATH", DEFAULT_DB_PATH)),
            log_level=os.getenv("JOBFLOW_LOG_LEVEL", "INFO").upper(),
            log_dir=resolve_path(os.getenv("JOBFLOW_LOG_DIR", DEFAULT_LOG_DIR)),
            log_to_file=_get_env_bool("JOBFLOW_LOG_TO_FILE", True),
            busy_timeout=_get_env_float("JOBFLOW_BUSY_TIMEOUT", 5.0),
            api_host=os.getenv("JOBFLOW_API_HOST", "127.0.0.1"),
            api_port=_get_env_int("JOBFLOW_API_PORT", 8000),
            seed_technicians=_get_env_bool("JOBFLOW_SEED_TECHNICIANS", False),
        )


def ensure_data_directories(settings: Settings) -> None:
    """Create the database parent directory if it doesn't exist."""
    settings.db_path.parent.mkdir(parents=True, exist_ok=True)
    logger.debug(f"[Config] Data directory ready: {settings.db_path.parent}")
