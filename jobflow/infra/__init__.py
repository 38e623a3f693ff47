"""
Infrastructure module - configuration, logging, and paths.
"""

from .config import (
    Settings,
    get_project_root,
    resolve_path,
    ensure_data_directories,
)

from .logging_config import setup_logging

__all__ = [
    # config
    "Settings",
    "get_project_root",
    "resolve_path",
    "ensure_data_directories",
    # logging
    "setup_logging",
]
