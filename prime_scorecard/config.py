"""
Central configuration for the scorecard CLI.

Settings come from environment variables (a .env file is loaded by the CLI):
  - PRIME_LOG_LEVEL (default: INFO)
  - PRIME_LOG_FILE (default: unset, console only)
  - PRIME_DATA_DIR (default: ~/.prime-scorecard/) for exported scorecards and audit logs

The scoring engine itself reads no configuration: everything that affects a
score is versioned with SCORING_REVISION.
"""

import os
from pathlib import Path
from typing import Optional

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def get_data_dir() -> Path:
    """
    Get the local data directory for exports.

    Uses PRIME_DATA_DIR environment variable if set, otherwise defaults
    to ~/.prime-scorecard/

    Returns:
        Path to data directory
    """
    env_path = os.environ.get("PRIME_DATA_DIR")
    if env_path:
        return Path(env_path).expanduser().resolve()
    return Path.home() / ".prime-scorecard"


def get_audit_dir() -> Path:
    """Get the audit log export directory."""
    return get_data_dir() / "audit"


def get_log_level() -> str:
    level = os.environ.get("PRIME_LOG_LEVEL", "INFO").upper()
    if level not in VALID_LOG_LEVELS:
        raise ValueError(f"PRIME_LOG_LEVEL must be one of {', '.join(VALID_LOG_LEVELS)}, got {level}")
    return level


def get_log_file() -> Optional[str]:
    return os.environ.get("PRIME_LOG_FILE") or None

