# dswt/config.py
"""
Configuration for the DSWT command line tool.

Values are read from environment variables with sensible defaults. Only the
CLI reads this module; the token core never consults process environment.

Usage:
    from dswt.config import DEFAULT_ALGORITHM, LOG_LEVEL

Environment Variables:
    DSWT_DEFAULT_ALGORITHM: Algorithm used by `dswt issue` (default: HS256)
    DSWT_LOG_LEVEL: Log level when not running with --verbose (default: WARNING)
    DSWT_KEY: Signing key picked up by `dswt issue` / `dswt verify`
"""

import os
from typing import Final

# =============================================================================
# Signing
# =============================================================================

# Name of the environment variable the CLI takes the signing key from.
# The variable is read by the CLI option parser only.
KEY_ENV_VAR: Final[str] = "DSWT_KEY"

DEFAULT_ALGORITHM: Final[str] = os.getenv("DSWT_DEFAULT_ALGORITHM", "HS256")

# =============================================================================
# Logging
# =============================================================================

LOG_LEVEL: Final[str] = os.getenv("DSWT_LOG_LEVEL", "WARNING").upper()


def print_config() -> None:
    """Print current configuration (useful for debugging)."""
    print("DSWT Configuration:")
    print(f"  DEFAULT_ALGORITHM: {DEFAULT_ALGORITHM}")
    print(f"  LOG_LEVEL:         {LOG_LEVEL}")
    print(f"  KEY_ENV_VAR:       {KEY_ENV_VAR} ({'set' if os.getenv(KEY_ENV_VAR) else 'unset'})")


if __name__ == "__main__":
    print_config()
