"""
ZKBallot Configuration

Loads zkballot.toml at startup.
Environment variables override TOML values.
"""

from .loader import (
    BallotConfig,
    LoggingConfig,
    VotingConfig,
    load_config,
)

__all__ = [
    "BallotConfig",
    "LoggingConfig",
    "VotingConfig",
    "load_config",
]
