"""
ZKBallot TOML Configuration Loader

Loads zkballot.toml with environment variable overrides
(dataclass + from_dict + from_file).

Environment variable mapping:
    [voting] voting_period   → ZKBALLOT_VOTING_PERIOD
    [voting] reveal_period   → ZKBALLOT_REVEAL_PERIOD
    [voting] minimum_quorum  → ZKBALLOT_MINIMUM_QUORUM
    [logging] level          → ZKBALLOT_LOG_LEVEL
    [logging] file_output    → ZKBALLOT_LOG_FILE_OUTPUT
"""

from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from ..constants import (
    DEFAULT_MINIMUM_QUORUM,
    DEFAULT_REVEAL_PERIOD_SECONDS,
    DEFAULT_VOTING_PERIOD_SECONDS,
)
from ..exceptions import ConfigurationError, InvalidParameterError
from ..governance.parameters import VotingParameters

logger = logging.getLogger(__name__)

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _env_int(name: str) -> Optional[int]:
    v = os.environ.get(name)
    if not v:
        return None
    try:
        return int(v)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {v!r}") from None


@dataclass
class VotingConfig:
    """[voting] section."""
    voting_period: int = DEFAULT_VOTING_PERIOD_SECONDS
    reveal_period: int = DEFAULT_REVEAL_PERIOD_SECONDS
    minimum_quorum: int = DEFAULT_MINIMUM_QUORUM

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "VotingConfig":
        return cls(
            voting_period=data.get("voting_period", DEFAULT_VOTING_PERIOD_SECONDS),
            reveal_period=data.get("reveal_period", DEFAULT_REVEAL_PERIOD_SECONDS),
            minimum_quorum=data.get("minimum_quorum", DEFAULT_MINIMUM_QUORUM),
        )

    def apply_env(self) -> None:
        """Override from environment variables."""
        if (v := _env_int("ZKBALLOT_VOTING_PERIOD")) is not None:
            self.voting_period = v
        if (v := _env_int("ZKBALLOT_REVEAL_PERIOD")) is not None:
            self.reveal_period = v
        if (v := _env_int("ZKBALLOT_MINIMUM_QUORUM")) is not None:
            self.minimum_quorum = v

    def to_parameters(self) -> VotingParameters:
        """Validated parameters for ZKBallot."""
        try:
            return VotingParameters(
                voting_period=self.voting_period,
                reveal_period=self.reveal_period,
                minimum_quorum=self.minimum_quorum,
            ).validate()
        except InvalidParameterError as e:
            raise ConfigurationError(f"[voting] {e}") from None


@dataclass
class LoggingConfig:
    """[logging] section."""
    level: str = "INFO"
    file_output: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LoggingConfig":
        return cls(
            level=str(data.get("level", "INFO")).upper(),
            file_output=data.get("file_output", False),
        )

    def apply_env(self) -> None:
        if v := os.environ.get("ZKBALLOT_LOG_LEVEL"):
            self.level = v.upper()
        if v := os.environ.get("ZKBALLOT_LOG_FILE_OUTPUT"):
            self.file_output = v.lower() in ("1", "true", "yes")

    def apply(self) -> None:
        """Push this section into the process-wide logging setup."""
        from ..logger import configure_logging

        configure_logging(log_level=self.level, file_output=self.file_output)


# -----------------------------------------------------------------------
# Top-level config
# -----------------------------------------------------------------------

@dataclass
class BallotConfig:
    """
    Unified ballot configuration.

    Loads every section of zkballot.toml and applies environment variable
    overrides.
    """
    voting: VotingConfig = field(default_factory=VotingConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BallotConfig":
        return cls(
            voting=VotingConfig.from_dict(data.get("voting", {})),
            logging=LoggingConfig.from_dict(data.get("logging", {})),
        )

    @classmethod
    def from_file(cls, config_path: str) -> "BallotConfig":
        """
        Load configuration from a TOML file.

        A missing file yields the defaults (with env overrides); a file
        that is not valid TOML raises ConfigurationError.
        """
        path = Path(config_path)
        if not path.exists():
            logger.warning("Config file not found: %s, using defaults", config_path)
            cfg = cls()
            cfg.apply_env()
            return cfg

        try:
            with open(path, "rb") as f:
                raw = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigurationError(f"Invalid TOML in {config_path}: {e}") from e

        cfg = cls.from_dict(raw)
        cfg.apply_env()
        return cfg

    def apply_env(self) -> None:
        """Apply environment variable overrides to all sections."""
        self.voting.apply_env()
        self.logging.apply_env()

    def validate(self) -> bool:
        """
        Validate all configuration sections.

        Raises:
            ConfigurationError: on invalid config
        """
        if self.logging.level not in _LOG_LEVELS:
            raise ConfigurationError(f"Invalid log level: {self.logging.level}")
        self.voting.to_parameters()
        return True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "voting": {
                "voting_period": self.voting.voting_period,
                "reveal_period": self.voting.reveal_period,
                "minimum_quorum": self.voting.minimum_quorum,
            },
            "logging": {
                "level": self.logging.level,
                "file_output": self.logging.file_output,
            },
        }


def load_config(path: Optional[str] = None) -> BallotConfig:
    """
    Load ballot configuration.

    Resolution order:
        1. Explicit *path* argument
        2. ZKBALLOT_CONFIG env var
        3. ./zkballot.toml in current directory
        4. Defaults (with env overrides)
    """
    if path is None:
        path = os.environ.get("ZKBALLOT_CONFIG", "zkballot.toml")

    return BallotConfig.from_file(path)
