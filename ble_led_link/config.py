"""
Connection Configuration

Timing and retry settings for establishing a link, plus logging setup.
Settings can be loaded from a JSON file such as:

    {
        "max_attempts": 3,
        "retry_backoff": 2.5,
        "scan_duration": 8
    }
"""

import json
import logging
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union

from .constants import DEFAULT_CONNECTION_PARAMS, LOG_FORMAT, LOG_LEVEL_DEFAULT
from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConnectionConfig:
    """Retry and settle timings, in seconds."""
    max_attempts: int = DEFAULT_CONNECTION_PARAMS["max_attempts"]
    pre_connect_settle: float = DEFAULT_CONNECTION_PARAMS["pre_connect_settle"]
    post_connect_settle: float = DEFAULT_CONNECTION_PARAMS["post_connect_settle"]
    post_discovery_settle: float = DEFAULT_CONNECTION_PARAMS["post_discovery_settle"]
    retry_backoff: float = DEFAULT_CONNECTION_PARAMS["retry_backoff"]
    scan_duration: Optional[float] = DEFAULT_CONNECTION_PARAMS["scan_duration"]

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ConfigurationError(f"max_attempts must be at least 1, got {self.max_attempts}")
        for name in ("pre_connect_settle", "post_connect_settle",
                     "post_discovery_settle", "retry_backoff"):
            if getattr(self, name) < 0:
                raise ConfigurationError(f"{name} must not be negative")
        if self.scan_duration is not None and self.scan_duration <= 0:
            raise ConfigurationError("scan_duration must be positive")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ConnectionConfig":
        """
        Create a config from a mapping, falling back to defaults.

        Raises:
            ConfigurationError: On unknown keys or badly typed values
        """
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ConfigurationError(f"Unknown connection settings: {', '.join(sorted(unknown))}")

        values = {}
        try:
            for key, value in data.items():
                if key == "max_attempts":
                    values[key] = int(value)
                elif value is None:
                    values[key] = None
                else:
                    values[key] = float(value)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid connection setting: {e}") from e

        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def load_config(path: Union[str, Path]) -> ConnectionConfig:
    """
    Load connection settings from a JSON file.

    A missing file yields the defaults.

    Args:
        path: Path to the JSON file

    Raises:
        ConfigurationError: If the file cannot be parsed
    """
    path = Path(path)
    if not path.exists():
        logger.debug(f"No config at {path}, using defaults")
        return ConnectionConfig()

    try:
        with open(path, "r") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Could not load config {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Config {path} must contain a JSON object")

    return ConnectionConfig.from_dict(data)


def configure_logging(level: Union[str, int] = LOG_LEVEL_DEFAULT) -> None:
    """Install the package log format on the root logger."""
    logging.basicConfig(format=LOG_FORMAT, level=level)
