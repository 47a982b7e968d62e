"""
Tracker configuration
=====================

TrackerConfig is validated once, at construction. Values can come from code
or from a YAML file:

    # routetrace.yaml
    routetrace:
      idle_timeout_ms: 1000
      final_timeout_ms: 30000
      heartbeat_interval_ms: 5000
      max_interactions: 10

Example:
    >>> from routetrace.infrastructure.config import load_config
    >>> config = load_config("config/routetrace.yaml")
    >>> config.idle_timeout_ms
    1000.0
"""

import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from routetrace.core.errors import ConfigurationError
from routetrace.infrastructure.utility.pydantic_validation import format_validation_error

CONFIG_PATH_ENV = "ROUTETRACE_CONFIG"

DEFAULT_IDLE_TIMEOUT_MS = 1000
DEFAULT_FINAL_TIMEOUT_MS = 30000
DEFAULT_HEARTBEAT_INTERVAL_MS = 5000
DEFAULT_MAX_INTERACTIONS = 10


class TrackerConfig(BaseModel):
    """Timeouts and capacities shared by the trackers and the interaction cache."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    idle_timeout_ms: float = Field(
        default=DEFAULT_IDLE_TIMEOUT_MS,
        gt=0,
        description="Time without open children after which a span finishes",
    )
    final_timeout_ms: float = Field(
        default=DEFAULT_FINAL_TIMEOUT_MS,
        gt=0,
        description="Absolute ceiling on span duration, regardless of activity",
    )
    heartbeat_interval_ms: float = Field(
        default=DEFAULT_HEARTBEAT_INTERVAL_MS,
        gt=0,
        description="Interval between forward-progress checks",
    )
    max_interactions: int = Field(
        default=DEFAULT_MAX_INTERACTIONS,
        gt=0,
        description="Capacity of the interaction correlation cache",
    )
    wait_for_pageload_finish_signal: bool = Field(
        default=False,
        description="Hold pageload spans open until the document reports ready",
    )
    mark_background_span: bool = Field(
        default=True,
        description="Cancel active spans when the document becomes hidden",
    )
    enable_interactions: bool = Field(
        default=False,
        description="Create idle spans for user interactions (ui.action.*)",
    )
    enable_inp: bool = Field(
        default=True,
        description="Correlate interaction performance entries with routes",
    )

    def __init__(self, **data: Any) -> None:
        try:
            super().__init__(**data)
        except ValidationError as e:
            raise ConfigurationError(format_validation_error(e, "tracker configuration")) from e


def _select_section(data: dict, path: str) -> Any:
    """Dot-notation access into a loaded YAML document."""
    current: Any = data
    for key in path.split("."):
        if not isinstance(current, dict) or key not in current:
            return None
        current = current[key]
    return current


def load_config(path: str | None = None, section: str = "routetrace") -> TrackerConfig:
    """
    Load a TrackerConfig from YAML.

    Args:
        path: YAML file path. Falls back to the ROUTETRACE_CONFIG environment
              variable (a .env file is honoured). With neither, defaults are used.
        section: Dot-notation key of the mapping holding the options.

    Raises:
        FileNotFoundError: If the given file does not exist
        ConfigurationError: If the file or section is malformed or values are invalid
    """
    if path is None:
        load_dotenv()
        path = os.getenv(CONFIG_PATH_ENV)
    if not path:
        return TrackerConfig()

    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ConfigurationError(f"Invalid config: expected mapping, got {type(data).__name__}")

    options = _select_section(data, section) if section else data
    if options is None:
        return TrackerConfig()
    if not isinstance(options, dict):
        raise ConfigurationError(
            f"Invalid config section '{section}': expected mapping, got {type(options).__name__}"
        )
    return TrackerConfig(**options)
