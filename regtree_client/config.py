"""
Client configuration.

Values come from an optional YAML file and from command-line arguments; the
command line wins. Example file::

    connect_timeout: 5
    receive_timeout: 30
    max_prediction_turns: 200
    verbose: true
"""

from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from pydantic import BaseModel, Field, PositiveFloat, PositiveInt, ValidationError

from .core.errors import ConfigError


class ClientConfig(BaseModel):
    """Everything needed to open and run one session."""

    host: str = Field(min_length=1, description="Tree server host name or address")
    port: int = Field(ge=1, le=65535, description="Tree server TCP port")
    connect_timeout: Optional[PositiveFloat] = Field(default=None, description="Seconds allowed for connecting")
    receive_timeout: Optional[PositiveFloat] = Field(default=None, description="Seconds to wait for each reply")
    max_prediction_turns: Optional[PositiveInt] = Field(default=None, description="Query limit per prediction")
    verbose: bool = False

    @classmethod
    def from_sources(
        cls,
        cli_values: Dict[str, Any],
        config_path: Optional[Union[str, Path]] = None
    ) -> "ClientConfig":
        """
        Build a configuration from a YAML file overlaid with CLI values.

        Args:
            cli_values: Values from the command line; None means "not given"
            config_path: Optional YAML file with defaults

        Raises:
            ConfigError: the file cannot be read or the values are invalid
        """
        values = load_config(config_path) if config_path else {}
        values.update({key: value for key, value in cli_values.items() if value is not None})
        try:
            return cls(**values)
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration: {e}") from e


def load_config(path: Union[str, Path]) -> Dict[str, Any]:
    """Read a YAML mapping of configuration values."""
    try:
        with open(path, 'r') as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    return data
