import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from cerberus import Validator
from pydantic import ValidationError

from cao_model.exceptions import ConfigError

from .models import EngineSettings

# Configure logger for this module
logger = logging.getLogger(__name__)

SETTINGS_ENV_VAR = "CAO_MODEL_SETTINGS"

# Shape check of the raw YAML document before pydantic sees it; pydantic owns
# the value constraints.
SETTINGS_SCHEMA: Dict[str, Dict[str, Any]] = {
    "exact_match_epsilon": {"type": "number"},
    "max_alternatives": {"type": "integer"},
    "confidence_decay": {"type": "number"},
    "category_tie_band": {"type": "number"},
    "category_hint_bonus": {"type": "number"},
    "high_confidence_threshold": {"type": "number"},
    "medium_confidence_threshold": {"type": "number"},
    "wage_basis": {"type": "string", "allowed": ["hourly", "monthly", "yearly"]},
    "compliance_tolerance_pct": {"type": "number"},
    "significant_premium_amount": {"type": "number"},
    "full_time_hours": {"type": "number"},
    "authoritative_sources": {"type": "list", "schema": {"type": "string"}},
    "expiry_upcoming_days": {"type": "integer"},
    "expiry_urgent_days": {"type": "integer"},
    "expiry_critical_days": {"type": "integer"},
    "refresh_interval_seconds": {"type": "number"},
}


def load_yaml_config(config_path: Union[str, Path]) -> Dict[str, Any]:
    """
    Loads configuration data from a YAML file.

    Args:
        config_path: Path to the YAML configuration file.

    Returns:
        A dictionary containing the loaded configuration.

    Raises:
        ConfigError: If the file cannot be found, parsed, or is not a mapping.
    """
    config_path = Path(config_path)
    logger.info(f"Attempting to load configuration from: {config_path}")

    if not config_path.is_file():
        logger.error(f"Configuration file not found at path: {config_path}")
        raise ConfigError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            config_data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        logger.exception(f"Error parsing YAML configuration file {config_path}: {e}")
        raise ConfigError(f"Error parsing YAML file {config_path}") from e
    except OSError as e:
        raise ConfigError(f"Could not read configuration file {config_path}: {e}") from e

    if config_data is None:
        config_data = {}
    if not isinstance(config_data, dict):
        logger.error(f"Configuration file {config_path} did not parse into a dictionary.")
        raise ConfigError(
            f"Invalid configuration format in {config_path}: Expected a dictionary."
        )

    logger.info(f"Successfully loaded configuration from {config_path}")
    return config_data


def settings_from_dict(data: Dict[str, Any]) -> EngineSettings:
    """Validate a raw settings mapping and build EngineSettings."""
    validator = Validator(SETTINGS_SCHEMA, allow_unknown=False)
    if not validator.validate(data):
        raise ConfigError(f"Settings validation error: {validator.errors}")
    try:
        return EngineSettings(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid settings: {e}") from e


def load_settings(config_path: Optional[Union[str, Path]] = None) -> EngineSettings:
    """
    Load EngineSettings.

    Priority: explicit ``config_path``, then the ``CAO_MODEL_SETTINGS``
    environment variable, then built-in defaults. A YAML document may hold the
    settings at top level or under an ``engine`` key.
    """
    path = config_path or os.getenv(SETTINGS_ENV_VAR)
    if not path:
        logger.info("No settings file configured, using default engine settings")
        return EngineSettings()

    data = load_yaml_config(path)
    if "engine" in data and isinstance(data["engine"], dict):
        data = data["engine"]
    settings = settings_from_dict(data)
    logger.info("Loaded engine settings from %s", path)
    return settings
