from .loaders import load_settings, load_yaml_config, settings_from_dict
from .models import DEFAULT_SETTINGS, EngineSettings, ToleranceLevel

__all__ = [
    "DEFAULT_SETTINGS",
    "EngineSettings",
    "ToleranceLevel",
    "load_settings",
    "load_yaml_config",
    "settings_from_dict",
]
