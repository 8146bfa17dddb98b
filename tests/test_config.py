import os

import pytest

from cao_model.config.loaders import SETTINGS_ENV_VAR, load_settings, load_yaml_config, settings_from_dict
from cao_model.config.models import DEFAULT_SETTINGS, EngineSettings, ToleranceLevel
from cao_model.exceptions import ConfigError

ENGINE_YAML = os.path.join(os.path.dirname(__file__), "..", "config", "engine.yaml")


def test_defaults():
    settings = EngineSettings()
    assert settings.max_alternatives == 3
    assert settings.confidence_decay == 10.0
    assert settings.wage_basis == "monthly"
    assert settings.compliance_tolerance_pct == ToleranceLevel.EXACT.value
    assert settings.authoritative_sources == {"employes_sync"}
    assert load_settings() == DEFAULT_SETTINGS


def test_shipped_engine_yaml_matches_defaults():
    assert load_settings(ENGINE_YAML) == DEFAULT_SETTINGS


def test_top_level_settings_file(tmp_path):
    p = tmp_path / "engine.yaml"
    p.write_text("max_alternatives: 1\ncompliance_tolerance_pct: 5\nwage_basis: hourly\n")
    settings = load_settings(p)
    assert settings.max_alternatives == 1
    assert settings.compliance_tolerance_pct == ToleranceLevel.NORMAL.value
    assert settings.wage_basis == "hourly"


def test_settings_from_env_var(tmp_path, monkeypatch):
    p = tmp_path / "engine.yaml"
    p.write_text("engine:\n  category_tie_band: 15\n")
    monkeypatch.setenv(SETTINGS_ENV_VAR, str(p))
    assert load_settings().category_tie_band == 15.0


def test_empty_file_gives_defaults(tmp_path):
    p = tmp_path / "empty.yaml"
    p.write_text("")
    assert load_settings(p) == DEFAULT_SETTINGS


@pytest.mark.parametrize(
    "data",
    [
        {"max_alternatives": "three"},
        {"unknown_knob": 1},
        {"wage_basis": "weekly"},
        {"max_alternatives": -1},
        {"high_confidence_threshold": 50, "medium_confidence_threshold": 60},
        {"expiry_critical_days": 40},
    ],
)
def test_invalid_settings(data):
    with pytest.raises(ConfigError):
        settings_from_dict(data)


def test_missing_file(tmp_path):
    with pytest.raises(ConfigError, match="not found"):
        load_yaml_config(tmp_path / "nope.yaml")


def test_malformed_yaml(tmp_path):
    p = tmp_path / "bad.yaml"
    p.write_text("engine: [unclosed")
    with pytest.raises(ConfigError):
        load_settings(p)


def test_non_mapping_yaml(tmp_path):
    p = tmp_path / "list.yaml"
    p.write_text("- 1\n- 2\n")
    with pytest.raises(ConfigError, match="Expected a dictionary"):
        load_yaml_config(p)
