"""
medtriage/config.py
Feature toggles for the triage engine. Persists to medtriage_config.json.
Toggles are read at request time and gate whether a component runs at all;
they never change the analysis algorithms themselves.
"""

from __future__ import annotations

import copy
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from medtriage.errors import ConfigurationDisabled

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "medtriage_config.json"

DEFAULT_CONFIG: Dict[str, Dict[str, Any]] = {
    "hipaa_compliance": {
        "enabled": True,
        "auto_redact_phi": True,
        "redact_names_and_dates": False,
        "store_compliance_metadata": True,
        "notify_on_phi_detection": True,
    },
    "voice_interface": {
        "enabled": True,
        "input_enabled": True,
        "output_enabled": True,
        "default_voice_gender": "female",
        "max_audio_duration": 60,  # seconds
    },
    "ehr_integration": {
        "enabled": True,
        "require_explicit_consent": True,
        "data_types": ["medications", "allergies", "conditions"],
        "refresh_interval": 24,  # hours
    },
    "triage_system": {
        "enabled": True,
        "auto_prioritize": True,
        "escalate_emergencies": True,
        "notify_providers_on_urgent": True,
    },
    "doctor_recommendation": {
        "enabled": True,
        "include_specialties": True,
        "include_provider_types": True,
        "max_recommendations": 3,  # 0 = no cap
    },
    "context": {
        "max_history": 10,
        "idle_expiry_minutes": 30,
        "sweep_interval_minutes": 15,
        "feedback_interval_hours": 24,
    },
    "global": {
        "debug_mode": False,
        "log_enhanced_responses": True,
        "require_auth_for_enhanced_features": True,
        "db_path": "medtriage.db",
    },
}


def _config_path(project_root: Optional[Path] = None) -> Path:
    root = project_root or Path.cwd()
    return root / CONFIG_FILENAME


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _check_sections(updates: Dict[str, Any]) -> None:
    unknown = [k for k in updates if k not in DEFAULT_CONFIG]
    if unknown:
        raise ValueError(f"Unknown configuration section(s): {', '.join(sorted(unknown))}")
    malformed = [k for k, v in updates.items() if not isinstance(v, dict)]
    if malformed:
        raise ValueError(f"Configuration section(s) must be objects: {', '.join(sorted(malformed))}")


def default_config() -> Dict[str, Any]:
    """Fresh copy of the defaults — callers may mutate it freely."""
    return copy.deepcopy(DEFAULT_CONFIG)


def load_config(project_root: Optional[Path] = None) -> Dict[str, Any]:
    """Load config from medtriage_config.json. Returns defaults if missing."""
    path = _config_path(project_root)
    if path.exists():
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            if isinstance(data, dict):
                _check_sections(data)
                return _merge(DEFAULT_CONFIG, data)
            logger.warning(f"Config ignored: {path} is not a JSON object")
        except (json.JSONDecodeError, OSError, ValueError) as e:
            logger.warning(f"Config load failed: {e}")
    return default_config()


def save_config(config: Dict[str, Any], project_root: Optional[Path] = None) -> Path:
    """Persist config to medtriage_config.json."""
    path = _config_path(project_root)
    path.write_text(json.dumps(config, indent=2), encoding="utf-8")
    return path


def update_config(config: Dict[str, Any], updates: Dict[str, Any]) -> Dict[str, Any]:
    """Return config with updates deep-merged in. Unknown or non-object sections are rejected."""
    _check_sections(updates)
    return _merge(config, updates)


def feature_enabled(config: Dict[str, Any], section: str, key: str = "enabled") -> bool:
    """
    A feature is on only if its section is enabled AND the specific key is set.
    Missing sections fall back to DEFAULT_CONFIG.
    """
    values = config.get(section)
    if values is None:
        values = DEFAULT_CONFIG.get(section, {})
    if not values.get("enabled", False):
        return False
    return bool(values.get(key, False))


def require_feature(config: Dict[str, Any], section: str, key: str = "enabled") -> None:
    """Raise ConfigurationDisabled when the toggle is off."""
    if not feature_enabled(config, section, key):
        raise ConfigurationDisabled(section, key)


def setting(config: Dict[str, Any], section: str, key: str) -> Any:
    """Read a non-boolean setting, falling back to the default."""
    values = config.get(section) or {}
    if key in values:
        return values[key]
    return DEFAULT_CONFIG[section][key]
