"""
tests/test_config.py
JSON config: defaults, deep merge, toggles.
"""

import json
import logging

import pytest

from medtriage.config import (
    CONFIG_FILENAME,
    DEFAULT_CONFIG,
    default_config,
    feature_enabled,
    load_config,
    require_feature,
    save_config,
    setting,
    update_config,
)
from medtriage.errors import ConfigurationDisabled


class TestLoadSave:
    def test_missing_file_gives_defaults(self, tmp_path):
        assert load_config(tmp_path) == DEFAULT_CONFIG

    def test_defaults_are_a_fresh_copy(self):
        config = default_config()
        config['global']['debug_mode'] = True
        assert DEFAULT_CONFIG['global']['debug_mode'] is False

    def test_file_is_deep_merged(self, tmp_path):
        (tmp_path / CONFIG_FILENAME).write_text(json.dumps({
            "voice_interface": {"output_enabled": False},
        }), encoding="utf-8")
        config = load_config(tmp_path)
        assert config['voice_interface']['output_enabled'] is False
        assert config['voice_interface']['input_enabled'] is True
        assert config['triage_system'] == DEFAULT_CONFIG['triage_system']

    def test_malformed_file_warns_and_falls_back(self, tmp_path, caplog):
        (tmp_path / CONFIG_FILENAME).write_text("{not json", encoding="utf-8")
        with caplog.at_level(logging.WARNING, logger="medtriage.config"):
            assert load_config(tmp_path) == DEFAULT_CONFIG
        assert "Config load failed" in caplog.text

    def test_non_object_is_ignored(self, tmp_path):
        (tmp_path / CONFIG_FILENAME).write_text("[1, 2]", encoding="utf-8")
        assert load_config(tmp_path) == DEFAULT_CONFIG

    def test_save_then_load(self, tmp_path):
        config = default_config()
        config['doctor_recommendation']['max_recommendations'] = 5
        path = save_config(config, tmp_path)
        assert path == tmp_path / CONFIG_FILENAME
        assert load_config(tmp_path)['doctor_recommendation']['max_recommendations'] == 5


class TestToggles:
    def test_feature_requires_section_and_key(self, config):
        assert feature_enabled(config, 'voice_interface', 'output_enabled')
        config['voice_interface']['enabled'] = False
        assert not feature_enabled(config, 'voice_interface', 'output_enabled')
        assert not feature_enabled(config, 'voice_interface')

    def test_missing_section_uses_defaults(self):
        assert feature_enabled({}, 'triage_system', 'auto_prioritize')

    def test_require_feature(self, config):
        require_feature(config, 'hipaa_compliance')
        config['hipaa_compliance']['enabled'] = False
        with pytest.raises(ConfigurationDisabled, match="Feature disabled: hipaa_compliance.enabled"):
            require_feature(config, 'hipaa_compliance')

    def test_setting_falls_back_to_default(self):
        assert setting({}, 'context', 'max_history') == 10
        assert setting({'context': {'max_history': 4}}, 'context', 'max_history') == 4

    def test_update_config(self, config):
        updated = update_config(config, {'triage_system': {'auto_prioritize': False}})
        assert updated['triage_system']['auto_prioritize'] is False
        assert updated['triage_system']['escalate_emergencies'] is True
        assert config['triage_system']['auto_prioritize'] is True

    def test_update_config_rejects_unknown_sections(self, config):
        with pytest.raises(ValueError):
            update_config(config, {'nonsense': {}})

    @pytest.mark.parametrize("value", [False, "x", None, [1]])
    def test_update_config_rejects_non_object_sections(self, config, value):
        with pytest.raises(ValueError, match="must be objects"):
            update_config(config, {'triage_system': value})

    def test_empty_section_turns_feature_off(self):
        assert not feature_enabled({'triage_system': {}}, 'triage_system')


def test_non_object_section_in_file_falls_back(tmp_path, caplog):
    (tmp_path / CONFIG_FILENAME).write_text(json.dumps({"global": "x"}), encoding="utf-8")
    with caplog.at_level(logging.WARNING, logger="medtriage.config"):
        assert load_config(tmp_path) == DEFAULT_CONFIG
    assert "must be objects" in caplog.text
