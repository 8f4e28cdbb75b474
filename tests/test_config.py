"""Tests for engine configuration loading."""

import json

import pytest
from pydantic import ValidationError

from tesouro.config import CONFIG_ENV_VAR, EngineConfig, load_config, save_config
from tesouro.state.schema import Pillar


class TestDefaults:
    def test_reference_balance(self):
        config = EngineConfig()
        assert config.draw_count == 5
        assert config.max_plays_per_turn == 3
        assert config.decay[Pillar.NATURE] == 0.5
        assert config.level_thresholds[5] == 800
        assert config.victory_visitors == 200
        assert config.default_biome == "floresta"

    def test_event_turns(self):
        config = EngineConfig()
        assert [t for t in range(1, 10) if config.is_event_turn(t)] == [2, 3, 4, 6, 8, 9]

    def test_bounds_validated(self):
        with pytest.raises(ValidationError):
            EngineConfig(council_probability=1.5)


class TestLoadConfig:
    """YAML and JSON overrides merged over the defaults."""

    def test_missing_file_gives_defaults(self, tmp_path):
        assert load_config(tmp_path / "missing.yaml") == EngineConfig()

    def test_yaml_override(self, tmp_path):
        path = tmp_path / "tesouro.yaml"
        path.write_text("max_plays_per_turn: 4\ndefault_biome: praia\n", encoding="utf-8")
        config = load_config(path)
        assert config.max_plays_per_turn == 4
        assert config.default_biome == "praia"
        assert config.draw_count == 5

    def test_json_override(self, tmp_path):
        path = tmp_path / "tesouro.json"
        path.write_text(json.dumps({"discard_unplayed_on_redraw": False}), encoding="utf-8")
        assert load_config(path).discard_unplayed_on_redraw is False

    def test_env_var(self, tmp_path, monkeypatch):
        path = tmp_path / "env.yaml"
        path.write_text("reward_offer_size: 2\n", encoding="utf-8")
        monkeypatch.setenv(CONFIG_ENV_VAR, str(path))
        assert load_config().reward_offer_size == 2

    def test_malformed_file_gives_defaults(self, tmp_path, caplog):
        path = tmp_path / "bad.yaml"
        path.write_text("draw_count: [1, 2", encoding="utf-8")
        assert load_config(path) == EngineConfig()
        assert "using defaults" in caplog.text

    def test_invalid_value_gives_defaults(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("council_probability: 3\n", encoding="utf-8")
        assert load_config(path).council_probability == 0.6

    def test_non_mapping_gives_defaults(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- 1\n- 2\n", encoding="utf-8")
        assert load_config(path) == EngineConfig()


class TestSaveConfig:
    def test_round_trip(self, tmp_path):
        config = EngineConfig(max_hand=9, income_base=7)
        path = tmp_path / "nested" / "tesouro.yaml"
        assert save_config(config, path)
        assert load_config(path) == config
