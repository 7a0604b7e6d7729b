"""Tests for melodyquest.core.config – deployment YAML."""

from __future__ import annotations

from pathlib import Path

import pytest

from melodyquest.core.config import (
    DEFAULT_TOKENS,
    DeploymentConfig,
    load_config,
    parse_config,
)
from melodyquest.core.errors import ConfigError
from melodyquest.core.ledger import LedgerPolicy
from melodyquest.core.qr import ShortLink


# ===========================================================================
# Defaults and bundled file
# ===========================================================================

class TestDefaults:
    def test_dataclass_defaults(self):
        config = DeploymentConfig()
        assert config.navigation_ceiling == 6
        assert config.blocking_scenes == (4,)
        assert config.commit_threshold == 2
        assert config.ledger_policy is LedgerPolicy.DEDUPE
        assert config.wheel_slices == ("C",) * 6
        assert config.alphabet == ("A", "B", "C", "D", "E", "F")

    def test_tone_for(self):
        config = DeploymentConfig()
        assert config.tone_for("C") == pytest.approx(523.25)
        assert config.tone_for("?") == 440.0

    def test_bundled_deployment(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.delenv("MELODYQUEST_CONFIG", raising=False)
        config = load_config()
        assert config.scene_rewards == {5: "E"}
        assert config.tokens == DEFAULT_TOKENS
        assert ShortLink("qrco.de", "bgMQ5", 5) in config.short_links
        assert ShortLink("qrco.de", "bgMQ7", 7) in config.short_links

    def test_env_override(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        path = tmp_path / "deploy.yaml"
        path.write_text("commit_threshold: 4\n", encoding="utf-8")
        monkeypatch.setenv("MELODYQUEST_CONFIG", str(path))
        assert load_config().commit_threshold == 4

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(ConfigError):
            load_config(tmp_path / "nope.yaml")

    def test_empty_file_uses_defaults(self, tmp_path: Path):
        path = tmp_path / "deploy.yaml"
        path.write_text("", encoding="utf-8")
        assert load_config(path) == DeploymentConfig()

    def test_non_mapping_rejected(self, tmp_path: Path):
        path = tmp_path / "deploy.yaml"
        path.write_text("- 1\n- 2\n", encoding="utf-8")
        with pytest.raises(ConfigError):
            load_config(path)


# ===========================================================================
# parse_config
# ===========================================================================

class TestParseConfig:
    def test_append_policy(self):
        assert parse_config({"ledger_policy": "APPEND"}).ledger_policy is LedgerPolicy.APPEND

    def test_custom_wheel(self):
        config = parse_config({"wheel": {"slices": ["A", "B", "C"]}})
        assert config.wheel_slices == ("A", "B", "C")

    def test_custom_tokens(self):
        config = parse_config({"tokens": {"X": 100, "Y": 200}, "wheel": {"slices": ["X"]}})
        assert config.alphabet == ("X", "Y")

    @pytest.mark.parametrize(
        "raw",
        [
            {"ledger_policy": "sometimes"},
            {"commit_threshold": 0},
            {"commit_threshold": "two"},
            {"navigation_ceiling": -1},
            {"navigation_ceiling": True},
            {"scene_rewards": {5: "Z"}},
            {"wheel": {"slices": ["C", "Q"]}},
            {"tokens": {"AB": 440}},
            {"tokens": {"A": "loud"}},
            {"tokens": []},
            {"short_links": [{"host": "qrco.de"}]},
            {"short_links": [{"host": "qrco.de", "path": "x", "scene": "five"}]},
        ],
    )
    def test_invalid(self, raw):
        with pytest.raises(ConfigError):
            parse_config(raw)

    def test_error_names_source(self):
        with pytest.raises(ConfigError, match="deploy.yaml"):
            parse_config({"commit_threshold": 0}, source="deploy.yaml")
