"""Unit tests for environment settings."""

import json
from pathlib import Path

import pytest

from vlnorm.core.errors import InvalidSpecError
from vlnorm.infra.settings import NormalizerSettings
from vlnorm.normalize import Normalizer


class TestNormalizerSettings:
    """Tests for NormalizerSettings."""

    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test defaults without environment variables."""
        monkeypatch.delenv("VLNORM_STRICT", raising=False)
        monkeypatch.delenv("VLNORM_CONFIG_PATH", raising=False)
        settings = NormalizerSettings(_env_file=None)
        assert settings.strict is False
        assert settings.config_path is None
        assert settings.load_config() is None

    def test_from_env(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        """Test values read from the environment."""
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"errorbar": {"ticks": True}}), encoding="utf-8")
        monkeypatch.setenv("VLNORM_STRICT", "true")
        monkeypatch.setenv("VLNORM_CONFIG_PATH", str(path))

        settings = NormalizerSettings(_env_file=None)

        assert settings.strict is True
        assert settings.load_config() == {"errorbar": {"ticks": True}}

    def test_invalid_json(self, tmp_path: Path) -> None:
        """Test unreadable config files."""
        path = tmp_path / "config.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(InvalidSpecError, match="Cannot read config file"):
            NormalizerSettings(config_path=path).load_config()

    def test_missing_file(self, tmp_path: Path) -> None:
        """Test config paths that do not exist."""
        with pytest.raises(InvalidSpecError):
            NormalizerSettings(config_path=tmp_path / "missing.json").load_config()

    def test_not_an_object(self, tmp_path: Path) -> None:
        """Test config files holding something other than an object."""
        path = tmp_path / "config.json"
        path.write_text("[1, 2]", encoding="utf-8")
        with pytest.raises(InvalidSpecError, match="must contain a JSON object"):
            NormalizerSettings(config_path=path).load_config()


class TestNormalizerWithSettings:
    """Tests for settings applied by the normalizer."""

    def test_strict_from_settings(self) -> None:
        """Test the settings decide strictness unless the caller does."""
        settings = NormalizerSettings(strict=True)
        assert Normalizer(settings=settings).strict is True
        assert Normalizer(strict=False, settings=settings).strict is False

    def test_config_file_below_caller_config(self, tmp_path: Path) -> None:
        """Test the config file applies below the caller config."""
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"errorbar": {"ticks": True, "rule": False}}), encoding="utf-8")
        settings = NormalizerSettings(config_path=path)

        spec = {"mark": "errorbar", "encoding": {"y": {"field": "v", "type": "quantitative"}}}
        result = Normalizer({"errorbar": {"rule": True}}, settings=settings).normalize(spec)

        assert [layer["mark"]["role"] for layer in result.spec["layer"]] == ["ticks", "ticks", "rule"]
