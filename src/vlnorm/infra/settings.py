"""Environment-driven settings for the normalizer."""

import json
from pathlib import Path
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from vlnorm.core.errors import InvalidSpecError
from vlnorm.infra.logging import get_logger

logger = get_logger(__name__)


class NormalizerSettings(BaseSettings):
    """Settings for normalizer defaults."""

    model_config = SettingsConfigDict(
        env_prefix="VLNORM_",
        env_file=".env",
        extra="ignore",
    )

    strict: bool = Field(default=False, description="Treat every warning as a fatal error by default")
    config_path: Path | None = Field(None, description="JSON file with config overrides below the caller config")

    def load_config(self) -> dict[str, Any] | None:
        """Read the config overrides file, if one is set.

        Returns:
            Parsed config mapping, or None when no file is configured

        Raises:
            InvalidSpecError: If the file is not valid JSON or not a JSON object
        """
        if self.config_path is None:
            return None

        try:
            config = json.loads(self.config_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            msg = f"Cannot read config file {self.config_path}: {e}"
            raise InvalidSpecError(msg, hint="Point VLNORM_CONFIG_PATH at a JSON object") from e

        if not isinstance(config, dict):
            msg = f"Config file {self.config_path} must contain a JSON object"
            raise InvalidSpecError(msg)

        logger.debug("Loaded config file", path=str(self.config_path), keys=sorted(config))
        return config
