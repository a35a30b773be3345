"""Application configuration using pydantic-settings."""

from pathlib import Path
from typing import Any

import structlog
import yaml
from pydantic.fields import FieldInfo
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

logger = structlog.get_logger()

CONFIG_DIR = Path.home() / ".typedb-contexts"
CONFIG_FILE = CONFIG_DIR / "config.yaml"


def read_user_config() -> dict[str, Any]:
    """Read the user config file, returning an empty dict when unusable."""
    if not CONFIG_FILE.exists():
        return {}
    try:
        with open(CONFIG_FILE) as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.warning("user_config_unreadable", path=str(CONFIG_FILE), error=str(e))
        return {}
    if not isinstance(data, dict):
        logger.warning("user_config_not_a_mapping", path=str(CONFIG_FILE))
        return {}
    return data


def save_user_config(values: dict[str, Any]) -> Path:
    """Merge values into the user config file and return its path."""
    data = read_user_config()
    data.update(values)

    # CONFIG_FILE may be redirected in tests, so derive the directory from it
    CONFIG_FILE.parent.mkdir(parents=True, exist_ok=True)
    with open(CONFIG_FILE, "w") as f:
        yaml.dump(data, f, default_flow_style=False)

    return CONFIG_FILE


class UserConfigSource(PydanticBaseSettingsSource):
    """Settings source backed by ~/.typedb-contexts/config.yaml."""

    def get_field_value(
        self, field: FieldInfo, field_name: str
    ) -> tuple[Any, str, bool]:
        # Values are produced all at once in __call__
        return None, field_name, False

    def __call__(self) -> dict[str, Any]:
        return {
            key: value
            for key, value in read_user_config().items()
            if key in self.settings_cls.model_fields
        }


class Settings(BaseSettings):
    """
    Application settings.

    Sources, highest priority first:
    1. Environment variables (e.g., TYPEDB_CONTEXTS_TYPEDB_URL=http://host:8000)
    2. .env file in the working directory
    3. User config file (~/.typedb-contexts/config.yaml)
    4. Defaults
    """

    model_config = SettingsConfigDict(
        env_prefix="TYPEDB_CONTEXTS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # TypeDB HTTP API
    typedb_url: str = "http://localhost:8000"
    username: str = "admin"
    password: str = "password"
    request_timeout: float = 60.0

    # Context catalogs (directories of <name>/schema.tql + seed.tql)
    catalog_dir: Path | None = None
    demo_catalog_dir: Path | None = None

    # Physical database namespaces
    lesson_prefix: str = "learn_"
    demo_prefix: str = "demo_"

    # Logging
    debug: bool = False
    json_logs: bool = False

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            UserConfigSource(settings_cls),
            file_secret_settings,
        )

    def to_display(self) -> dict[str, Any]:
        """Settings as a dict for display, with the password masked."""
        data = self.model_dump()
        data["password"] = self._mask(self.password) if self.password else ""
        for key in ("catalog_dir", "demo_catalog_dir"):
            data[key] = str(data[key]) if data[key] is not None else ""
        return data

    @staticmethod
    def _mask(secret: str) -> str:
        """Mask a secret for display."""
        if len(secret) <= 8:
            return "*" * len(secret)
        return secret[:2] + "*" * (len(secret) - 4) + secret[-2:]


def get_settings() -> Settings:
    """Load settings fresh from all sources."""
    return Settings()


# Global settings instance
settings = Settings()
