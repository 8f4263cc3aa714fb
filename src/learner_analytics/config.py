"""Application configuration using pydantic-settings."""

import functools
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict


def _find_project_root() -> Path:
    """Find project root by locating pyproject.toml."""
    current = Path(__file__).resolve()
    for parent in [current] + list(current.parents):
        if (parent / "pyproject.toml").exists():
            return parent
    return Path(__file__).resolve().parent.parent.parent


class YamlSettingsSource(PydanticBaseSettingsSource):
    """Custom settings source that loads from settings.yaml."""

    def get_field_value(self, field_name: str) -> tuple[Any, str, bool]:
        """Not used - we implement __call__ instead."""
        return None, "", False

    def __call__(self) -> dict[str, Any]:
        """Load settings from YAML file."""
        yaml_path = _find_project_root() / "config" / "settings.yaml"
        if not yaml_path.exists():
            return {}

        with open(yaml_path, encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}

        # Flatten nested structure to match Settings field names
        flattened = {}
        if 'server' in data:
            flattened['host'] = data['server'].get('host')
            flattened['port'] = data['server'].get('port')
        if 'storage' in data:
            flattened['storage_backend'] = data['storage'].get('backend')
            flattened['data_dir'] = data['storage'].get('data_dir')
        if 'mongo' in data:
            flattened['mongo_uri'] = data['mongo'].get('uri')
            flattened['mongo_database'] = data['mongo'].get('database')
            flattened['mongo_users_collection'] = data['mongo'].get('users_collection')
        if 'analytics' in data:
            analytics = data['analytics']
            flattened['dashboard_skill_limit'] = analytics.get('dashboard_skill_limit')
            flattened['dashboard_daily_stats_window'] = (
                analytics.get('dashboard_daily_stats_window')
            )
            flattened['role_match_top_n'] = analytics.get('role_match_top_n')

        # Remove None values
        return {k: v for k, v in flattened.items() if v is not None}


class Settings(BaseSettings):
    """Application settings loaded from environment and config files."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Authentication (optional: None disables auth)
    app_secret: str | None = Field(default=None)

    # Server
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000)

    # Storage
    storage_backend: Literal["json", "mongo"] = Field(default="json")
    data_dir: Path | None = Field(default=None)
    mongo_uri: str = Field(default="mongodb://localhost:27017")
    mongo_database: str = Field(default="learning_platform")
    mongo_users_collection: str = Field(default="users")

    # Analytics
    dashboard_skill_limit: int = Field(default=5)
    dashboard_daily_stats_window: int = Field(default=30)
    role_match_top_n: int = Field(default=5)

    # Paths
    project_root: Path = Field(default_factory=_find_project_root)

    @property
    def users_dir(self) -> Path:
        d = self.data_dir or self.project_root / "data" / "users"
        d.mkdir(parents=True, exist_ok=True)
        return d

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Customise settings sources to include YAML file.

        Priority order (highest to lowest):
        1. init_settings (arguments passed to Settings())
        2. env_settings (environment variables)
        3. dotenv_settings (.env file)
        4. YamlSettingsSource (settings.yaml)
        5. file_secret_settings
        """
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlSettingsSource(settings_cls),
            file_secret_settings,
        )


@functools.lru_cache
def get_settings() -> Settings:
    """Get application settings singleton."""
    return Settings()
