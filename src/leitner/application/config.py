from pathlib import Path
from typing import Annotated, Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import (
    BaseSettings,
    NoDecode,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from leitner.domain.constants import DEFAULT_ACTIVITY_WINDOW_DAYS, DEFAULT_QUIZ_SIZE

SUPPORTED_SCHEMES = ("memory", "json")


def _config_files() -> list[Path]:
    return [
        Path.home() / ".config/leitner/config.toml",
        Path.home() / ".leitner.toml",
    ]


class AppConfig(BaseSettings):
    """
    Single source of environment-specific values for server, client and CLI.
    Supports loading from:
    1. Config file (~/.config/leitner/config.toml or ~/.leitner.toml)
    2. Environment variables (LEITNER_*)
    3. Manual overrides (CLI / create_app)
    """

    model_config = SettingsConfigDict(
        env_prefix="LEITNER_",
        extra="ignore",
    )

    # Endpoints
    api_base_url: str = "http://127.0.0.1:5000/api"
    database_uri: str = "json://~/.config/leitner/cards.json"
    cors_origins: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: ["http://localhost:3000"]
    )

    # Server
    host: str = "127.0.0.1"
    port: int = 5000
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # Study defaults
    default_owner: str = "default"
    activity_window_days: int = Field(default=DEFAULT_ACTIVITY_WINDOW_DAYS, ge=0)
    quiz_size: int = Field(default=DEFAULT_QUIZ_SIZE, ge=1)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        from pydantic_settings import TomlConfigSettingsSource

        # First existing file wins
        toml_file = next((f for f in _config_files() if f.exists()), None)

        if toml_file:
            return (
                init_settings,
                env_settings,
                TomlConfigSettingsSource(settings_cls, toml_file=toml_file),
            )
        return (init_settings, env_settings)

    @field_validator("cors_origins", mode="before")
    @classmethod
    def split_origins(cls, v: Any) -> Any:
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @field_validator("database_uri")
    @classmethod
    def check_scheme(cls, v: str) -> str:
        scheme, sep, _ = v.partition("://")
        if not sep or scheme not in SUPPORTED_SCHEMES:
            raise ValueError(
                f"Unsupported database_uri '{v}'. Use one of: "
                + ", ".join(f"{s}://" for s in SUPPORTED_SCHEMES)
            )
        return v

    @property
    def database_scheme(self) -> str:
        return self.database_uri.partition("://")[0]

    @property
    def database_path(self) -> Path | None:
        """Filesystem path for file-backed stores, None for `memory://`."""
        if self.database_scheme != "json":
            return None
        return Path(self.database_uri.partition("://")[2]).expanduser()


def resolve_config(overrides: dict[str, Any] | None = None) -> AppConfig:
    """
    Multi-layered configuration resolution.
    1. Defaults in AppConfig
    2. ~/.config/leitner/config.toml (if exists)
    3. Environment variables (LEITNER_*)
    4. overrides (passed from Typer or tests), None values ignored
    """
    overrides = {k: v for k, v in (overrides or {}).items() if v is not None}
    return AppConfig(**overrides)
