from pathlib import Path
from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from vocabmaster.domain.constants import (
    DEFAULT_CRAM_LIMIT,
    DEFAULT_MAX_REQUEUES,
    DEFAULT_SESSION_SIZE,
)

CONFIG_FILES = [
    Path.home() / ".config/vocabmaster/config.toml",
    Path.home() / ".vocabmaster.toml",
]


class AppConfig(BaseSettings):
    """
    Configuration model for vocabmaster.
    Supports loading from:
    1. Environment variables (VOCABMASTER_*)
    2. Config file (~/.config/vocabmaster/config.toml)
    3. Manual overrides (CLI)
    """

    model_config = SettingsConfigDict(
        env_prefix="VOCABMASTER_",
        extra="ignore",
    )

    # Paths
    database_path: Path = Field(
        default_factory=lambda: Path.home() / ".local/share/vocabmaster/vocabmaster.db"
    )

    # Session
    session_size: int = DEFAULT_SESSION_SIZE
    cram_limit: int = DEFAULT_CRAM_LIMIT
    hard_mode: bool = False
    failure_policy: Literal["requeue", "advance"] = "requeue"
    max_requeues: int = DEFAULT_MAX_REQUEUES
    priority_ordering: bool = False

    verbose: int = 1

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

        # Find the first existing file
        toml_file = next((f for f in CONFIG_FILES if f.exists()), None)

        # Earlier sources win: CLI overrides, then env, then the file
        if toml_file:
            return (
                init_settings,
                env_settings,
                TomlConfigSettingsSource(settings_cls, toml_file=toml_file),
            )
        return (init_settings, env_settings)

    @field_validator("database_path", mode="before")
    @classmethod
    def resolve_path(cls, v: Any) -> Path:
        return Path(v).expanduser().resolve()

    @field_validator("session_size", "cram_limit")
    @classmethod
    def positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("must be at least 1")
        return v

    @field_validator("max_requeues")
    @classmethod
    def non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("must be >= 0")
        return v


def resolve_config(cli_overrides: dict[str, Any] | None = None) -> AppConfig:
    """
    Multi-layered configuration resolution.
    1. Defaults in AppConfig
    2. ~/.config/vocabmaster/config.toml (if exists)
    3. Environment variables (VOCABMASTER_*)
    4. cli_overrides (passed from Typer)
    """
    overrides = {k: v for k, v in (cli_overrides or {}).items() if v is not None}
    return AppConfig(**overrides)
