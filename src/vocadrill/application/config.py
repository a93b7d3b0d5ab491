from pathlib import Path
from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from vocadrill.domain.constants import (
    DEFAULT_SESSION_LIMIT,
    MASTERY_EASE_THRESHOLD,
    MASTERY_MIN_REPETITIONS,
    SECONDS_PER_ITEM,
)

CONFIG_FILES = [
    Path.home() / ".config/vocadrill/config.toml",
    Path.home() / ".vocadrill.toml",
]


class AppConfig(BaseSettings):
    """
    Configuration model for vocadrill.
    Supports loading from:
    1. Environment variables (VOCADRILL_*)
    2. Config file (~/.config/vocadrill/config.toml or ~/.vocadrill.toml)
    3. Manual overrides (CLI / API)
    """

    model_config = SettingsConfigDict(
        env_prefix="VOCADRILL_",
        extra="ignore",
    )

    # Storage
    storage_backend: Literal["json", "memory"] = "json"
    data_dir: Path = Field(default_factory=lambda: Path.home() / ".local/share/vocadrill")

    # Sessions
    session_limit: int = Field(default=DEFAULT_SESSION_LIMIT, ge=1)
    learner_level: Literal["beginner", "intermediate", "advanced"] = "intermediate"

    # Statistics
    seconds_per_item: int = Field(default=SECONDS_PER_ITEM, ge=0)
    mastery_ease_threshold: float = MASTERY_EASE_THRESHOLD
    mastery_repetitions: int = Field(default=MASTERY_MIN_REPETITIONS, ge=1)

    # Logging: 0 = warnings, 1 = info, 2+ = debug. The CLI -v flag overrides it.
    verbose: int = Field(default=0, ge=0)

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

        # First existing file wins; init (CLI) overrides take final precedence.
        toml_file = next((f for f in CONFIG_FILES if f.exists()), None)

        if toml_file:
            return (
                init_settings,
                env_settings,
                TomlConfigSettingsSource(settings_cls, toml_file=toml_file),
            )
        return (init_settings, env_settings)

    @field_validator("data_dir", mode="before")
    @classmethod
    def resolve_data_dir(cls, v: Any) -> Path:
        return Path(v).expanduser().resolve()


def resolve_config(cli_overrides: dict[str, Any] | None = None) -> AppConfig:
    """
    Multi-layered configuration resolution.
    1. Defaults in AppConfig
    2. ~/.config/vocadrill/config.toml (if exists)
    3. Environment variables (VOCADRILL_*)
    4. cli_overrides (passed from Typer or the HTTP layer); None values are dropped
    """
    overrides = {k: v for k, v in (cli_overrides or {}).items() if v is not None}
    return AppConfig(**overrides)
