import sys
from pathlib import Path
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from kanjiwall.domain.constants import (
    AREA_MARGIN,
    DEFAULT_COLORS,
    DEFAULT_FONT_NAMES,
    DEFAULT_WINDOW_HOURS,
    MINOR_GAP,
)


def config_files() -> list[Path]:
    return [
        Path.home() / ".config/kanjiwall/config.toml",
        Path.home() / ".kanjiwall.toml",
    ]


def default_font_name() -> str:
    return DEFAULT_FONT_NAMES.get(sys.platform, DEFAULT_FONT_NAMES["linux"])


class AppConfig(BaseSettings):
    """
    Configuration model for kanjiwall.
    Supports loading from:
    1. Environment variables (KANJIWALL_*)
    2. Config file (~/.config/kanjiwall/config.toml)
    3. Manual overrides (CLI)
    """

    model_config = SettingsConfigDict(
        env_prefix="KANJIWALL_",
        extra="ignore",
    )

    # Account
    api_key: str = ""

    # Refresh
    interval: int = Field(default=5, ge=1)  # minutes
    window_hours: int = Field(default=DEFAULT_WINDOW_HOURS, ge=0)

    # Wallpaper
    current_level_only: bool = True
    background: Path | None = None
    output: Path = Field(default_factory=lambda: Path.home() / ".config/kanjiwall/wallpaper.png")
    left_border: int = Field(default=0, ge=0)
    top_border: int = Field(default=0, ge=0)
    bottom_border: int = Field(default=0, ge=0)
    margin: int = Field(default=AREA_MARGIN, ge=0)
    minor_gap: int = Field(default=MINOR_GAP, ge=0)

    # Font
    font_name: str = Field(default_factory=default_font_name)
    bold_font: bool = False
    italic_font: bool = False

    # Colors: state -> [foreground, background]
    colors: dict[str, list[str]] = Field(
        default_factory=lambda: {state: list(pair) for state, pair in DEFAULT_COLORS.items()}
    )

    # Logging
    log_dir: Path = Field(default_factory=lambda: Path.home() / ".config/kanjiwall/logs")
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

        # First existing file wins
        toml_file = next((f for f in config_files() if f.exists()), None)

        if toml_file:
            return (
                init_settings,
                env_settings,
                TomlConfigSettingsSource(settings_cls, toml_file=toml_file),
            )
        return (
            init_settings,
            env_settings,
        )

    @field_validator("background", "output", "log_dir", mode="before")
    @classmethod
    def resolve_path(cls, v: Any) -> Path | None:
        if v is None or v == "":
            return None
        return Path(v).expanduser().resolve()

    @field_validator("colors")
    @classmethod
    def validate_colors(cls, v: dict[str, list[str]]) -> dict[str, list[str]]:
        for state, pair in v.items():
            if len(pair) != 2:
                raise ValueError(f"Color entry for {state!r} needs [foreground, background]")
        return v


def resolve_config(cli_overrides: dict[str, Any] | None = None) -> AppConfig:
    """
    Multi-layered configuration resolution.
    1. Defaults in AppConfig
    2. ~/.config/kanjiwall/config.toml (if exists)
    3. Environment variables (KANJIWALL_*)
    4. cli_overrides (passed from Typer)
    """
    overrides = {k: v for k, v in (cli_overrides or {}).items() if v is not None}
    return AppConfig(**overrides)
