"""Configuration management for Form Autopilot."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_prefix="AUTOPILOT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Matching Configuration
    confirm_threshold: float = Field(0.5, description="Minimum confidence for the confirm route")
    min_term_length: int = Field(3, description="Shortest token kept by term extraction")

    # Template Store Configuration
    templates_dir: Path = Field(
        Path.home() / ".form_autopilot" / "forms",
        description="Directory holding template JSON files"
    )

    # Browser Configuration
    browser_headless: bool = Field(False, description="Run browser in headless mode")
    browser_timeout: int = Field(30, description="Browser operation timeout in seconds")
    viewport_width: int = Field(1366, description="Browser viewport width")
    viewport_height: int = Field(900, description="Browser viewport height")

    # Overlay Configuration
    highlight_color: str = Field("#6366f1", description="Overlay border and label colour")
    inspect_cancel_key: str = Field("Escape", description="Key that cancels an inspect session")

    # Application Configuration
    debug: bool = Field(False, description="Enable debug mode")
    log_level: str = Field("INFO", description="Logging level")


# Global settings instance
settings = Settings()
