"""Client configuration using Pydantic settings."""

import tempfile
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Client settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="DocSign Client")
    app_version: str = Field(default="1.0.0")
    debug: bool = Field(default=False)
    log_level: str = Field(default="INFO")

    # Local session server
    host: str = Field(default="127.0.0.1")
    port: int = Field(default=8100)

    # Document Store backend
    backend_url: str = Field(default="http://localhost:5000")
    request_timeout: float = Field(default=30.0)
    login_route: str = Field(default="/login")

    # Signature capture
    max_signature_upload_bytes: int = Field(default=5 * 1024 * 1024)
    signature_font_path: Optional[str] = Field(default=None)
    signature_font_size: int = Field(default=48)
    signature_text_padding: int = Field(default=10)
    draw_canvas_width: int = Field(default=280)
    draw_canvas_height: int = Field(default=120)
    draw_stroke_width: int = Field(default=2)

    # Page rendering
    default_container_width: int = Field(default=800)
    measurement_settle_delay: float = Field(default=0.5)

    # Transient previews
    preview_dir: str = Field(default_factory=lambda: str(Path(tempfile.gettempdir()) / "docsign-previews"))

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate logging level name."""
        allowed = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in allowed:
            raise ValueError(f"Log level must be one of {allowed}")
        return v.upper()

    @field_validator(
        "max_signature_upload_bytes",
        "signature_font_size",
        "draw_canvas_width",
        "draw_canvas_height",
        "draw_stroke_width",
        "default_container_width",
    )
    @classmethod
    def validate_positive(cls, v: int) -> int:
        """Sizes must be positive."""
        if v <= 0:
            raise ValueError("Value must be positive")
        return v

    @field_validator("backend_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    def get_preview_dir(self) -> Path:
        """Get preview directory as Path object."""
        return Path(self.preview_dir)

    def ensure_directories(self) -> None:
        """Ensure all required directories exist."""
        self.get_preview_dir().mkdir(parents=True, exist_ok=True)


# Global settings instance
settings = Settings()
