"""
Configuration Management for Report Cards Service

Environment-based configuration using Pydantic Settings.
"""
from typing import Optional, List
from pydantic_settings import BaseSettings
from pydantic import Field, ConfigDict
from functools import lru_cache

from reportcards.core.recommendations.resolver import (
    LOW_CONFIDENCE_THRESHOLD, FALLBACK_TEXT, LOW_CONFIDENCE_DIAGNOSIS,
)
from reportcards.core.reports.card_renderer import HOSPITAL_NAME, FOOTER_CONTACT
from reportcards.core.reports.capture import CAPTURE_SCALE, VIEWPORT_WIDTH, VIEWPORT_HEIGHT
from reportcards.core.reports.exporter import (
    DEFAULT_OUTPUT_DIR, DOCUMENT_MARGIN_MM, DOCUMENT_IMAGE_WIDTH_MM,
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = ConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"  # Ignore extra fields from .env file
    )

    # Application
    app_name: str = "Diagnostic Report Cards"
    app_version: str = "0.1.0"
    debug: bool = Field(default=False, description="Enable debug mode")

    # API Configuration
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_prefix: str = "/api/v1"
    cors_origins: List[str] = ["*"]

    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = None

    # Paths
    reports_dir: str = DEFAULT_OUTPUT_DIR
    templates_dir: Optional[str] = Field(default=None, description="Override for the card templates directory")
    recommendations_path: Optional[str] = Field(default=None, description="JSON file replacing the bundled condition table")

    # Recommendation resolution
    low_confidence_threshold: float = Field(default=LOW_CONFIDENCE_THRESHOLD, description="Confidence at or below this is low-confidence")
    fallback_text: str = FALLBACK_TEXT
    low_confidence_diagnosis: str = LOW_CONFIDENCE_DIAGNOSIS

    # Card content
    hospital_name: str = HOSPITAL_NAME
    footer_contact: str = FOOTER_CONTACT

    # Capture & document
    capture_scale: float = Field(default=CAPTURE_SCALE, description="Device scale factor used when rasterizing a card")
    capture_viewport_width: int = VIEWPORT_WIDTH
    capture_viewport_height: int = VIEWPORT_HEIGHT
    document_margin_mm: float = DOCUMENT_MARGIN_MM
    document_image_width_mm: float = DOCUMENT_IMAGE_WIDTH_MM
    sanitize_filenames: bool = Field(default=False, description="Replace path-hostile characters in export filenames")


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()
