"""
Configuration settings for the Meeting Bot.
Uses Pydantic Settings for type-safe configuration with environment variable support.
"""

from typing import Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from enum import Enum


class Environment(str, Enum):
    """Deployment environment."""
    DEVELOPMENT = "development"
    PRODUCTION = "production"


class BotSettings(BaseSettings):
    """Bot behavior configuration."""
    model_config = SettingsConfigDict(env_prefix="BOT_")

    default_bot_name: str = Field(default="Meeting Notetaker", description="Default bot name")

    join_wait_time_minutes: float = Field(
        default=10,
        description="Max time to wait for admission from the lobby (minutes)"
    )
    max_recording_duration_minutes: float = Field(
        default=180,
        description="Hard limit on the capture duration (minutes)"
    )
    inactivity_limit_minutes: float = Field(
        default=5,
        description="Continuous silence after which the recording ends (minutes)"
    )
    activate_inactivity_detection_after_minutes: float = Field(
        default=1,
        description="Delay before silence and lone-participant detection start (minutes)"
    )
    chunk_interval_ms: int = Field(default=2000, description="MediaRecorder timeslice (ms)")
    primary_mime_type: str = Field(default="video/webm", description="Preferred capture encoding")
    secondary_mime_type: str = Field(
        default="video/webm;codecs=vp9",
        description="Fallback capture encoding"
    )
    lobby_poll_interval_seconds: float = Field(
        default=5,
        description="How often admission signals are polled while in the lobby"
    )
    capture_grace_seconds: float = Field(
        default=12,
        description="Extra host wait after max duration so final chunks can flush"
    )


class BrowserSettings(BaseSettings):
    """Chromium launch configuration."""
    model_config = SettingsConfigDict(env_prefix="BROWSER_")

    executable_path: Optional[str] = Field(default=None, description="Chrome executable path")
    headless: bool = Field(default=False, description="Run without a visible window")
    launch_timeout_seconds: float = Field(default=60, description="Browser launch timeout")
    record_debug_video: bool = Field(
        default=False,
        description="Record the whole page with Playwright (development only)"
    )
    viewport_width: int = Field(default=1280)
    viewport_height: int = Field(default=720)


class BackendSettings(BaseSettings):
    """Status/log API configuration."""
    model_config = SettingsConfigDict(env_prefix="BACKEND_")

    url: str = Field(
        default="http://localhost:8000",
        description="Backend API base URL"
    )
    service_key: str = Field(
        default="",
        description="Service key sent alongside the user's bearer token"
    )
    timeout_seconds: float = Field(default=30.0, description="HTTP timeout")


class RecordingSettings(BaseSettings):
    """Meeting recording configuration."""
    model_config = SettingsConfigDict(env_prefix="RECORDING_")

    local_path: str = Field(default="recordings", description="Local recordings directory")
    upload_to_s3: bool = Field(default=True, description="Upload to S3 if configured")
    delete_after_s3_upload: bool = Field(default=False, description="Delete local after S3 upload")


class DebugImageSettings(BaseSettings):
    """Diagnostic screenshot configuration."""
    model_config = SettingsConfigDict(env_prefix="DEBUG_IMAGE_")

    enabled: bool = Field(default=True, description="Dispatch screenshots on UI-step failures")
    local_dir: str = Field(default="logs/screenshots", description="Directory used in development")
    folder: str = Field(default="debug-images", description="S3 key prefix for screenshots")


class Settings(BaseSettings):
    """Main application settings."""
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore"
    )

    # Nested settings
    bot: BotSettings = Field(default_factory=BotSettings)
    browser: BrowserSettings = Field(default_factory=BrowserSettings)
    backend: BackendSettings = Field(default_factory=BackendSettings)
    recording: RecordingSettings = Field(default_factory=RecordingSettings)
    debug_image: DebugImageSettings = Field(default_factory=DebugImageSettings)

    # Application settings
    environment: Environment = Field(default=Environment.PRODUCTION, description="Deployment environment")
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Logging level")
    log_to_file: bool = Field(default=True, description="Write rotating log files")
    log_dir: str = Field(default="logs", description="Directory for rotating log files")

    project_name: str = Field(default="Meeting Recorder Bot")
    version: str = Field(default="1.0.0")
    api_host: str = Field(default="0.0.0.0", description="API bind host")
    api_port: int = Field(default=3000, description="API bind port")

    @property
    def is_development(self) -> bool:
        return self.environment == Environment.DEVELOPMENT

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v.upper()


# Global settings instance
settings = Settings()
