from typing import Literal, Optional

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class StoreConfig(BaseSettings):
    """Remote asset store configuration (S3-compatible bucket)."""

    bucket_name: str = Field(
        default="audio-waveform-videos",
        description="Account-level namespace that holds every published video.",
    )
    access_key: Optional[str] = None
    secret_key: Optional[SecretStr] = None
    region: str = "us-east-1"
    endpoint_url: Optional[str] = Field(
        default=None,
        description="Override for S3-compatible hosts (MinIO, R2, ...).",
    )
    public_base_url: Optional[str] = Field(
        default=None,
        description="CDN or custom domain used to build secure URLs.",
    )

    model_config = SettingsConfigDict(
        env_prefix="STORE_",
        env_file=".env",
        secrets_dir=".secrets",
        case_sensitive=False,
        extra="ignore",
    )


class RenderConfig(BaseSettings):
    """Waveform renderer configuration."""

    ffmpeg_binary: str = "ffmpeg"
    videos_dir: str = "repository/videos"
    uploads_dir: str = "repository/uploads"
    background_image: str = "public/images/base-background.png"
    timeout_seconds: Optional[float] = Field(
        default=None,
        gt=0,
        description="Upper bound for a single render; unset means no limit.",
    )

    model_config = SettingsConfigDict(
        env_prefix="RENDER_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


class PublishConfig(BaseSettings):
    """Publishing behaviour for rendered videos."""

    default_folder: str = "audio-waveform-videos/"
    compositing: Literal["auto", "store", "render"] = Field(
        default="auto",
        description=(
            "Where the title/artist banners are composited: by the store at "
            "upload time, burned in during rendering, or picked from the "
            "store's capabilities."
        ),
    )

    model_config = SettingsConfigDict(
        env_prefix="PUBLISH_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


class Settings(BaseSettings):
    """Application settings"""

    app_name: str = "Waveform Video Publisher"
    app_version: str = "1.0.0"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 8000
    log_file: str = "logs/app.log"
    pipeline_log_file: str = "logs/pipeline.log"

    # Remote asset store
    store: StoreConfig = Field(default_factory=StoreConfig)

    # Renderer
    render: RenderConfig = Field(default_factory=RenderConfig)

    # Publishing
    publish: PublishConfig = Field(default_factory=PublishConfig)

    # CORS
    cors_origins: list[str] = ["*"]
    cors_allow_credentials: bool = True
    cors_allow_methods: list[str] = ["*"]
    cors_allow_headers: list[str] = ["*"]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


# Global settings instance
settings = Settings()
