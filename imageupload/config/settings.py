from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    upload_adapter: str = "example"
    upload_url: str = ""
    upload_field_name: str = "upload"
    upload_timeout_seconds: int = 30
    upload_headers: dict[str, str] = Field(default_factory=dict)

    default_file_extension: str = "jpeg"
    image_types: list[str] = Field(default_factory=lambda: ["jpeg", "png", "gif", "bmp"])
    responsive_sizes: str = "100vw"
    ignore_files_with_html: bool = True
