"""Application settings loaded from the environment."""

from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="FORMBUILDER_", env_file=".env", extra="ignore")

    log_level: str = "INFO"

    default_title: str = "My Custom Form"
    default_description: str = "Form created with FormBuilder"
    export_filename: str = "form-config.json"

    # Image upload limits applied client-side before anything is queued.
    max_image_files: int = 10
    max_image_size_mb: float = 5.0
    accepted_image_formats: list[str] = [
        "image/jpeg",
        "image/jpg",
        "image/png",
        "image/gif",
        "image/webp",
    ]

    window_width: int = 1300
    window_height: int = 850


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
