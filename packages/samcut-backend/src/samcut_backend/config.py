"""Configuration settings loaded from environment variables."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env")

    sam_model_name: str = "Zigeng/SlimSAM-uniform-77"
    sam_device: str = "auto"  # auto, cpu, cuda
    load_model_on_startup: bool = True
    debounce_ms: int = 200
    overlay_opacity: float = 0.6
    example_image_url: str = "https://huggingface.co/datasets/Xenova/transformers.js-docs/resolve/main/corgi.jpg"
    fetch_timeout: float = 30.0
    log_level: str = "INFO"


settings = Settings()
