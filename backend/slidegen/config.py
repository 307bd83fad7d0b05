from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import List


class Settings(BaseSettings):
    # Base URL the rendering surface uses to resolve relative asset paths
    base_url: str = "http://localhost:8000"  # Set via BASE_URL env var

    # Generated images
    output_dir: str = "generated_images"
    output_url_prefix: str = "/images"
    save_debug_html: bool = True

    # PostgreSQL database for generated-image metadata (empty = disabled)
    database_url: str = ""  # Set via DATABASE_URL env var

    # Render engine
    render_page_timeout_ms: int = 30000
    render_grace_delay_ms: int = 2000
    render_device_scale_factor: int = 2
    render_max_consecutive_timeouts: int = 3
    browser_args: List[str] = [
        "--no-sandbox",
        "--disable-setuid-sandbox",
        "--disable-dev-shm-usage",
        "--disable-web-security",
    ]

    # Batch
    batch_concurrency: int = 1  # 1 = strictly sequential
    batch_deadline_seconds: float = 0  # 0 = no deadline

    # Carousel transform highlight colors
    highlight_color: str = "#ff0000"
    highlight_color_secondary: str = "#ffffff"

    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8000

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


@lru_cache()
def get_settings() -> Settings:
    return Settings()
