import os
from functools import lru_cache
from dotenv import load_dotenv

load_dotenv()  # loads .env if present


class Settings:
    PROJECT_NAME: str = "Overlay Composition Service"
    API_V1_PREFIX: str = "/api/v1"

    BACKEND_CORS_ORIGINS: list[str] = [
        o.strip() for o in os.getenv("BACKEND_CORS_ORIGINS", "*").split(",") if o.strip()
    ]

    # Preset logo catalog storage
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./overlaykit.db")
    PRESET_LOGOS_PATH: str = os.getenv("PRESET_LOGOS_PATH", "preset-logos.json")

    # TTF/OTF used for all text overlays; empty means Pillow's bundled font
    FONT_PATH: str = os.getenv("FONT_PATH", "")

    # Upper bounds checked before any decode work
    MAX_IMAGE_BYTES: int = int(os.getenv("MAX_IMAGE_BYTES", str(2 * 1024 * 1024)))
    MAX_GIF_BYTES: int = int(os.getenv("MAX_GIF_BYTES", str(10 * 1024 * 1024)))
    MAX_CANVAS_WIDTH: int = int(os.getenv("MAX_CANVAS_WIDTH", "4096"))
    MAX_CANVAS_HEIGHT: int = int(os.getenv("MAX_CANVAS_HEIGHT", "4096"))
    MAX_GIF_FRAMES: int = int(os.getenv("MAX_GIF_FRAMES", "300"))
    # logical width * height * frame count
    MAX_GIF_PIXELS: int = int(os.getenv("MAX_GIF_PIXELS", str(60_000_000)))

    FETCH_TIMEOUT_SECONDS: float = float(os.getenv("FETCH_TIMEOUT_SECONDS", "10"))
    JPEG_QUALITY: int = int(os.getenv("JPEG_QUALITY", "90"))

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")


@lru_cache
def get_settings():
    return Settings()
