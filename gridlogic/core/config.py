from pydantic_settings import BaseSettings, SettingsConfigDict
from pathlib import Path
from typing import Optional


PACKAGE_DIR = Path(__file__).resolve().parent.parent
BASE_DIR = PACKAGE_DIR.parent

class Settings(BaseSettings): # load all key=value pairs from .env
    """ Load service settings"""
    DATABASE_URL: str = f"sqlite:///{BASE_DIR / 'gridlogic.db'}"
    TEMPLATES_PATH: Path = PACKAGE_DIR / "data" / "templates.json"
    DEFAULT_DIFFICULTY: str = "easy"
    DISTRACTOR_COUNT: int = 3
    MAX_DISTRACTOR_ATTEMPTS: int = 60
    RANDOM_SEED: Optional[int] = None
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "gridlogic_errors.log"

    model_config = SettingsConfigDict(
        env_file = BASE_DIR/".env",
        env_file_encoding = "utf-8",
        extra = "ignore",
    )

settings = Settings()
