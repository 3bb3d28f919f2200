"""SDK configuration loaded from .env and defaults."""
from pathlib import Path
from pydantic_settings import BaseSettings

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent

class Settings(BaseSettings):
    base_url: str = "https://recommender-490242039522.asia-east1.run.app"
    weight_timeout_s: float = 2.0
    http_timeout_s: float = 5.0
    db_path: Path = PROJECT_ROOT / "data" / "recommender.db"
    log_path: Path = PROJECT_ROOT / "data" / "logs" / "recommender.log"
    log_level: str = "INFO"
    decay_exponent: float = 2.0
    decay_offset: float = 2.0
    watch_seconds_divisor: int = 86400
    non_anonymous_factor: float = 2.0
    demographic_factor: float = 4.0
    boosted_demographic: str = "Female"
    stickiness_topic: str = "stickiness"

    class Config:
        env_prefix = "RECOMMENDER_"
        env_file = str(PROJECT_ROOT / ".env")
        env_file_encoding = "utf-8"

def get_settings() -> Settings:
    return Settings()
