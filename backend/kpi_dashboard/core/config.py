from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Dashboard engine configuration settings."""

    # Application
    APP_VERSION: str = "0.1.0"

    # Presentation convention
    CURRENCY_SYMBOL: str = "₹"

    # Ingestion - Column sanitizing
    MAX_COLUMN_NAME_LENGTH: int = 60

    # Ingestion - Archive limits
    MAX_ARCHIVE_SIZE_MB: int = 500
    MAX_EXTRACTED_SIZE_MB: int = 2000
    MAX_FILES_PER_ARCHIVE: int = 10000  # Zip bomb protection

    # Schema inference - date content sniffing
    DATE_SNIFF_SAMPLE_SIZE: int = 200
    DATE_SNIFF_THRESHOLD: float = 0.6  # Strictly greater than this share must parse

    # KPIs
    GROWTH_WINDOW_DAYS: int = 30  # Trailing window compared with the one before it

    # Rankings
    TOP_CATEGORIES: int = 12
    TOP_CORRELATIONS: int = 8
    MIN_CORRELATION_PAIRS: int = 10
    MAX_CORRELATION_CANDIDATES: int = 50

    # Render output
    SAMPLE_ROWS: int = 200
    SLICER_OPTION_LIMIT: int = 200

    class Config:
        env_file = ".env"
        case_sensitive = True


@lru_cache()
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
