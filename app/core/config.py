import os

class Settings:
    # Database
    DATABASE_PATH: str = os.getenv("DATABASE_PATH", "data/cache.sqlite")

    # Fetching
    REQUEST_TIMEOUT: int = int(os.getenv("REQUEST_TIMEOUT", "10"))
    USER_AGENT: str = os.getenv("USER_AGENT", "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36")
    # 150 KB, anything past this is never read
    MAX_RESPONSE_BYTES: int = int(os.getenv("MAX_RESPONSE_BYTES", "153600"))

    # Cache
    CACHE_TTL_HOURS: int = int(os.getenv("CACHE_TTL_HOURS", "24"))
    CACHE_KEY_PREFIX: str = os.getenv("CACHE_KEY_PREFIX", "link_data_")

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

settings = Settings()
