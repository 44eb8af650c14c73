from pydantic_settings import BaseSettings
from pydantic import ConfigDict

class Settings(BaseSettings):
    model_config = ConfigDict(env_file=".env")

    ENV: str = "development"

    DATABASE_URL: str = "sqlite:///./catalog.db"
    SECRET_KEY: str = "change-me"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"
    CORS_ORIGINS: list[str] = ["http://localhost:3000"]
    DEFAULT_RATE_LIMIT: str = "200/hour"
    MUTATION_RATE_LIMIT: str = "60/minute"
    # Length of the random base-36 suffix appended to slugs
    SLUG_SUFFIX_LENGTH: int = 4
    RECONCILE_COUNTERS_ON_STARTUP: bool = False


settings = Settings()
