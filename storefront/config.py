from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List

class Settings(BaseSettings):
    DATABASE_URL : str
    DATABASE_ECHO : bool = False
    DB_POOL_SIZE : int = 10
    DB_MAX_OVERFLOW : int = 20
    DB_POOL_TIMEOUT : int = 60

    JWT_SECRET : str
    JWT_ALGORITHM : str = "HS256"
    ACCESS_TOKEN_EXPIRY_MINUTES : int = 60
    REDIS_URL : str = "redis://localhost:6379/0"

    ANALYTICS_TIMEOUT_SECONDS : float = 15.0
    CORS_ORIGINS : List[str] = ["http://localhost:3000"]

    model_config = SettingsConfigDict(
        env_file = ".env",
        extra = "ignore"
    )


Config = Settings()
