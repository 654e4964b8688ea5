import logging
from typing import Literal
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

load_dotenv()

class Settings(BaseSettings):
    # Data store
    DATABASE_URL: str = "sqlite:///./users.db"

    # Token signing
    JWT_SECRET: str
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # Password hashing work factor
    BCRYPT_ROUNDS: int = 10

    # Where the guard reads the caller's role from: the request body or a verified bearer token
    ROLE_SOURCE: Literal["body", "token"] = "body"

    # Server
    PORT: int = 3000

    # Logging
    LOG_DIR: str = "logger"
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        extra = "ignore"

settings = Settings()

def get_settings() -> Settings:
    """Dependency returning the process-wide settings."""
    return settings
