import logging
from dotenv import load_dotenv
from pydantic import Field, computed_field
from pydantic_settings import BaseSettings
from typing import List, Optional

# Load environment variables from .env file
load_dotenv(".env")
logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Class to store all the settings of the leave tracker application."""

    # ------------------------------
    # Document store - Optional (in-memory fallback when absent)
    # ------------------------------
    MONGODB_URI: Optional[str] = Field(default=None)
    MONGODB_DB_NAME: str = Field(default="leave_tracker")
    MONGODB_TIMEOUT_MS: int = Field(default=10000)

    # ------------------------------
    # Auth
    # ------------------------------
    SECRET_KEY: str = Field(default="leave-tracker-secret-key-2024")
    ALGORITHM: str = Field(default="HS256")
    ACCESS_TOKEN_EXPIRE_DAYS: int = Field(default=7)
    MIN_PASSWORD_LENGTH: int = Field(default=6)
    RATE_LIMIT_ENABLED: bool = Field(default=True)
    AUTH_RATE_LIMIT: str = Field(default="20/minute")

    # ------------------------------
    # Leaves
    # ------------------------------
    SUBMISSION_GROUP_WINDOW_SECONDS: float = Field(default=10)
    SEED_DEFAULT_EMPLOYEES: bool = Field(default=True)

    # ------------------------------
    # Environment
    # ------------------------------
    ENVIRONMENT: str = Field(default="development")
    CORS_ALLOW_ORIGINS: List[str] = Field(default=["*"])
    LOG_LEVEL: str = Field(default="INFO")

    # ------------------------------
    # Computed Fields
    # ------------------------------
    @computed_field
    @property
    def USE_DOCUMENT_DATABASE(self) -> bool:
        """Whether a connection to MongoDB should be attempted at all."""
        return bool(self.MONGODB_URI and self.MONGODB_URI.strip())

    class Config:
        """Configuration for the settings class."""
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


# Instantiate the settings
settings = Settings()
