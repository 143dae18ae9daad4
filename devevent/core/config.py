"""
Configuration settings for the application
"""

from typing import List, Optional

from pydantic import ValidationError as PydanticValidationError
from pydantic import field_validator
from pydantic_settings import BaseSettings

from devevent.core.errors import ConfigurationError

FIRESTORE_SCHEME = "firestore://"


class Settings(BaseSettings):
    """Application settings"""

    # Database: a SQLAlchemy URL or firestore://<project-id>
    DATABASE_URL: str
    FIREBASE_CREDENTIALS_JSON: Optional[str] = None
    FIREBASE_CREDENTIALS_FILE: Optional[str] = None
    FIREBASE_CREDENTIALS_B64: Optional[str] = None

    # Security
    ADMIN_TOKEN: Optional[str] = None

    # Logging
    LOG_LEVEL: str = "INFO"

    # CORS
    ALLOW_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:8000",
    ]

    # Listing
    DEFAULT_PAGE_SIZE: int = 50
    MAX_PAGE_SIZE: int = 200

    class Config:
        env_file = ".env"

    @field_validator("DATABASE_URL")
    @classmethod
    def database_url_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("DATABASE_URL cannot be empty")
        if value.startswith(FIRESTORE_SCHEME) and not value[len(FIRESTORE_SCHEME):].strip("/"):
            raise ValueError("firestore:// URL must name a project, e.g. firestore://my-project")
        return value

    @property
    def use_firestore(self) -> bool:
        return self.DATABASE_URL.startswith(FIRESTORE_SCHEME)

    @property
    def firestore_project(self) -> Optional[str]:
        if not self.use_firestore:
            return None
        return self.DATABASE_URL[len(FIRESTORE_SCHEME):].strip("/")


def load_settings(**overrides) -> Settings:
    """Build settings from the environment, failing fast on a bad connection target."""
    try:
        return Settings(**overrides)
    except PydanticValidationError as exc:
        fields = ", ".join(str(err["loc"][0]) for err in exc.errors() if err.get("loc"))
        raise ConfigurationError(
            f"Invalid/Missing configuration: {fields or 'settings'}. "
            "Set DATABASE_URL in the environment or in your .env file."
        ) from exc


settings = load_settings()
