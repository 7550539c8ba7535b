from urllib.parse import urlparse

from pydantic_settings import BaseSettings


class Config(BaseSettings):
    """Account store configuration loaded from environment variables."""

    database_url: str  # MongoDB URI, e.g. mongodb://localhost:27017/accounts
    database_name: str | None = None  # Overrides the database in database_url path
    debug: bool = False

    model_config = {
        "env_file": [".env"],
        "env_prefix": "ACCOUNTSTORE_",
        "extra": "ignore",
    }

    @property
    def resolved_database_name(self) -> str:
        """Database name from explicit setting, falling back to the URI path."""
        name = self.database_name or urlparse(self.database_url).path.lstrip("/")
        if not name:
            raise ValueError("Database name is not set in database_name or database_url")
        return name
