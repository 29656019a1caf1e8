"""
Configuration management using Pydantic Settings
"""
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# .env lives next to this module (project root in the flat layout)
ENV_FILE = Path(__file__).resolve().parent / ".env"
if ENV_FILE.exists():
    load_dotenv(ENV_FILE)


class Settings(BaseSettings):
    """Application settings"""

    # Application
    app_name: str = "Blog API"
    app_env: str = Field(default="development", description="Application environment")
    api_host: str = Field(default="0.0.0.0", description="API host")
    api_port: int = Field(default=8000, ge=1, le=65535, description="API port")
    allowed_origins: str = Field(
        default="*",
        description="Allowed CORS origins (comma-separated)"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(
        default="text",
        description="Log format: 'json' for structured logging, 'text' for plain text"
    )
    log_sensitive_data: bool = Field(
        default=False,
        description="Log contact email addresses unmasked - NOT RECOMMENDED"
    )

    # Database
    mongo_uri: str = Field(
        default="mongodb://localhost:27017/blog",
        description="MongoDB connection string"
    )
    mongo_database: Optional[str] = Field(
        default=None,
        description="Database name (defaults to the one named in mongo_uri)"
    )
    messages_collection: str = Field(default="messages", description="Collection for contact messages")
    mongo_timeout_ms: int = Field(default=5000, ge=1, description="Server selection timeout (ms)")

    # Posts
    posts_dir: Path = Field(default=Path("content/posts"), description="Directory of <slug>.md files")
    posts_revalidate_seconds: float = Field(
        default=1800,
        ge=0,
        description="Seconds before the post listing is regenerated from disk"
    )

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Accept 'debug', 'Info', ... as level names"""
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {v}")
        return level

    @property
    def allowed_origins_list(self) -> List[str]:
        """Parse CORS origins from comma-separated string"""
        return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]

    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE) if ENV_FILE.exists() else None,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_ignore_empty=True
    )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
