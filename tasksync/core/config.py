"""Configuration management for TaskSync."""

from typing import List, Literal
from pathlib import Path
from pydantic_settings import BaseSettings
from pydantic import Field, SecretStr


class DatabaseConfig(BaseSettings):
    """Database configuration."""

    database_path: Path = Field(
        default=Path("data/tasksync.db"),
        description="Path to SQLite database",
    )

    model_config = {"env_prefix": "TASKSYNC_", "extra": "ignore"}


class AuthConfig(BaseSettings):
    """Credential issuance and verification configuration."""

    jwt_secret: SecretStr = Field(
        default=SecretStr("change-me-in-production"),
        description="Secret used to sign access tokens",
    )
    jwt_algorithm: Literal["HS256", "HS384", "HS512"] = Field(
        default="HS256",
        description="JWT signing algorithm",
    )
    access_token_expire_minutes: int = Field(
        default=7 * 24 * 60,
        ge=1,
        description="Lifetime of issued access tokens",
    )
    bcrypt_rounds: int = Field(
        default=12,
        ge=4,
        le=31,
        description="bcrypt cost factor for password hashing",
    )

    model_config = {"env_prefix": "AUTH_", "extra": "ignore"}


class ServerConfig(BaseSettings):
    """HTTP server configuration."""

    host: str = Field(
        default="127.0.0.1",
        description="Host to bind the API server",
    )
    port: int = Field(
        default=3001,
        ge=1,
        le=65535,
        description="Port for the API server",
    )
    enable_cors: bool = Field(
        default=True,
        description="Enable CORS for the API server",
    )
    cors_origins: List[str] = Field(
        default_factory=lambda: ["*"],
        description="Origins allowed by CORS",
    )

    model_config = {"env_prefix": "SERVER_", "extra": "ignore"}


class Settings(BaseSettings):
    """Main settings combining all configurations."""

    # Sub-configurations
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    auth: AuthConfig = Field(default_factory=AuthConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)

    # General settings
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging level",
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }

    @classmethod
    def load(cls) -> "Settings":
        """Load settings from environment and files."""
        # Load dotenv explicitly so the nested sections see .env values too
        from dotenv import load_dotenv
        load_dotenv()
        return cls()


# Global settings instance
settings = None


def get_settings() -> Settings:
    """Get or create global settings instance."""
    global settings
    if settings is None:
        settings = Settings.load()
    return settings


def reload_settings():
    """Reload settings from environment."""
    global settings
    settings = Settings.load()
    return settings
