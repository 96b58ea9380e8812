"""
Configuration and settings for Virtual Assistant.
"""

import os
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field


def get_default_data_dir() -> Path:
    """Get the default data directory (accounts file, uploads)."""
    return Path(os.environ.get("VIRTUAL_ASSISTANT_DATA_DIR", Path.home() / ".cache" / "virtual-assistant"))


def _default_accounts_path() -> Path | None:
    value = os.environ.get("VIRTUAL_ASSISTANT_ACCOUNTS_FILE")
    if value == "":
        return None  # Explicitly in-memory
    if value:
        return Path(value)
    return get_default_data_dir() / "accounts.json"


class ServerConfig(BaseModel):
    """Server configuration."""

    host: str = Field(
        default_factory=lambda: os.environ.get("VIRTUAL_ASSISTANT_HOST", "0.0.0.0")
    )
    port: int = Field(
        default_factory=lambda: int(os.environ.get("VIRTUAL_ASSISTANT_PORT", "8000"))
    )
    # Cookies need explicit origins; "*" is rejected by browsers with credentials
    cors_origins: list[str] = Field(default=["http://localhost:5173"])


class ClassifierConfig(BaseModel):
    """Intent classifier configuration."""

    backend: Literal["gemini", "openai", "ollama", "simple"] = Field(
        default_factory=lambda: os.environ.get("VIRTUAL_ASSISTANT_CLASSIFIER", "gemini")
    )
    model: str | None = Field(
        default_factory=lambda: os.environ.get("VIRTUAL_ASSISTANT_CLASSIFIER_MODEL")
    )
    api_key: str | None = Field(
        default_factory=lambda: os.environ.get("GEMINI_API_KEY")
    )
    host: str | None = Field(default=None)  # Ollama server URL
    language: Literal["hi", "en"] = Field(default="hi")  # Operating language for fallback messages


class AuthConfig(BaseModel):
    """Session token configuration."""

    jwt_secret: str = Field(
        default_factory=lambda: os.environ.get("VIRTUAL_ASSISTANT_JWT_SECRET", "")
    )
    expires_days: int = Field(default=10)
    cookie_name: str = Field(default="token")
    cookie_secure: bool = Field(
        default_factory=lambda: os.environ.get("VIRTUAL_ASSISTANT_COOKIE_SECURE") == "1"
    )


class StorageConfig(BaseModel):
    """Account storage configuration."""

    accounts_path: Path | None = Field(default_factory=_default_accounts_path)
    upload_dir: Path = Field(default_factory=lambda: get_default_data_dir() / "uploads")


class MediaConfig(BaseModel):
    """Media host (Cloudinary) configuration."""

    cloud_name: str | None = Field(
        default_factory=lambda: os.environ.get("CLOUDINARY_CLOUD_NAME")
    )
    api_key: str | None = Field(
        default_factory=lambda: os.environ.get("CLOUDINARY_CLOUD_API_KEY")
    )
    api_secret: str | None = Field(
        default_factory=lambda: os.environ.get("CLOUDINARY_CLOUD_API_SECRET")
    )
    timeout: float = Field(default=60.0)

    @property
    def enabled(self) -> bool:
        return bool(self.cloud_name and self.api_key and self.api_secret)


class Config(BaseModel):
    """Main configuration."""

    server: ServerConfig = Field(default_factory=ServerConfig)
    classifier: ClassifierConfig = Field(default_factory=ClassifierConfig)
    auth: AuthConfig = Field(default_factory=AuthConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    media: MediaConfig = Field(default_factory=MediaConfig)


# Global config instance
_config: Config | None = None


def get_config() -> Config:
    """Get the global configuration."""
    global _config
    if _config is None:
        _config = Config()
    return _config


def set_config(config: Config | None) -> None:
    """Set the global configuration (None resets to environment defaults)."""
    global _config
    _config = config
