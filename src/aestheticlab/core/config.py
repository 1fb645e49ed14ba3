"""Configuration management for the Aesthetic Lab.

This module provides centralized configuration management using Pydantic Settings.
All configuration is loaded from environment variables with the AESTHETICLAB_
prefix, allowing easy customization without code changes.

Environment Variable Loading
-----------------------------
Configuration values are loaded in the following priority order:
1. Environment variables (AESTHETICLAB_* prefix)
2. .env file in the project root
3. Default values defined in AestheticLabConfig

Example .env file:
    AESTHETICLAB_GEMINI_API_KEY=your-key
    AESTHETICLAB_IMAGEN_MODEL=imagen-4.0-generate-001
    AESTHETICLAB_DATA_DIR=data
    AESTHETICLAB_STORAGE_BACKEND=sqlite

Global Configuration Instance
------------------------------
A global `config` instance is created automatically at module import time.

Usage Example
-------------
    from aestheticlab.core.config import config

    print(config.imagen_model)
    print(config.data_dir)

Provider Constraints
--------------------
The image provider is always asked for exactly one image per prompt at the
configured aspect ratio.  Temperature and seed are recorded on every
generation for reproducibility but are not part of the provider request.
"""

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AestheticLabConfig(BaseSettings):
    """Main configuration for the Aesthetic Lab.

    Attributes
    ----------
    Provider Settings:
        gemini_api_key : str | None
            API key for the Gemini image API.  When unset, the google-genai
            client falls back to its own environment lookup.
        imagen_model : str
            Image generation model identifier
        output_mime_type : str
            MIME type requested from the provider
        aspect_ratio : str
            Aspect ratio requested from the provider
        request_timeout : float
            Per-request timeout in seconds

    Session Settings:
        default_temperature : float
            Initial temperature shown in the form (0.0-1.0)

    Storage:
        data_dir : Path
            Directory holding the durable store
        storage_backend : Literal["json", "sqlite"]
            One JSON file per key, or a single SQLite table

    Server Settings:
        server_host : str
            Server bind address
        server_port : int
            Server port (1024-65535)
        log_level : str
            Root logging level used by the server entry point

    Examples
    --------
        >>> custom_config = AestheticLabConfig(
        ...     storage_backend="sqlite",
        ...     default_temperature=0.7,
        ... )
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="AESTHETICLAB_",
        case_sensitive=False,
    )

    # Provider settings
    gemini_api_key: str | None = Field(
        default=None,
        description="API key for the Gemini image API",
    )
    imagen_model: str = Field(
        default="imagen-4.0-generate-001",
        description="Image generation model identifier",
    )
    output_mime_type: str = Field(
        default="image/jpeg",
        description="MIME type requested from the provider",
    )
    aspect_ratio: str = Field(
        default="1:1",
        description="Aspect ratio requested from the provider",
    )
    request_timeout: float = Field(
        default=120.0,
        description="Per-request timeout in seconds",
        gt=0,
    )

    # Session settings
    default_temperature: float = Field(
        default=0.5,
        description="Initial temperature shown in the form",
        ge=0.0,
        le=1.0,
    )

    # Storage
    data_dir: Path = Field(
        default=Path("data"),
        description="Directory holding generations, presets and prompt history",
    )
    storage_backend: Literal["json", "sqlite"] = Field(
        default="json",
        description="Durable store implementation (json or sqlite)",
    )

    # Server settings
    server_host: str = Field(
        default="0.0.0.0",
        description="Server bind address (0.0.0.0 for local network)",
    )
    server_port: int = Field(
        default=7860,
        description="Server port",
        ge=1024,
        le=65535,
    )
    log_level: str = Field(
        default="INFO",
        description="Root logging level for the server entry point",
    )

    def __init__(self, **kwargs):
        """Initialize configuration and create the data directory.

        Args:
            **kwargs: Configuration overrides (typically from environment variables)
        """
        super().__init__(**kwargs)

        self.data_dir.mkdir(parents=True, exist_ok=True)


# Global configuration instance
# Loads values from environment variables (AESTHETICLAB_* prefix) and .env file.
config = AestheticLabConfig()
