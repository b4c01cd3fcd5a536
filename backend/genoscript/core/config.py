"""
Process-wide generation settings.

Settings are resolved once at startup by ``load_settings`` and handed to the
generation client by reference. Nothing below the API layer reads the
environment directly.
"""

import logging
import os
from typing import Mapping, Optional

from dotenv import load_dotenv, find_dotenv
from pydantic import BaseModel, ConfigDict, Field

from genoscript.core.errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-2.5-flash"
DEFAULT_API_URL = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_TIMEOUT = 120.0


class GenerationSettings(BaseModel):
    """Credentials and model selection for the text-generation backend."""

    api_key: str = Field(..., min_length=1, description="Gemini API key")
    model: str = Field(default=DEFAULT_MODEL, description="Model identifier used for every request")
    api_url: str = Field(default=DEFAULT_API_URL, description="Base URL of the Generative Language REST API")
    timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0, description="Transport timeout in seconds")

    model_config = ConfigDict(frozen=True)


def load_settings(environ: Optional[Mapping[str, str]] = None) -> GenerationSettings:
    """
    Build the settings from the environment (and a ``.env`` file, if any).

    Raises:
        ConfigurationError: if no API key is configured.
    """
    if environ is None:
        # Walks up directories to find a .env file
        load_dotenv(find_dotenv(usecwd=True))
        environ = os.environ

    api_key = environ.get("GEMINI_API_KEY") or environ.get("API_KEY")
    if not api_key:
        raise ConfigurationError("GEMINI_API_KEY (or API_KEY) environment variable not set")

    timeout_raw = environ.get("GENERATION_TIMEOUT")
    try:
        timeout = float(timeout_raw) if timeout_raw else DEFAULT_TIMEOUT
    except ValueError:
        raise ConfigurationError(f"GENERATION_TIMEOUT must be a number, got {timeout_raw!r}")
    if timeout <= 0:
        raise ConfigurationError("GENERATION_TIMEOUT must be positive")

    settings = GenerationSettings(
        api_key=api_key,
        model=environ.get("GEMINI_MODEL") or DEFAULT_MODEL,
        api_url=(environ.get("GEMINI_API_URL") or DEFAULT_API_URL).rstrip("/"),
        timeout=timeout,
    )
    logger.info("Generation settings loaded", extra={"model": settings.model})
    return settings
