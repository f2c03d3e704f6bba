"""Global configuration for the Party Trip Assistant.

This module loads environment variables from .env file and provides
centralized configuration for the entire application.
"""

import logging
import os
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

# Look for .env in the project root directory
env_path = Path(__file__).parent / ".env"
load_dotenv(dotenv_path=env_path)


# ============================================================================
# Language Model Configuration
# ============================================================================

# Default Gemini model for the trip assistant chat
DEFAULT_MODEL_NAME: str = os.getenv("DEFAULT_MODEL_NAME", "gemini-2.0-flash")

# Default temperature for streamed chat replies
DEFAULT_TEMPERATURE: float = float(os.getenv("DEFAULT_TEMPERATURE", "0.6"))

# Upper bound on model invocations per user message (tool call -> result -> re-invoke)
TOOL_LOOP_MAX_ROUNDS: int = int(os.getenv("TOOL_LOOP_MAX_ROUNDS", "8"))


# ============================================================================
# Travel Search Configuration
# ============================================================================

# "test" or "production" Amadeus environment
AMADEUS_HOSTNAME: str = os.getenv("AMADEUS_HOSTNAME", "test")

DEFAULT_CURRENCY: str = os.getenv("DEFAULT_CURRENCY", "EUR")

# Offers handed back to the model per search
MAX_FLIGHT_RESULTS: int = int(os.getenv("MAX_FLIGHT_RESULTS", "5"))
MAX_HOTEL_RESULTS: int = int(os.getenv("MAX_HOTEL_RESULTS", "5"))

# Affiliate marker appended to flight checkout links
AVIASALES_MARKER: str = os.getenv("AVIASALES_MARKER", "byebi")


# ============================================================================
# Application Configuration
# ============================================================================

# FastAPI/Backend
API_HOST: str = os.getenv("API_HOST", "0.0.0.0")
API_PORT: int = int(os.getenv("API_PORT", "8000"))

# CORS Configuration
CORS_ORIGINS: List[str] = os.getenv("CORS_ORIGINS", "*").split(",") if os.getenv("CORS_ORIGINS") else ["*"]

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()


def configure_logging(level: Optional[str] = None) -> None:
    """Install a single stream handler on the root logger (idempotent)."""
    root = logging.getLogger()
    root.setLevel(level or LOG_LEVEL)
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter(
                fmt="%(asctime)s %(levelname)s %(name)s %(message)s",
                datefmt="%Y-%m-%dT%H:%M:%S%z",
            )
        )
        root.addHandler(handler)

    # Reduce noisy libraries
    logging.getLogger("httpx").setLevel(os.getenv("HTTPX_LOG_LEVEL", "WARNING").upper())


# ============================================================================
# API Keys
# ============================================================================

def get_google_api_key() -> Optional[str]:
    """Get Google API key (Gemini) from the environment."""
    return os.getenv("GOOGLE_API_KEY") or os.getenv("GEMINI_API_KEY")


def get_amadeus_api_key() -> Optional[str]:
    """Get Amadeus API key; a LIVE key wins when the production host is selected."""
    if AMADEUS_HOSTNAME == "production":
        return os.getenv("AMADEUS_API_KEY_LIVE") or os.getenv("AMADEUS_API_KEY")
    return os.getenv("AMADEUS_API_KEY")


def get_amadeus_api_secret() -> Optional[str]:
    """Get Amadeus API secret; a LIVE secret wins when the production host is selected."""
    if AMADEUS_HOSTNAME == "production":
        return os.getenv("AMADEUS_API_SECRET_LIVE") or os.getenv("AMADEUS_API_SECRET")
    return os.getenv("AMADEUS_API_SECRET")


# ============================================================================
# Validation
# ============================================================================

def validate_api_keys() -> List[str]:
    """Validate that required API keys are present. Returns list of missing keys."""
    missing = []

    if not get_google_api_key():
        missing.append("GOOGLE_API_KEY or GEMINI_API_KEY")

    if not get_amadeus_api_key() or not get_amadeus_api_secret():
        missing.append("AMADEUS_API_KEY/AMADEUS_API_SECRET")

    return missing
