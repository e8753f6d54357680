"""
Application configuration and constants.
"""

import logging
import os
from typing import List

from dotenv import load_dotenv

# Load environment variables
load_dotenv()


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


# API configuration
API_VERSION = "1.0.0"
API_TITLE = "Retirement Risk API"
API_DESCRIPTION = "Monte Carlo retirement-outcome simulation with regime-switching economic scenarios"

# CORS configuration
CORS_ORIGINS: List[str] = os.getenv("CORS_ORIGINS", "*").split(",")
CORS_CREDENTIALS = True
CORS_METHODS = ["*"]
CORS_HEADERS = ["*"]

# Simulation defaults
DEFAULT_SIMULATIONS = _env_int("MC_DEFAULT_SIMULATIONS", 10000)
MIN_SIMULATIONS = 100
MAX_SIMULATIONS = 100000
DEFAULT_PROJECTION_YEARS = 30
MAX_PROJECTION_YEARS = 50  # settings panel limit
DEFAULT_LANGUAGE = "en"
SUPPORTED_LANGUAGES = ("en", "he")

# Retirement income assumptions
WITHDRAWAL_RATE = 0.04  # 4% rule, annual
PENSION_CONTRIBUTION_SHARE = 0.60
PORTFOLIO_CONTRIBUTION_SHARE = 0.40

# Performance settings
USE_PARALLEL_PROCESSING = _env_bool("MC_PARALLEL", False)
MAX_WORKERS = _env_int("MC_MAX_WORKERS", 0) or None
CHUNK_SIZE = _env_int("MC_CHUNK_SIZE", 1000)

# Logging configuration
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str = LOG_LEVEL) -> None:
    """Apply the application log level and format to the root logger."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
