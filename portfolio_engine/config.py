"""
Engine configuration using Pydantic Settings.
"""

import logging
import os
import sys
from functools import lru_cache
from typing import Literal, Optional

from pydantic_settings import BaseSettings


def get_env_file() -> str:
    """Determine which env file to use based on environment."""
    env = os.getenv("APP_ENV", "development")
    if env == "production":
        return ".env.production"
    return ".env.development"


class Settings(BaseSettings):
    """Engine settings loaded from environment variables."""

    # App settings
    app_name: str = "Portfolio Metrics Engine"
    debug: bool = False
    log_level: str = "INFO"
    app_env: str = "development"

    # Reporting
    uncategorized_label: str = "Other"

    # Valuation used when the engine computes a property's ROI itself
    roi_basis: Literal["current_value", "purchase_value"] = "current_value"

    # Transactions whose property was deleted or liquidated
    include_orphan_transactions: bool = False

    # Liquidation
    liquidation_include_operations: bool = False

    class Config:
        env_prefix = "PORTFOLIO_"
        env_file = get_env_file()
        env_file_encoding = "utf-8"
        extra = "ignore"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def configure_logging(level: Optional[str] = None) -> None:
    """
    Install a stream handler on the package logger.

    Args:
        level: Log level name; defaults to the configured ``log_level``.
    """
    log_level = getattr(logging, (level or get_settings().log_level).upper(), logging.INFO)

    logger = logging.getLogger("portfolio_engine")
    logger.setLevel(log_level)

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    logger.addHandler(handler)
