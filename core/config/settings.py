"""RentFlow application settings."""

from decimal import Decimal
from typing import Dict, List, Optional
import os

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        # In production read .env.prod, otherwise .env
        env_file=".env.prod" if os.getenv("ENVIRONMENT") == "production" else ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Basics
    app_name: str = "RentFlow"
    debug: bool = False
    environment: str = "development"
    version: str = "0.1.0"

    # Database
    database_url: str = "sqlite:///./rentflow.db"
    database_pool_size: int = 20
    database_max_overflow: int = 30
    database_echo: bool = False
    # False when the schema is managed with alembic (apply_migration.py)
    auto_create_schema: bool = True

    # Logging
    log_level: str = "INFO"
    log_format: str = "text"  # text | json
    log_file: Optional[str] = None

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_reload: bool = True
    cors_origins: List[str] = ["*"]
    allowed_hosts: List[str] = ["*"]

    # Rental pricing
    grace_days: int = 1
    expected_return_offset_days: int = 3
    early_return_minimum_ratio: Decimal = Decimal("0.5")
    late_return_penalty_multiplier: Decimal = Decimal("1.5")
    cancellation_fee_ratio: Decimal = Decimal("0.10")
    overdue_penalty_per_day: Decimal = Decimal("50")
    default_tax_rate: Decimal = Decimal("0")

    # Worker pay
    working_hours_per_day: int = 8

    # Capabilities per role (X-User-Role header)
    role_capabilities: Dict[str, List[str]] = Field(
        default_factory=lambda: {
            "admin": ["approve_discount", "manage_rates", "manage_violations", "manage_workers"],
            "manager": ["manage_violations", "manage_workers"],
            "staff": [],
        }
    )
    default_role: str = "staff"


# Settings instance
settings = Settings()


def validate_settings() -> None:
    """Validate settings that must be explicit in production."""
    problems = []
    if settings.database_url.startswith("sqlite"):
        problems.append("database_url")
    if settings.early_return_minimum_ratio > 1:
        problems.append("early_return_minimum_ratio")

    if problems:
        raise ValueError(f"Invalid production settings: {problems}")


if settings.environment == "production":
    validate_settings()
