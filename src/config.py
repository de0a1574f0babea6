"""
Configuration management for the BuzyBees availability engine.

This module provides centralized configuration using Pydantic settings
for type-safe environment variable management.
"""

from functools import lru_cache
from typing import Dict, List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Remote data platform
    availability_api_url: str = Field(
        default="http://localhost:8080", alias="AVAILABILITY_API_URL"
    )
    availability_api_timeout: int = Field(default=10, alias="AVAILABILITY_API_TIMEOUT")
    connection_pool_size: int = Field(default=20, alias="CONNECTION_POOL_SIZE")

    # Booking calendar
    booking_window_days: int = Field(default=60, ge=1, alias="BOOKING_WINDOW_DAYS")
    hide_elapsed_slots_today: bool = Field(
        default=False, alias="HIDE_ELAPSED_SLOTS_TODAY"
    )

    # Server
    api_host: str = Field(default="0.0.0.0", alias="API_HOST")
    api_port: int = Field(default=8080, alias="API_PORT")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Settings are only loaded once per process.
    """
    return Settings()


# Bookable service options - each option fixes the slot duration
SERVICE_OPTIONS: List[dict] = [
    {
        "id": "opt_1_1",
        "service_id": "1",
        "name": "Classic Manicure",
        "duration_minutes": 45,
        "price": 450,
        "is_default": True,
    },
    {
        "id": "opt_1_2",
        "service_id": "1",
        "name": "Gel Manicure",
        "duration_minutes": 60,
        "price": 550,
        "is_default": False,
    },
    {
        "id": "opt_2_1",
        "service_id": "2",
        "name": "Haircut & Style",
        "duration_minutes": 60,
        "price": 500,
        "is_default": True,
    },
    {
        "id": "opt_2_2",
        "service_id": "2",
        "name": "Cut, Color & Style",
        "duration_minutes": 120,
        "price": 850,
        "is_default": False,
    },
    {
        "id": "opt_3_1",
        "service_id": "3",
        "name": "Swedish Massage",
        "duration_minutes": 60,
        "price": 750,
        "is_default": True,
    },
]


# Calendar decorations per date status
CALENDAR_STATUS_STYLES: Dict[str, dict] = {
    "closed": {
        "disabled": True,
        "disable_touch_event": True,
        "marked": True,
        "dot_color": "#6B7280",
        "background_color": "#6B7280",
        "text_color": "white",
    },
    "fully_booked": {
        "disabled": True,
        "disable_touch_event": True,
        "marked": True,
        "dot_color": "#EF4444",
        "background_color": "#FCA5A5",
        "text_color": "#7F1D1D",
    },
    "available": {
        "disabled": False,
        "disable_touch_event": False,
        "marked": True,
        "dot_color": "#10B981",
        "background_color": "transparent",
        "text_color": "#1A2533",
    },
}

SELECTED_DATE_COLOR = "#1A2533"

# Calendar decorations per staff date status
STAFF_CALENDAR_STATUS_STYLES: Dict[str, dict] = {
    "unavailable": {
        "disabled": True,
        "disable_touch_event": True,
        "marked": True,
        "dot_color": "#9CA3AF",
        "background_color": "#E5E7EB",
        "text_color": "#9CA3AF",
    },
    "leave": {
        "disabled": True,
        "disable_touch_event": True,
        "marked": True,
        "dot_color": "#EF4444",
        "background_color": "#FEE2E2",
        "text_color": "#DC2626",
    },
    "available": {
        "disabled": False,
        "disable_touch_event": False,
        "marked": True,
        "dot_color": "#10B981",
        "background_color": "transparent",
        "text_color": "#1F2937",
    },
}

# Staff slots start every 30 minutes regardless of service duration
STAFF_SLOT_STEP_MINUTES = 30


def get_service_options(service_id: str) -> List[dict]:
    """Get all bookable options for a service."""
    return [option for option in SERVICE_OPTIONS if option["service_id"] == service_id]


def get_option_by_id(option_id: str) -> dict | None:
    """Get a service option by its ID."""
    for option in SERVICE_OPTIONS:
        if option["id"] == option_id:
            return option
    return None


def get_default_option(service_id: str) -> dict | None:
    """Get the option preselected when a service is chosen."""
    options = get_service_options(service_id)
    for option in options:
        if option["is_default"]:
            return option
    return options[0] if options else None
