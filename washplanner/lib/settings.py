"""
Application settings loaded from environment variables.
Uses pydantic-settings for validation and .env file support.
"""
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from washplanner.lib.dates import generate_time_slots


class Settings(BaseSettings):
    """Application configuration settings."""
    
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )
    
    # Application
    app_name: str = Field(default="WashPlanner", description="Application name")
    debug: bool = Field(default=False, description="Debug mode")
    log_json: bool = Field(default=True, description="Emit logs as JSON lines")
    
    # Daily capacity
    morning_capacity: int = Field(
        default=15,
        description="Concurrent bookings allowed in the morning period"
    )
    evening_capacity: int = Field(
        default=18,
        description="Concurrent bookings allowed in the evening period"
    )
    daily_capacity: int = Field(
        default=33,
        description="Total bookings allowed per day"
    )
    
    # Slot tables (HH:MM, ascending)
    morning_slots: List[str] = Field(
        default_factory=lambda: generate_time_slots("07:00", "12:00", 30, include_end=True),
        description="Bookable times in the morning period"
    )
    evening_slots: List[str] = Field(
        default_factory=lambda: generate_time_slots("13:00", "19:00", 30, include_end=True),
        description="Bookable times in the evening period"
    )
    
    # Subscription policy
    visits_per_cycle: int = Field(default=10, description="Visits owed per subscription cycle")
    paid_visits: int = Field(default=8, description="Leading visits of a cycle that are paid")
    price_per_wash: float = Field(default=10.0, description="Price of a single visit")
    
    # Scheduling rules
    min_gap_days: int = Field(
        default=3,
        description="Minimum days between two visits of the same customer"
    )
    reschedule_window_days: int = Field(
        default=30,
        description="How far ahead the rescheduler searches for a free slot"
    )


# Global settings instance
settings = Settings()
