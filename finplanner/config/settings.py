"""
Configuration Management for Finance Planner

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
The calculation engines never read settings directly - the flows pass
thresholds into them as plain arguments.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AdvisorSettings(BaseSettings):
    """Gemini LLM configuration for the advice collaborator."""

    model_config = SettingsConfigDict(
        env_prefix="GEMINI_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    api_key: str = Field(
        ...,
        description="Gemini API key"
    )
    model_name: str = Field(
        default="gemini-1.5-flash",
        description="Gemini model to use"
    )
    max_tokens: int = Field(
        default=1200,
        ge=100,
        le=8192,
        description="Maximum tokens in response"
    )
    # Budget advice should be consistent, saving tips may be creative
    budget_temperature: float = Field(
        default=0.3,
        ge=0.0,
        le=1.0,
        description="Temperature for budget insights"
    )
    investment_temperature: float = Field(
        default=0.8,
        ge=0.0,
        le=1.0,
        description="Temperature for investment saving tips"
    )
    timeout_seconds: float = Field(
        default=20.0,
        gt=0.0,
        le=120.0,
        description="How long to wait for advice before using local insights"
    )


class GoogleSheetsSettings(BaseSettings):
    """Google Sheets storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="GOOGLE_SHEETS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    credentials_path: str = Field(
        ...,
        description="Path to Google service account credentials JSON"
    )
    spreadsheet_id: str = Field(
        ...,
        description="ID of the Google Sheets spreadsheet to use"
    )
    budgets_sheet_name: str = Field(
        default="Budgets",
        description="Name of the sheet holding one budget per user"
    )

    @field_validator('credentials_path')
    @classmethod
    def validate_credentials_path(cls, v: str) -> str:
        """Warn if credentials file doesn't exist (but don't fail - might be mounted later)."""
        if not Path(v).exists():
            import warnings
            warnings.warn(
                f"Google credentials file not found at {v}. "
                "Make sure it exists before running the application."
            )
        return v


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )

    # Budget insight thresholds
    variance_threshold_points: float = Field(
        default=5.0,
        ge=0.0,
        le=100.0,
        description="Percentage points off target before a category is flagged"
    )
    max_budget_insights: int = Field(
        default=5,
        ge=1,
        le=20,
        description="Maximum number of local budget insights"
    )
    max_ai_budget_insights: int = Field(
        default=6,
        ge=1,
        le=20,
        description="Maximum number of AI budget insights"
    )
    min_ai_budget_insights: int = Field(
        default=3,
        ge=0,
        le=20,
        description="Below this many AI insights, top up with local insights"
    )

    # Investment calculator
    max_investment_tips: int = Field(
        default=6,
        ge=1,
        le=20,
        description="Maximum number of saving tips"
    )
    max_annual_return_percent: float = Field(
        default=20.0,
        gt=0.0,
        le=100.0,
        description="Highest annual return the calculator accepts"
    )
    scenario_method: Literal["lump_sum", "monthly"] = Field(
        default="lump_sum",
        description="How what-if scenarios compound the extra contribution"
    )


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Note: These are loaded lazily to allow partial configuration

    @property
    def advisor(self) -> AdvisorSettings:
        return AdvisorSettings()

    @property
    def google_sheets(self) -> GoogleSheetsSettings:
        return GoogleSheetsSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}.
    Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    try:
        _ = settings.advisor
        results["advisor"] = True
    except Exception as e:
        results["advisor"] = False
        results["advisor_error"] = str(e)

    try:
        _ = settings.google_sheets
        results["google_sheets"] = True
    except Exception as e:
        results["google_sheets"] = False
        results["google_sheets_error"] = str(e)

    try:
        _ = settings.app
        results["app"] = True
    except Exception as e:
        results["app"] = False
        results["app_error"] = str(e)

    return results
