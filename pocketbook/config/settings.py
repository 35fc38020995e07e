"""
Configuration Management for Pocketbook

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Budget thresholds, report layout and storage location are all tunable
without touching the business logic.
"""

from decimal import Decimal
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Local persistence configuration."""

    model_config = SettingsConfigDict(
        env_prefix="POCKETBOOK_STORAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    data_dir: Path = Field(
        default=Path.home() / ".pocketbook",
        description="Directory holding one JSON file per stored key"
    )
    audit_log_name: str = Field(
        default="audit.jsonl",
        description="File name (inside data_dir) of the audit trail"
    )

    @field_validator('data_dir')
    @classmethod
    def expand_data_dir(cls, v: Path) -> Path:
        """Allow ~ in the configured path."""
        return v.expanduser()

    @property
    def audit_log_path(self) -> Path:
        return self.data_dir / self.audit_log_name


class BudgetSettings(BaseSettings):
    """Thresholds used by the budget evaluator."""

    model_config = SettingsConfigDict(
        env_prefix="POCKETBOOK_BUDGET_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    window_days: int = Field(
        default=30,
        ge=1,
        le=366,
        description="Length of the trailing spending window in days"
    )
    baseline_windows: int = Field(
        default=3,
        ge=1,
        le=24,
        description="How many earlier windows form the spending baseline"
    )
    underspend_ratio: float = Field(
        default=0.5,
        ge=0.0,
        le=1.0,
        description="Spend below this share of a limit is an opportunity"
    )
    insight_deviation: float = Field(
        default=0.3,
        ge=0.0,
        description="Relative deviation from baseline that triggers an insight"
    )
    default_monthly_limit: Decimal = Field(
        default=Decimal("1000"),
        ge=0,
        description="Monthly limit of a freshly created budget"
    )


class ReportSettings(BaseSettings):
    """Layout of the exported PDF report."""

    model_config = SettingsConfigDict(
        env_prefix="POCKETBOOK_REPORT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    first_page_lines: int = Field(
        default=22,
        ge=1,
        description="Transaction lines on the first page (below the header)"
    )
    page_lines: int = Field(
        default=26,
        ge=1,
        description="Transaction lines on each continuation page"
    )
    currency_symbol: str = Field(
        default="$",
        max_length=3,
    )
    dpi: int = Field(
        default=144,
        ge=72,
        le=600,
        description="Raster resolution of rendered pages"
    )


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

    items_per_page: int = Field(
        default=10,
        ge=1,
        le=100,
        description="Transactions shown per page in the ledger view"
    )
    max_upload_size_mb: int = Field(
        default=5,
        ge=1,
        le=50,
        description="Maximum CSV upload size in MB"
    )

    @property
    def max_upload_size_bytes(self) -> int:
        """Get max upload size in bytes."""
        return self.max_upload_size_mb * 1024 * 1024


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

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def budget(self) -> BudgetSettings:
        return BudgetSettings()

    @property
    def report(self) -> ReportSettings:
        return ReportSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings groups load.

    Returns a dict of {setting_name: is_valid}, plus "<name>_error"
    entries for the groups that failed. Useful for startup checks.
    """
    results = {}
    settings = get_settings()

    for name in ("storage", "budget", "report", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
