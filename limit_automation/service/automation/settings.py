"""
Automation Settings for the credit-limit decisioning engine.

This module contains the tunable parameters of the eligibility gate, the
decision finalizer and the background runner. They can be adjusted via
environment variables without touching the rule code.

Environment variables use the AUTOMATION_ prefix:
    AUTOMATION_ALLOWED_COUNTRIES='["AUS","NZL"]'
    AUTOMATION_POLICY_LOOKUP_TIMEOUT_SECONDS=5
    AUTOMATION_REVIEW_TASK_DUE_DAYS=7

Usage:
    from limit_automation.service.automation.settings import automation_settings

    months = automation_settings.approval_validity_months

    # Or create custom settings for testing
    custom = AutomationSettings(max_attempts=1)
"""

from functools import lru_cache
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AutomationSettings(BaseSettings):
    """
    Configurable parameters for automated credit-limit decisioning.

    All settings can be overridden via environment variables with AUTOMATION_ prefix.
    """

    model_config = SettingsConfigDict(
        env_prefix="AUTOMATION_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # === Eligibility Gate ===
    allowed_countries: List[str] = Field(
        default=["AUS", "NZL"],
        description="Debtor countries eligible for automation (ISO alpha-3)",
    )
    credit_insurance_product: str = Field(
        default="Credit Insurance",
        description="Product name fragment identifying a Credit-Insurance policy",
    )
    risk_management_product: str = Field(
        default="Risk Management",
        description="Product name fragment identifying a Risk-Management policy",
    )
    policy_lookup_timeout_seconds: float = Field(
        default=5.0,
        gt=0.0,
        description="Upper bound for each policy lookup before the run fails to review",
    )

    # === Decision Finalizer ===
    approval_validity_months: int = Field(
        default=12,
        ge=1,
        description="Months an auto-approved limit stays in force",
    )
    review_task_due_days: int = Field(
        default=7,
        ge=1,
        description="Days the risk analyst has to review a referred application",
    )

    # === Background Runner ===
    max_attempts: int = Field(
        default=3,
        ge=1,
        description="Attempts per detached decisioning run before giving up",
    )
    retry_base_delay_seconds: float = Field(
        default=0.5,
        ge=0.0,
        description="Base delay for exponential backoff between attempts",
    )
    max_tracked_outcomes: int = Field(
        default=1000,
        ge=1,
        description="Finished runs whose outcome is kept for status queries",
    )

    @field_validator("allowed_countries")
    @classmethod
    def normalize_countries(cls, v: List[str]) -> List[str]:
        """Country codes are compared upper-case."""
        return [code.strip().upper() for code in v if code.strip()]


@lru_cache
def get_automation_settings() -> AutomationSettings:
    """Get cached automation settings instance."""
    return AutomationSettings()


automation_settings = get_automation_settings()
