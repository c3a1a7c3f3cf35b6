"""Configuration system for the Moneta engine.

This module provides Pydantic Settings-based configuration with environment
variable support and defaults matching the tracker's documented heuristics.

Usage:
    from moneta_core.config import MonetaConfig

    # Load from environment variables and .env file
    config = MonetaConfig()

    # Access amortization settings
    print(config.amortization.max_periods)

    # Hand a section to a component
    detector = PatternDetector(config.patterns)
"""

import logging
from decimal import Decimal

import structlog
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_SEASONAL_MULTIPLIERS: dict[int, Decimal] = {
    1: Decimal("0.85"),
    6: Decimal("1.10"),
    7: Decimal("1.10"),
    12: Decimal("1.15"),
}


class RecurrenceConfig(BaseSettings):
    """Recurring-entry expansion and bulk materialization settings.

    Environment Variables:
        MONETA_RECURRENCE_MAX_PROJECTED_ENTRIES: Warn above this many entries
        MONETA_RECURRENCE_SEED_HORIZON_YEARS: Warn for seeds older than this
        MONETA_RECURRENCE_SKIP_EXISTING: Default dedup behaviour for bulk runs
    """

    model_config = SettingsConfigDict(
        env_prefix="MONETA_RECURRENCE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    max_projected_entries: int = Field(
        default=1000,
        gt=0,
        description="Projected entry count above which a bulk run is flagged",
    )
    seed_horizon_years: int = Field(
        default=10,
        ge=1,
        le=100,
        description="Seed dates older than this many years are flagged",
    )
    skip_existing: bool = Field(
        default=True,
        description="Filter occurrences that already exist in storage",
    )


class AmortizationConfig(BaseSettings):
    """Loan payoff simulation settings.

    Environment Variables:
        MONETA_AMORTIZATION_MAX_PERIODS: Hard cap on simulated months
        MONETA_AMORTIZATION_PAYOFF_EPSILON: Balance treated as paid off
        MONETA_AMORTIZATION_EXTRA_PAYMENT_AMOUNTS: JSON list of extra payments
    """

    model_config = SettingsConfigDict(
        env_prefix="MONETA_AMORTIZATION_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    max_periods: int = Field(
        default=600,
        gt=0,
        le=1200,
        description="Maximum number of monthly steps before giving up",
    )
    payoff_epsilon: Decimal = Field(
        default=Decimal("0.01"),
        gt=0,
        description="Remaining balance at or below which the loan is paid off",
    )
    extra_payment_amounts: list[Decimal] = Field(
        default_factory=lambda: [
            Decimal("50"),
            Decimal("100"),
            Decimal("200"),
            Decimal("500"),
        ],
        description="Extra monthly payments to simulate as what-if scenarios",
    )

    @field_validator("extra_payment_amounts")
    @classmethod
    def validate_extra_payments(cls, v: list[Decimal]) -> list[Decimal]:
        """Extra payments must be positive."""
        if any(amount <= 0 for amount in v):
            raise ValueError("Extra payment amounts must be positive")
        return v


class PatternConfig(BaseSettings):
    """Spending pattern detection thresholds.

    Environment Variables:
        MONETA_PATTERN_AMOUNT_BAND: Amount bucket width for recurring detection
        MONETA_PATTERN_MIN_RECURRING_OCCURRENCES: Minimum bucket size
        MONETA_PATTERN_MIN_ANOMALY_SAMPLES: Minimum records per category
        MONETA_PATTERN_INTERVAL_VARIANCE_RATIO: Variance / mean interval limit
        MONETA_PATTERN_ANOMALY_Z_THRESHOLD: Z-score above which a record is flagged
    """

    model_config = SettingsConfigDict(
        env_prefix="MONETA_PATTERN_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    amount_band: Decimal = Field(
        default=Decimal("5"),
        gt=0,
        description="Width of the amount band expenses are snapped to",
    )
    min_recurring_occurrences: int = Field(
        default=3,
        ge=2,
        description="Minimum occurrences for a bucket to be considered recurring",
    )
    min_anomaly_samples: int = Field(
        default=5,
        ge=2,
        description="Minimum records in a category before anomalies are checked",
    )
    interval_variance_ratio: float = Field(
        default=0.3,
        gt=0,
        description="Interval variance must stay below ratio * mean interval",
    )
    anomaly_z_threshold: float = Field(
        default=2.0,
        gt=0,
        description="Z-score above which an expense is flagged as an anomaly",
    )


class ProjectionConfig(BaseSettings):
    """Trend projection settings.

    Environment Variables:
        MONETA_PROJECTION_HISTORY_WINDOW: Number of recent periods to use
        MONETA_PROJECTION_CONFIDENCE_FLOOR: Lowest reported confidence
        MONETA_PROJECTION_CONFIDENCE_CEILING: Highest reported confidence
        MONETA_PROJECTION_STABILITY_BAND_PERCENT: Half-year trend band
        MONETA_PROJECTION_SEASONAL_MULTIPLIERS: JSON object of month -> factor
    """

    model_config = SettingsConfigDict(
        env_prefix="MONETA_PROJECTION_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    history_window: int = Field(
        default=6,
        ge=1,
        le=36,
        description="Number of trailing periods the projection averages",
    )
    confidence_floor: float = Field(
        default=0.6,
        ge=0.0,
        le=1.0,
        description="Lower clamp for projection confidence",
    )
    confidence_ceiling: float = Field(
        default=0.95,
        ge=0.0,
        le=1.0,
        description="Upper clamp for projection confidence",
    )
    stability_band_percent: Decimal = Field(
        default=Decimal("5"),
        ge=0,
        description="Half-year changes within this percentage are 'stable'",
    )
    seasonal_multipliers: dict[int, Decimal] = Field(
        default_factory=lambda: dict(DEFAULT_SEASONAL_MULTIPLIERS),
        description="Month number (1-12) to spending multiplier; missing months are 1.0",
    )

    @field_validator("confidence_ceiling")
    @classmethod
    def ceiling_above_floor(cls, v, info):
        """Validate that the ceiling is not below the floor."""
        if "confidence_floor" in info.data and v < info.data["confidence_floor"]:
            raise ValueError("confidence_ceiling must be >= confidence_floor")
        return v

    def seasonal_factor(self, month: int) -> Decimal:
        """Return the multiplier for a calendar month (1.0 when unlisted)."""
        return self.seasonal_multipliers.get(month, Decimal("1"))


class GoalConfig(BaseSettings):
    """Budget and goal heuristics.

    Environment Variables:
        MONETA_GOAL_SAVINGS_BASELINE_MULTIPLIER: Assumed spending baseline
            for savings goals, as a multiple of the goal target
        MONETA_GOAL_NEAR_LIMIT_PERCENT: Budget usage flagged as near the limit
    """

    model_config = SettingsConfigDict(
        env_prefix="MONETA_GOAL_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    savings_baseline_multiplier: Decimal = Field(
        default=Decimal("1.5"),
        ge=1,
        description="Expected spending = target * multiplier when measuring savings goals",
    )
    near_limit_percent: Decimal = Field(
        default=Decimal("80"),
        gt=0,
        le=100,
        description="Budget usage percentage at which a budget is near its limit",
    )


class MonetaConfig(BaseSettings):
    """Root configuration for the Moneta engine.

    Combines all configuration subsections. Supports loading from
    environment variables and .env files.

    Environment Variables:
        MONETA_ENV: Environment name (development, staging, production, test)
        MONETA_LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR)

    Example:
        config = MonetaConfig(
            amortization=AmortizationConfig(max_periods=360),
        )
    """

    model_config = SettingsConfigDict(
        env_prefix="MONETA_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    env: str = Field(
        default="development",
        description="Environment name (development, staging, production, test)",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )

    recurrence: RecurrenceConfig = Field(default_factory=RecurrenceConfig)
    amortization: AmortizationConfig = Field(default_factory=AmortizationConfig)
    patterns: PatternConfig = Field(default_factory=PatternConfig)
    projection: ProjectionConfig = Field(default_factory=ProjectionConfig)
    goals: GoalConfig = Field(default_factory=GoalConfig)

    @field_validator("env")
    @classmethod
    def validate_env(cls, v: str) -> str:
        """Validate environment name."""
        valid_envs = {"development", "staging", "production", "test"}
        v_lower = v.lower().strip()
        if v_lower not in valid_envs:
            raise ValueError(f"Invalid environment: {v}. Must be one of: {valid_envs}")
        return v_lower

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate and normalize log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper().strip()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of: {valid_levels}")
        return v_upper

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.env == "production"

    @property
    def is_debug(self) -> bool:
        """Check if debug logging is enabled."""
        return self.log_level == "DEBUG"


def configure_logging(config: MonetaConfig) -> None:
    """Set structlog's minimum level from the configuration."""
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(config.log_level)
        ),
    )
