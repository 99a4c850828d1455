"""Centralized configuration using pydantic-settings.

All tunable windows and thresholds for the analysis pipeline.
Values can be overridden via environment variables with SIGHTGLASS_ prefix.

Example:
    SIGHTGLASS_CLASSIFIER__LOOKBACK_WINDOW=12
    SIGHTGLASS_CHAINS__FOLLOW_ON_WINDOW_SEC=45
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ClassifierSettings(BaseSettings):
    """Sliding-window parameters for install classification."""

    model_config = SettingsConfigDict(env_prefix="SIGHTGLASS_CLASSIFIER__")

    lookback_window: int = Field(
        default=10,
        gt=0,
        description="Preceding session events inspected for each install",
    )
    reactive_search_window_sec: float = Field(
        default=60.0,
        gt=0,
        description="Max seconds between a failure and a search for it to count as reactive",
    )
    max_alternatives: int = Field(
        default=10,
        ge=0,
        description="Max candidate package names kept per event",
    )
    min_alternative_length: int = Field(
        default=3,
        gt=0,
        description="Shortest token accepted as a candidate package name",
    )


class ChainSettings(BaseSettings):
    """Decision chain windowing."""

    model_config = SettingsConfigDict(env_prefix="SIGHTGLASS_CHAINS__")

    lookback_window: int = Field(
        default=10,
        ge=0,
        description="Preceding positions scanned for searches and abandoned installs",
    )
    lookahead_window: int = Field(
        default=10,
        ge=0,
        description="Following positions scanned for searches and sub-decisions",
    )
    follow_on_window_sec: float = Field(
        default=30.0,
        ge=0,
        description="Installs closer than this to the root join its chain",
    )


class RiskSettings(BaseSettings):
    """Risk scoring thresholds."""

    model_config = SettingsConfigDict(env_prefix="SIGHTGLASS_RISK__")

    training_bias_min_confidence: int = Field(
        default=80,
        ge=0,
        le=100,
        description="Training recall confidence that triggers a training_bias factor",
    )


class IngestSettings(BaseSettings):
    """Event ingestion limits."""

    model_config = SettingsConfigDict(env_prefix="SIGHTGLASS_INGEST__")

    max_result_chars: int = Field(
        default=2000,
        gt=0,
        description="Tool output is truncated to this many characters",
    )


class SightglassSettings(BaseSettings):
    """Root configuration for the analysis pipeline.

    All settings can be overridden via environment variables with SIGHTGLASS_ prefix.
    Nested settings use double underscore: SIGHTGLASS_RISK__TRAINING_BIAS_MIN_CONFIDENCE=90
    """

    model_config = SettingsConfigDict(
        env_prefix="SIGHTGLASS_",
        env_nested_delimiter="__",
    )

    classifier: ClassifierSettings = Field(default_factory=ClassifierSettings)
    chains: ChainSettings = Field(default_factory=ChainSettings)
    risk: RiskSettings = Field(default_factory=RiskSettings)
    ingest: IngestSettings = Field(default_factory=IngestSettings)


# Singleton instance
settings = SightglassSettings()
