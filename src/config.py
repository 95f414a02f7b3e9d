"""Configuration management for the design validator."""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .design_validation.thresholds import (
    ComparisonThresholds,
    SeverityThresholds,
    VisualDiffOptions,
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Every variable is prefixed with ``DESIGN_VALIDATOR_``, for example
    ``DESIGN_VALIDATOR_COLOR_TOLERANCE=3``.
    """

    model_config = SettingsConfigDict(
        env_prefix="DESIGN_VALIDATOR_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Logging
    log_level: str = Field("INFO", description="Log level (DEBUG, INFO, WARNING, ERROR)")
    log_json: bool = Field(False, description="Emit logs as JSON")

    # Style comparison tolerances
    color_tolerance: float = Field(5.0, ge=0, description="Max CIEDE2000 distance treated as a match")
    font_size_tolerance: float = Field(2.0, ge=0, description="Font size tolerance in pixels")
    spacing_tolerance: float = Field(4.0, ge=0, description="Spacing tolerance in pixels")
    border_radius_tolerance: float = Field(2.0, ge=0, description="Border radius tolerance in pixels")

    # Pixel diff
    diff_threshold: float = Field(0.1, ge=0.0, le=1.0, description="Pixel matching threshold")
    diff_include_aa: bool = Field(False, description="Count anti-aliased pixels as differences")
    diff_alpha: float = Field(0.1, ge=0.0, le=1.0, description="Blending factor of unchanged pixels")
    region_min_pixels: int = Field(10, ge=1, description="Noise floor for diff regions")
    region_merge_distance: int = Field(20, ge=0, description="Merge distance for diff regions")

    # Orchestration
    validation_timeout_seconds: Optional[float] = Field(
        None, gt=0, description="Upper bound for a full validation run"
    )

    def comparison_thresholds(self) -> ComparisonThresholds:
        """Comparison thresholds with the configured tolerances."""
        defaults = ComparisonThresholds()
        return ComparisonThresholds(
            color=_with_tolerance(defaults.color, self.color_tolerance),
            font_size=_with_tolerance(defaults.font_size, self.font_size_tolerance),
            spacing=_with_tolerance(defaults.spacing, self.spacing_tolerance),
            border_radius=_with_tolerance(defaults.border_radius, self.border_radius_tolerance),
            line_height=defaults.line_height,
        )

    def visual_diff_options(self) -> VisualDiffOptions:
        """Pixel diff options with the configured values."""
        return VisualDiffOptions(
            threshold=self.diff_threshold,
            include_aa=self.diff_include_aa,
            alpha=self.diff_alpha,
            min_region_pixels=self.region_min_pixels,
            merge_distance=self.region_merge_distance,
        )


def _with_tolerance(rules: SeverityThresholds, tolerance: float) -> SeverityThresholds:
    return rules.model_copy(update={"tolerance": tolerance})


def get_settings() -> Settings:
    """Get application settings."""
    return Settings()
