"""Tolerances, severity thresholds and pixel diff options.

All values are optional with defaults; callers override only what they
need. The engines take these models explicitly and never read the
environment themselves (see ``src.config.Settings`` for env-driven values).
"""

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .models import MismatchSeverity


class SeverityThresholds(BaseModel):
    """Tolerance and severity step function for one property category.

    Deviations up to ``tolerance`` are not mismatches. Beyond that, anything
    below ``major`` is minor, anything below ``critical`` is major, and the
    rest is critical.
    """

    model_config = ConfigDict(frozen=True)

    tolerance: float = Field(..., ge=0, description="Largest deviation that still matches")
    major: float = Field(..., ge=0, description="Deviation at which a mismatch becomes major")
    critical: float = Field(..., ge=0, description="Deviation at which a mismatch becomes critical")

    @model_validator(mode="after")
    def _check_order(self) -> "SeverityThresholds":
        if self.major > self.critical:
            raise ValueError("major threshold must not exceed critical threshold")
        return self

    def classify(self, deviation: float) -> MismatchSeverity:
        if deviation >= self.critical:
            return MismatchSeverity.CRITICAL
        if deviation >= self.major:
            return MismatchSeverity.MAJOR
        return MismatchSeverity.MINOR


class ComparisonThresholds(BaseModel):
    """Per-category thresholds for the comparison engine.

    Color values are CIEDE2000 units, line height values are ratios of
    line height to font size, everything else is pixels.
    """

    model_config = ConfigDict(frozen=True)

    color: SeverityThresholds = SeverityThresholds(tolerance=5, major=10, critical=20)
    font_size: SeverityThresholds = SeverityThresholds(tolerance=2, major=4, critical=8)
    spacing: SeverityThresholds = SeverityThresholds(tolerance=4, major=8, critical=16)
    border_radius: SeverityThresholds = SeverityThresholds(tolerance=2, major=4, critical=8)
    line_height: SeverityThresholds = SeverityThresholds(tolerance=0.1, major=0.2, critical=0.3)


Channel = Annotated[int, Field(ge=0, le=255)]
RGBColor = tuple[Channel, Channel, Channel]


class VisualDiffOptions(BaseModel):
    """Options for the pixel diff engine."""

    model_config = ConfigDict(frozen=True)

    threshold: float = Field(0.1, ge=0.0, le=1.0, description="Matching threshold, smaller is more sensitive")
    include_aa: bool = Field(False, description="Count anti-aliased pixels as differences")
    alpha: float = Field(0.1, ge=0.0, le=1.0, description="Blending factor of unchanged pixels")
    diff_color: RGBColor = Field((255, 0, 0), description="Color of differing pixels")
    diff_color_alt: RGBColor = Field((255, 255, 0), description="Color of anti-aliased pixels")
    min_region_pixels: int = Field(10, ge=1, description="Regions with fewer pixels are noise")
    merge_distance: int = Field(20, ge=0, description="Merge regions closer than this many pixels")
    max_fill_stack: int = Field(100_000, ge=1, description="Flood fill stack cap per region")
