"""Design validation engines.

This module compares a rendered web page against a reference design in two
independent ways: a rule-based comparison of computed styles against design
tokens, and a pixel-level diff of screenshots that clusters differing pixels
into regions.
"""

from .color import ColorParseError, color_distance, delta_e_2000, parse_color, rgb_to_lab
from .comparison_engine import ComparisonEngine, build_locator, category_for_property, locate_elements
from .component_matcher import ComponentMatcher, LocatedElement, SubstringComponentMatcher
from .models import (
    BoundingBox,
    ComparisonResult,
    DesignColor,
    DesignComponent,
    DesignEffect,
    DesignSpacing,
    DesignTokenSet,
    DesignTypography,
    DiffRegion,
    EffectType,
    MismatchCategory,
    MismatchSeverity,
    MismatchSummary,
    StyleElement,
    StyleMismatch,
    VisualDiffResult,
)
from .regions import extract_regions, merge_regions
from .scoring import CATEGORY_WEIGHTS, calculate_category_scores, calculate_overall_score
from .thresholds import ComparisonThresholds, SeverityThresholds, VisualDiffOptions
from .token_matcher import TokenMatch, find_nearest_color, find_nearest_value
from .validator import DesignValidator, ValidationOutcome
from .visual_diff import ImageDecodeError, VisualDiffEngine, decode_image, normalize_images

__all__ = [
    # Models
    "BoundingBox",
    "StyleElement",
    "DesignColor",
    "DesignTypography",
    "DesignSpacing",
    "DesignEffect",
    "EffectType",
    "DesignTokenSet",
    "DesignComponent",
    "MismatchCategory",
    "MismatchSeverity",
    "StyleMismatch",
    "MismatchSummary",
    "ComparisonResult",
    "DiffRegion",
    "VisualDiffResult",
    # Color distance
    "ColorParseError",
    "parse_color",
    "rgb_to_lab",
    "delta_e_2000",
    "color_distance",
    # Token matching
    "TokenMatch",
    "find_nearest_color",
    "find_nearest_value",
    # Configuration
    "SeverityThresholds",
    "ComparisonThresholds",
    "VisualDiffOptions",
    # Comparison engine
    "ComparisonEngine",
    "ComponentMatcher",
    "SubstringComponentMatcher",
    "LocatedElement",
    "build_locator",
    "locate_elements",
    "category_for_property",
    "CATEGORY_WEIGHTS",
    "calculate_category_scores",
    "calculate_overall_score",
    # Pixel diff engine
    "VisualDiffEngine",
    "ImageDecodeError",
    "decode_image",
    "normalize_images",
    "extract_regions",
    "merge_regions",
    # Orchestration
    "DesignValidator",
    "ValidationOutcome",
]
