"""Data models for design validation.

This module contains the dataclasses and enums shared by the rule-based
comparison engine and the pixel diff engine: style trees, design tokens,
mismatch records, and the result snapshots handed to report consumers.
"""

import base64
import json
import re
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any


class MismatchCategory(str, Enum):
    """Categories a style mismatch can belong to."""

    COLOR = "color"
    TYPOGRAPHY = "typography"
    SPACING = "spacing"
    LAYOUT = "layout"
    BORDER = "border"
    ALIGNMENT = "alignment"
    SIZE = "size"


class MismatchSeverity(str, Enum):
    """Severity levels for style mismatches."""

    CRITICAL = "critical"
    MAJOR = "major"
    MINOR = "minor"
    INFO = "info"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]

    @property
    def penalty(self) -> int:
        """Score points deducted from a category per mismatch."""
        return _SEVERITY_PENALTY[self]

    def __lt__(self, other: "MismatchSeverity") -> bool:
        if isinstance(other, MismatchSeverity):
            return self.rank < other.rank
        return NotImplemented

    def __le__(self, other: "MismatchSeverity") -> bool:
        if isinstance(other, MismatchSeverity):
            return self.rank <= other.rank
        return NotImplemented

    def __gt__(self, other: "MismatchSeverity") -> bool:
        if isinstance(other, MismatchSeverity):
            return self.rank > other.rank
        return NotImplemented

    def __ge__(self, other: "MismatchSeverity") -> bool:
        if isinstance(other, MismatchSeverity):
            return self.rank >= other.rank
        return NotImplemented


_SEVERITY_RANK = {
    MismatchSeverity.CRITICAL: 4,
    MismatchSeverity.MAJOR: 3,
    MismatchSeverity.MINOR: 2,
    MismatchSeverity.INFO: 1,
}

_SEVERITY_PENALTY = {
    MismatchSeverity.CRITICAL: 15,
    MismatchSeverity.MAJOR: 10,
    MismatchSeverity.MINOR: 5,
    MismatchSeverity.INFO: 2,
}


_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")
_LEADING_NUMBER = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+))")

FONT_WEIGHT_KEYWORDS = {"normal": 400, "bold": 700}


def parse_font_weight(value: Any) -> int | None:
    """Parse a CSS font weight such as ``600``, ``"600"`` or ``"bold"``.

    Returns None for values that are neither a keyword nor numeric.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return int(value)
    text = str(value).strip()
    keyword = FONT_WEIGHT_KEYWORDS.get(text.lower())
    if keyword is not None:
        return keyword
    match = _LEADING_NUMBER.match(text)
    return int(float(match.group(1))) if match else None


def _first_present(data: dict[str, Any], *keys: str, default: Any = None) -> Any:
    """First value under ``keys`` that is not None, so falsy values like 0 survive."""
    for key in keys:
        value = data.get(key)
        if value is not None:
            return value
    return default


def normalize_style_key(key: str) -> str:
    """Normalize a style property name to CSS kebab-case.

    ``fontSize``, ``font_size`` and ``font-size`` all become ``font-size``.
    """
    key = key.strip()
    if "-" in key:
        return key.lower()
    return _CAMEL_BOUNDARY.sub("-", key).replace("_", "-").lower()


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned rectangle of a rendered element."""

    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0

    def to_dict(self) -> dict[str, float]:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "BoundingBox":
        if not data:
            return cls()
        return cls(
            x=float(data.get("x", 0)),
            y=float(data.get("y", 0)),
            width=float(data.get("width", 0)),
            height=float(data.get("height", 0)),
        )


@dataclass
class StyleElement:
    """A rendered element with its computed styles.

    Style keys are stored in CSS kebab-case. The comparison engine reads
    elements without mutating or retaining them.
    """

    tag_name: str
    id: str | None = None
    class_list: tuple[str, ...] = ()
    name: str | None = None
    test_id: str | None = None
    styles: dict[str, str] = field(default_factory=dict)
    bounds: BoundingBox = field(default_factory=BoundingBox)
    children: list["StyleElement"] = field(default_factory=list)
    text_content: str | None = None
    attributes: dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.styles = {normalize_style_key(k): v for k, v in self.styles.items()}
        self.class_list = tuple(self.class_list)

    @property
    def class_name(self) -> str:
        """Class attribute as a single space separated string."""
        return " ".join(self.class_list)

    def get_style(self, name: str) -> str | None:
        """Get a computed style value, or None when missing or blank."""
        value = self.styles.get(normalize_style_key(name))
        if value is None:
            return None
        value = str(value).strip()
        return value or None

    def to_dict(self) -> dict[str, Any]:
        return {
            "tagName": self.tag_name,
            "id": self.id,
            "className": self.class_name or None,
            "name": self.name,
            "testId": self.test_id,
            "textContent": self.text_content,
            "attributes": dict(self.attributes),
            "computedStyles": dict(self.styles),
            "boundingBox": self.bounds.to_dict(),
            "children": [child.to_dict() for child in self.children],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "StyleElement":
        """Build an element tree from collaborator data.

        Accepts both the camelCase shape produced by the web analyzer
        (``tagName``, ``className``, ``computedStyles``, ``boundingBox``) and
        snake_case keys.
        """
        attributes = {str(k): str(v) for k, v in (data.get("attributes") or {}).items()}

        classes = data.get("class_list")
        if classes is None:
            classes = (data.get("className") or data.get("class_name") or attributes.get("class") or "").split()

        styles = data.get("computedStyles") or data.get("computed_styles") or data.get("styles") or {}

        return cls(
            tag_name=str(data.get("tagName") or data.get("tag_name") or "div").lower(),
            id=data.get("id") or attributes.get("id") or None,
            class_list=tuple(classes),
            name=data.get("name") or attributes.get("name"),
            test_id=data.get("testId") or data.get("test_id") or attributes.get("data-testid"),
            styles={str(k): str(v) for k, v in styles.items() if v is not None},
            bounds=BoundingBox.from_dict(data.get("boundingBox") or data.get("bounds")),
            children=[cls.from_dict(child) for child in data.get("children") or []],
            text_content=data.get("textContent") or data.get("text_content"),
            attributes=attributes,
        )


@dataclass(frozen=True)
class DesignColor:
    """A named color token."""

    name: str
    hex: str
    rgba: tuple[float, float, float, float] | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DesignColor":
        rgba = data.get("rgba")
        if isinstance(rgba, dict):
            rgba = (rgba.get("r", 0), rgba.get("g", 0), rgba.get("b", 0), rgba.get("a", 1))
        return cls(
            name=data.get("name", ""),
            hex=data["hex"],
            rgba=tuple(rgba) if rgba is not None else None,
        )


@dataclass(frozen=True)
class DesignTypography:
    """A typography token.

    ``line_height`` is either a pixel value, a percentage string such as
    ``"150%"``, or ``"normal"``.
    """

    name: str
    font_family: str
    font_size: float
    font_weight: int = 400
    line_height: float | str = "normal"
    letter_spacing: float = 0.0
    text_align: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DesignTypography":
        weight = parse_font_weight(_first_present(data, "fontWeight", "font_weight"))
        return cls(
            name=data.get("name", ""),
            font_family=_first_present(data, "fontFamily", "font_family", default=""),
            font_size=float(_first_present(data, "fontSize", "font_size", default=16)),
            font_weight=weight if weight is not None else 400,
            line_height=_first_present(data, "lineHeight", "line_height", default="normal"),
            letter_spacing=float(_first_present(data, "letterSpacing", "letter_spacing", default=0)),
            text_align=_first_present(data, "textAlign", "text_align"),
        )


@dataclass(frozen=True)
class DesignSpacing:
    """A named spacing value in pixels."""

    name: str
    value: float

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DesignSpacing":
        return cls(name=data.get("name", ""), value=float(data["value"]))


class EffectType(str, Enum):
    DROP_SHADOW = "DROP_SHADOW"
    INNER_SHADOW = "INNER_SHADOW"
    LAYER_BLUR = "LAYER_BLUR"
    BACKGROUND_BLUR = "BACKGROUND_BLUR"


@dataclass(frozen=True)
class DesignEffect:
    """A shadow or blur descriptor."""

    name: str
    type: EffectType
    color: str | None = None
    offset: tuple[float, float] | None = None
    radius: float | None = None
    spread: float | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DesignEffect":
        offset = data.get("offset")
        if isinstance(offset, dict):
            offset = (offset.get("x", 0), offset.get("y", 0))
        return cls(
            name=data.get("name", ""),
            type=EffectType(data["type"]),
            color=data.get("color"),
            offset=tuple(offset) if offset is not None else None,
            radius=data.get("radius"),
            spread=data.get("spread"),
        )


@dataclass(frozen=True)
class DesignTokenSet:
    """Reference values extracted from a design file.

    Matching is first-minimum, so token order decides ties. Spacing is
    always consumed through ``sorted_spacing()``.
    """

    colors: tuple[DesignColor, ...] = ()
    typography: tuple[DesignTypography, ...] = ()
    spacing: tuple[DesignSpacing, ...] = ()
    effects: tuple[DesignEffect, ...] = ()

    def sorted_spacing(self) -> list[DesignSpacing]:
        """Spacing tokens in ascending value order (stable)."""
        return sorted(self.spacing, key=lambda s: s.value)

    def is_empty(self) -> bool:
        return not (self.colors or self.typography or self.spacing)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DesignTokenSet":
        return cls(
            colors=tuple(DesignColor.from_dict(c) for c in data.get("colors", [])),
            typography=tuple(DesignTypography.from_dict(t) for t in data.get("typography", [])),
            spacing=tuple(DesignSpacing.from_dict(s) for s in data.get("spacing", [])),
            effects=tuple(DesignEffect.from_dict(e) for e in data.get("effects", [])),
        )


@dataclass
class DesignComponent:
    """A named component from the design file with its resolved styles."""

    id: str
    name: str
    type: str = "COMPONENT"
    bounds: BoundingBox = field(default_factory=BoundingBox)
    styles: dict[str, str] = field(default_factory=dict)
    children: list["DesignComponent"] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.styles = {normalize_style_key(k): v for k, v in self.styles.items()}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DesignComponent":
        return cls(
            id=str(data.get("id", "")),
            name=data.get("name", ""),
            type=data.get("type", "COMPONENT"),
            bounds=BoundingBox.from_dict(data.get("boundingBox") or data.get("bounds")),
            styles={str(k): str(v) for k, v in (data.get("styles") or {}).items() if v is not None},
            children=[cls.from_dict(c) for c in data.get("children") or []],
        )


@dataclass(frozen=True)
class StyleMismatch:
    """A single discrepancy between a computed style and the design."""

    id: str
    category: MismatchCategory
    severity: MismatchSeverity
    property: str
    expected_value: str
    actual_value: str
    locator: str
    deviation: float
    tag_name: str = ""
    element_id: str | None = None
    class_name: str | None = None
    token_name: str | None = None
    component_name: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "category": self.category.value,
            "severity": self.severity.value,
            "property": self.property,
            "expectedValue": self.expected_value,
            "actualValue": self.actual_value,
            "element": {
                "selector": self.locator,
                "tagName": self.tag_name,
                "id": self.element_id,
                "className": self.class_name,
            },
            "token": self.token_name,
            "figmaComponent": self.component_name,
            "deviation": self.deviation,
        }


@dataclass(frozen=True)
class MismatchSummary:
    """Mismatch counts by severity."""

    total: int = 0
    critical: int = 0
    major: int = 0
    minor: int = 0
    info: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "total": self.total,
            "critical": self.critical,
            "major": self.major,
            "minor": self.minor,
            "info": self.info,
        }


@dataclass(frozen=True)
class ComparisonResult:
    """Snapshot of one style comparison run."""

    mismatches: tuple[StyleMismatch, ...]
    category_scores: dict[MismatchCategory, int]
    overall_score: int
    summary: MismatchSummary
    timestamp: str = field(default_factory=lambda: datetime.now(UTC).isoformat())

    def get_mismatches_by_category(self, category: MismatchCategory) -> list[StyleMismatch]:
        return [m for m in self.mismatches if m.category == category]

    def get_mismatches_by_severity(self, severity: MismatchSeverity) -> list[StyleMismatch]:
        return [m for m in self.mismatches if m.severity == severity]

    def get_highest_severity(self) -> MismatchSeverity | None:
        if not self.mismatches:
            return None
        return max(m.severity for m in self.mismatches)

    def to_dict(self) -> dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "overallScore": self.overall_score,
            "categoryScores": {c.value: s for c, s in self.category_scores.items()},
            "mismatches": [m.to_dict() for m in self.mismatches],
            "summary": self.summary.to_dict(),
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict())


@dataclass(frozen=True)
class DiffRegion:
    """Bounding box of a cluster of differing pixels.

    ``right`` and ``bottom`` are exclusive edges.
    """

    x: int
    y: int
    width: int
    height: int

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height

    @property
    def area(self) -> int:
        return self.width * self.height

    def is_near(self, other: "DiffRegion", distance: int) -> bool:
        """Check if the boxes overlap or lie within ``distance`` pixels."""
        return not (
            self.right + distance < other.x
            or other.right + distance < self.x
            or self.bottom + distance < other.y
            or other.bottom + distance < self.y
        )

    def union(self, other: "DiffRegion") -> "DiffRegion":
        """Smallest box containing both regions."""
        x = min(self.x, other.x)
        y = min(self.y, other.y)
        return DiffRegion(
            x=x,
            y=y,
            width=max(self.right, other.right) - x,
            height=max(self.bottom, other.bottom) - y,
        )

    def to_dict(self) -> dict[str, int]:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}


@dataclass(frozen=True)
class VisualDiffResult:
    """Result of a pixel-level comparison."""

    diff_image: bytes
    width: int
    height: int
    match_percentage: float
    mismatched_pixels: int
    total_pixels: int
    diff_areas: tuple[DiffRegion, ...] = ()

    @property
    def is_identical(self) -> bool:
        return self.mismatched_pixels == 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "diffImage": base64.b64encode(self.diff_image).decode("utf-8"),
            "width": self.width,
            "height": self.height,
            "matchPercentage": self.match_percentage,
            "mismatchedPixels": self.mismatched_pixels,
            "totalPixels": self.total_pixels,
            "diffAreas": [area.to_dict() for area in self.diff_areas],
        }
