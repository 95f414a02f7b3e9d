"""Rule-based comparison of computed styles against design tokens.

The engine walks a style tree in pre-order and checks each element's
computed colors, typography, spacing and border radius against the closest
design token. Optionally, named design components are paired with elements
and their resolved styles diffed directly. Every mismatch is classified by
severity and rolled up into per-category and overall scores.

Example:
    engine = ComparisonEngine()
    result = engine.compare(style_tree, tokens)
    print(result.overall_score, result.summary.total)
"""

import itertools
import re
from collections.abc import Iterable, Sequence

import structlog

from .color import is_transparent, parse_color, rgb_to_hex
from .component_matcher import ComponentMatcher, LocatedElement, SubstringComponentMatcher
from .models import (
    ComparisonResult,
    DesignColor,
    DesignComponent,
    DesignSpacing,
    DesignTokenSet,
    DesignTypography,
    MismatchCategory,
    MismatchSeverity,
    StyleElement,
    StyleMismatch,
    parse_font_weight,
)
from .scoring import calculate_category_scores, calculate_overall_score, summarize
from .thresholds import ComparisonThresholds, SeverityThresholds
from .token_matcher import TokenMatch, find_nearest_color, find_nearest_value, nearest

logger = structlog.get_logger()

PADDING_PROPERTIES = ("padding-top", "padding-right", "padding-bottom", "padding-left")
MARGIN_PROPERTIES = ("margin-top", "margin-right", "margin-bottom", "margin-left")
SPACING_PROPERTIES = PADDING_PROPERTIES + MARGIN_PROPERTIES + ("gap",)

COMPONENT_PROPERTIES = (
    "font-size",
    "font-weight",
    "line-height",
    "padding",
    "margin",
    "border-radius",
)

DEFAULT_FONT_SIZE = 16.0

_PIXEL_VALUE = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+))(px)?(?=\s|$)", re.IGNORECASE)
_LEADING_NUMBER = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+))")


def parse_px(value: str | None) -> float | None:
    """Parse a pixel length such as ``"12px"`` or ``"12"``.

    Only the first value of a multi-value string is read. Other units
    (``%``, ``em``) and keywords return None.
    """
    if value is None:
        return None
    match = _PIXEL_VALUE.match(value)
    return float(match.group(1)) if match else None


def _leading_number(value: str | None) -> float | None:
    if value is None:
        return None
    match = _LEADING_NUMBER.match(value)
    return float(match.group(1)) if match else None


def format_px(value: float) -> str:
    return f"{round(value, 2):g}px"


def build_locator(element: StyleElement, path: str) -> str:
    """Descriptive locator: ``#id``, else ``.first-class``, else the path."""
    if element.id:
        return f"#{element.id}"
    if element.class_list:
        return f".{element.class_list[0]}"
    return path or element.tag_name


def locate_elements(style_tree: StyleElement | Iterable[StyleElement]) -> list[LocatedElement]:
    """Flatten a style tree into pre-order with a locator per element.

    Child paths are built from the parent's locator, so locators describe
    position but are not guaranteed unique.
    """
    roots = [style_tree] if isinstance(style_tree, StyleElement) else list(style_tree)

    located: list[LocatedElement] = []
    stack = [(root, f"body > :nth-child({index + 1})") for index, root in enumerate(roots)]
    stack.reverse()

    while stack:
        element, path = stack.pop()
        locator = build_locator(element, path)
        located.append(LocatedElement(element=element, locator=locator))
        for index in reversed(range(len(element.children))):
            stack.append((element.children[index], f"{locator} > :nth-child({index + 1})"))

    return located


def category_for_property(prop: str) -> MismatchCategory:
    """Map a CSS property name to its mismatch category."""
    if prop in ("color", "background-color"):
        return MismatchCategory.COLOR
    if prop in ("font-size", "font-family", "font-weight", "line-height", "letter-spacing"):
        return MismatchCategory.TYPOGRAPHY
    if prop == "gap" or prop.startswith("margin") or prop.startswith("padding"):
        return MismatchCategory.SPACING
    if prop in ("border-radius", "border-width", "border-color"):
        return MismatchCategory.BORDER
    if prop in ("width", "height"):
        return MismatchCategory.SIZE
    if prop in ("text-align", "justify-content", "align-items"):
        return MismatchCategory.ALIGNMENT
    return MismatchCategory.LAYOUT


def _token_line_height_ratio(token: DesignTypography) -> float | None:
    """Line height of a typography token as a multiple of its font size."""
    if not token.font_size:
        return None
    line_height = token.line_height
    if isinstance(line_height, (int, float)):
        return float(line_height) / token.font_size
    text = str(line_height).strip()
    if text.endswith("%"):
        number = _leading_number(text[:-1])
        return number / 100 if number is not None else None
    number = parse_px(text)
    return number / token.font_size if number is not None else None


def _element_line_height_ratio(value: str, font_size: float) -> float | None:
    text = value.strip().lower()
    if text.endswith("%"):
        number = _leading_number(text[:-1])
        return number / 100 if number is not None else None
    if text.endswith("px"):
        number = parse_px(text)
        return number / font_size if number is not None else None
    # Unitless line heights are multipliers
    return _leading_number(text)


class _ComparisonRun:
    """Mismatch collector owned by a single ``compare`` call."""

    def __init__(self) -> None:
        self.mismatches: list[StyleMismatch] = []
        self._ids = itertools.count(1)

    def add(
        self,
        located: LocatedElement,
        category: MismatchCategory,
        severity: MismatchSeverity,
        prop: str,
        expected: str,
        actual: str,
        deviation: float,
        token_name: str | None = None,
        component_name: str | None = None,
    ) -> None:
        element = located.element
        self.mismatches.append(
            StyleMismatch(
                id=f"mismatch-{next(self._ids)}",
                category=category,
                severity=severity,
                property=prop,
                expected_value=expected,
                actual_value=actual,
                locator=located.locator,
                deviation=deviation,
                tag_name=element.tag_name,
                element_id=element.id,
                class_name=element.class_name or None,
                token_name=token_name,
                component_name=component_name,
            )
        )


class ComparisonEngine:
    """Compares computed styles of a rendered page against design tokens.

    The engine holds only configuration; all per-run state lives in the
    ``compare`` call, so one instance can serve concurrent callers.
    """

    def __init__(
        self,
        thresholds: ComparisonThresholds | None = None,
        component_matcher: ComponentMatcher | None = None,
    ):
        self.thresholds = thresholds or ComparisonThresholds()
        self.component_matcher = component_matcher or SubstringComponentMatcher()

    def compare(
        self,
        style_tree: StyleElement | Iterable[StyleElement],
        tokens: DesignTokenSet,
        components: Sequence[DesignComponent] | None = None,
    ) -> ComparisonResult:
        """
        Compare a style tree against a design token set.

        Args:
            style_tree: Root element, or a sequence of root elements
            tokens: Design tokens to match against
            components: Optional design components for direct style diffing

        Returns:
            ComparisonResult with mismatches, category scores, overall score
            and a severity summary
        """
        run = _ComparisonRun()
        elements = locate_elements(style_tree)

        if tokens.colors:
            self._compare_colors(run, elements, tokens.colors)
        if tokens.typography:
            self._compare_typography(run, elements, tokens.typography)
        if tokens.spacing:
            self._compare_spacing(run, elements, tokens.sorted_spacing())
        if components and elements:
            self._compare_components(run, elements, components)

        category_scores = calculate_category_scores(run.mismatches)
        result = ComparisonResult(
            mismatches=tuple(run.mismatches),
            category_scores=category_scores,
            overall_score=calculate_overall_score(category_scores),
            summary=summarize(run.mismatches),
        )

        logger.info(
            "Style comparison completed",
            elements=len(elements),
            mismatches=result.summary.total,
            overall_score=result.overall_score,
        )
        return result

    def _check_color(
        self,
        run: _ComparisonRun,
        located: LocatedElement,
        prop: str,
        value: str,
        colors: Sequence[DesignColor],
        category: MismatchCategory,
    ) -> None:
        match = find_nearest_color(value, colors, self.thresholds.color.tolerance)
        if match is None:
            return
        r, g, b, _ = parse_color(value)
        run.add(
            located,
            category=category,
            severity=self.thresholds.color.classify(match.deviation),
            prop=prop,
            expected=match.token.hex,
            actual=rgb_to_hex(r, g, b),
            deviation=match.deviation,
            token_name=match.token.name,
        )

    def _compare_colors(
        self,
        run: _ComparisonRun,
        elements: Sequence[LocatedElement],
        colors: Sequence[DesignColor],
    ) -> None:
        for located in elements:
            element = located.element

            color = element.get_style("color")
            if color:
                self._check_color(run, located, "color", color, colors, MismatchCategory.COLOR)

            background = element.get_style("background-color")
            if background and not is_transparent(background):
                self._check_color(
                    run, located, "background-color", background, colors, MismatchCategory.COLOR
                )

            border_color = element.get_style("border-color")
            border_width = parse_px(element.get_style("border-width"))
            if border_color and border_width and not is_transparent(border_color):
                self._check_color(
                    run, located, "border-color", border_color, colors, MismatchCategory.BORDER
                )

    def _compare_typography(
        self,
        run: _ComparisonRun,
        elements: Sequence[LocatedElement],
        typography: Sequence[DesignTypography],
    ) -> None:
        font_size_rules = self.thresholds.font_size
        line_height_rules = self.thresholds.line_height

        line_height_candidates = []
        for token in typography:
            ratio = _token_line_height_ratio(token)
            if ratio is not None:
                line_height_candidates.append((token, ratio))

        for located in elements:
            element = located.element

            raw_size = element.get_style("font-size")
            font_size = parse_px(raw_size)
            if font_size is not None:
                match = find_nearest_value(
                    font_size, typography, lambda t: t.font_size, font_size_rules.tolerance
                )
                if match:
                    run.add(
                        located,
                        category=MismatchCategory.TYPOGRAPHY,
                        severity=font_size_rules.classify(match.deviation),
                        prop="font-size",
                        expected=format_px(match.token.font_size),
                        actual=raw_size,
                        deviation=match.deviation,
                        token_name=match.token.name,
                    )

            raw_weight = element.get_style("font-weight")
            weight = parse_font_weight(raw_weight)
            if weight is not None:
                closest = nearest(weight, typography, lambda t: t.font_weight)
                if closest and closest.deviation > 0:
                    run.add(
                        located,
                        category=MismatchCategory.TYPOGRAPHY,
                        severity=MismatchSeverity.MINOR,
                        prop="font-weight",
                        expected=str(closest.token.font_weight),
                        actual=raw_weight,
                        deviation=closest.deviation,
                        token_name=closest.token.name,
                    )

            raw_line_height = element.get_style("line-height")
            if raw_line_height and raw_line_height.lower() != "normal" and line_height_candidates:
                self._check_line_height(
                    run,
                    located,
                    raw_line_height,
                    font_size or DEFAULT_FONT_SIZE,
                    line_height_candidates,
                    line_height_rules,
                )

    def _check_line_height(
        self,
        run: _ComparisonRun,
        located: LocatedElement,
        raw_line_height: str,
        font_size: float,
        candidates: Sequence[tuple[DesignTypography, float]],
        rules: SeverityThresholds,
    ) -> None:
        ratio = _element_line_height_ratio(raw_line_height, font_size)
        if ratio is None:
            logger.debug("Skipping unparseable line height", value=raw_line_height)
            return

        match: TokenMatch | None = find_nearest_value(
            ratio, candidates, lambda c: c[1], rules.tolerance
        )
        if match is None:
            return

        token, token_ratio = match.token
        run.add(
            located,
            category=MismatchCategory.TYPOGRAPHY,
            severity=rules.classify(match.deviation),
            prop="line-height",
            expected=format_px(token_ratio * token.font_size),
            actual=raw_line_height,
            deviation=match.deviation * 100,
            token_name=token.name,
        )

    def _compare_spacing(
        self,
        run: _ComparisonRun,
        elements: Sequence[LocatedElement],
        spacing: Sequence[DesignSpacing],
    ) -> None:
        spacing_rules = self.thresholds.spacing
        radius_rules = self.thresholds.border_radius

        for located in elements:
            element = located.element

            for prop in SPACING_PROPERTIES:
                value = parse_px(element.get_style(prop))
                if not value or value <= 0:
                    continue
                match = find_nearest_value(value, spacing, lambda s: s.value, spacing_rules.tolerance)
                if match:
                    run.add(
                        located,
                        category=MismatchCategory.SPACING,
                        severity=spacing_rules.classify(match.deviation),
                        prop=prop,
                        expected=format_px(match.token.value),
                        actual=format_px(value),
                        deviation=match.deviation,
                        token_name=match.token.name,
                    )

            radius = parse_px(element.get_style("border-radius"))
            if radius and radius > 0:
                match = find_nearest_value(radius, spacing, lambda s: s.value, radius_rules.tolerance)
                if match:
                    run.add(
                        located,
                        category=MismatchCategory.BORDER,
                        severity=radius_rules.classify(match.deviation),
                        prop="border-radius",
                        expected=format_px(match.token.value),
                        actual=format_px(radius),
                        deviation=match.deviation,
                        token_name=match.token.name,
                    )

    def _compare_components(
        self,
        run: _ComparisonRun,
        elements: Sequence[LocatedElement],
        components: Sequence[DesignComponent],
    ) -> None:
        tolerance = self.thresholds.spacing.tolerance

        for component in components:
            if not component.styles:
                continue
            located = self.component_matcher.match(elements, component)
            if located is None:
                logger.debug("No element matched component", component=component.name)
                continue

            for prop in COMPONENT_PROPERTIES:
                expected_raw = component.styles.get(prop)
                actual_raw = located.element.get_style(prop)
                if not expected_raw or not actual_raw:
                    continue

                expected = _leading_number(expected_raw)
                actual = _leading_number(actual_raw)
                if expected is None or actual is None:
                    continue

                delta = abs(expected - actual)
                if delta > tolerance:
                    run.add(
                        located,
                        category=category_for_property(prop),
                        severity=MismatchSeverity.MAJOR,
                        prop=prop,
                        expected=expected_raw,
                        actual=actual_raw,
                        deviation=delta,
                        component_name=component.name,
                    )
