"""Tests for design_validation/models.py."""

import base64
import json

import pytest

from src.design_validation.models import (
    BoundingBox,
    ComparisonResult,
    DesignComponent,
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
    normalize_style_key,
    parse_font_weight,
)


def _mismatch(id="mismatch-1", category=MismatchCategory.COLOR, severity=MismatchSeverity.MAJOR):
    return StyleMismatch(
        id=id,
        category=category,
        severity=severity,
        property="color",
        expected_value="#00FF00",
        actual_value="#FF0000",
        locator="#title",
        deviation=42.0,
        tag_name="h1",
        element_id="title",
        token_name="primary",
    )


class TestMismatchSeverity:
    """Tests for severity ordering and penalties."""

    def test_ordering(self):
        assert MismatchSeverity.CRITICAL > MismatchSeverity.MAJOR
        assert MismatchSeverity.MAJOR > MismatchSeverity.MINOR
        assert MismatchSeverity.MINOR > MismatchSeverity.INFO
        assert MismatchSeverity.INFO <= MismatchSeverity.INFO

    def test_max_picks_most_severe(self):
        severities = [MismatchSeverity.MINOR, MismatchSeverity.CRITICAL, MismatchSeverity.INFO]
        assert max(severities) == MismatchSeverity.CRITICAL

    def test_penalties(self):
        assert MismatchSeverity.CRITICAL.penalty == 15
        assert MismatchSeverity.MAJOR.penalty == 10
        assert MismatchSeverity.MINOR.penalty == 5
        assert MismatchSeverity.INFO.penalty == 2

    def test_string_values(self):
        assert MismatchSeverity("critical") == MismatchSeverity.CRITICAL
        assert MismatchCategory.SPACING.value == "spacing"


class TestNormalizeStyleKey:
    """Tests for style key normalization."""

    @pytest.mark.parametrize(
        "key,expected",
        [
            ("fontSize", "font-size"),
            ("font_size", "font-size"),
            ("font-size", "font-size"),
            ("backgroundColor", "background-color"),
            ("color", "color"),
        ],
    )
    def test_normalize(self, key, expected):
        assert normalize_style_key(key) == expected


class TestStyleElement:
    """Tests for StyleElement."""

    def test_styles_normalized_on_init(self, button_element):
        assert button_element.get_style("background-color") == "rgb(0, 255, 0)"
        assert button_element.get_style("paddingTop") == "8px"

    def test_get_style_blank_is_none(self):
        element = StyleElement(tag_name="div", styles={"color": "   "})
        assert element.get_style("color") is None
        assert element.get_style("margin-top") is None

    def test_class_name(self, button_element):
        assert button_element.class_name == "btn btn-primary"

    def test_from_dict_web_analyzer_shape(self):
        """Test building from the camelCase collaborator shape."""
        data = {
            "tagName": "DIV",
            "className": "card elevated",
            "attributes": {"data-testid": "card-1", "name": "promo"},
            "computedStyles": {"fontSize": "14px", "color": "#333"},
            "boundingBox": {"x": 1, "y": 2, "width": 30, "height": 40},
            "children": [{"tagName": "span", "textContent": "Hi"}],
        }

        element = StyleElement.from_dict(data)

        assert element.tag_name == "div"
        assert element.class_list == ("card", "elevated")
        assert element.test_id == "card-1"
        assert element.name == "promo"
        assert element.get_style("font-size") == "14px"
        assert element.bounds == BoundingBox(1.0, 2.0, 30.0, 40.0)
        assert element.children[0].text_content == "Hi"

    def test_to_dict_round_trips_through_from_dict(self, button_element):
        restored = StyleElement.from_dict(button_element.to_dict())
        assert restored.id == "submit"
        assert restored.class_list == button_element.class_list
        assert restored.styles == button_element.styles


class TestDesignTokenSet:
    """Tests for DesignTokenSet."""

    def test_sorted_spacing(self, brand_tokens):
        assert [s.value for s in brand_tokens.sorted_spacing()] == [4, 8, 16]

    def test_is_empty(self, brand_tokens):
        assert DesignTokenSet().is_empty()
        assert not brand_tokens.is_empty()

    def test_from_dict(self):
        tokens = DesignTokenSet.from_dict(
            {
                "colors": [{"name": "primary", "hex": "#0066FF", "rgba": {"r": 0, "g": 102, "b": 255, "a": 1}}],
                "typography": [{"name": "h1", "fontFamily": "Inter", "fontSize": 32, "fontWeight": 700, "lineHeight": 40}],
                "spacing": [{"name": "sm", "value": 8}],
                "effects": [{"name": "card", "type": "DROP_SHADOW", "offset": {"x": 0, "y": 2}, "radius": 4}],
            }
        )

        assert tokens.colors[0].rgba == (0, 102, 255, 1)
        assert tokens.typography[0] == DesignTypography(
            name="h1", font_family="Inter", font_size=32.0, font_weight=700, line_height=40
        )
        assert tokens.spacing[0].value == 8.0
        assert tokens.effects[0].type == EffectType.DROP_SHADOW
        assert tokens.effects[0].offset == (0, 2)


class TestDesignTypography:
    """Tests for typography token parsing."""

    def test_zero_values_kept(self):
        token = DesignTypography.from_dict(
            {"name": "tiny", "fontFamily": "Inter", "fontSize": 0, "letterSpacing": 0, "lineHeight": 0}
        )

        assert token.font_size == 0.0
        assert token.letter_spacing == 0.0
        assert token.line_height == 0

    def test_defaults_when_missing(self):
        token = DesignTypography.from_dict({"name": "body"})

        assert token.font_family == ""
        assert token.font_size == 16.0
        assert token.font_weight == 400
        assert token.line_height == "normal"

    def test_snake_case_keys(self):
        token = DesignTypography.from_dict({"name": "h2", "font_size": 24, "font_weight": "600"})

        assert token.font_size == 24.0
        assert token.font_weight == 600

    @pytest.mark.parametrize(
        "raw,expected",
        [("bold", 700), ("Normal", 400), ("600", 600), (500, 500), (300.0, 300)],
    )
    def test_font_weight_forms(self, raw, expected):
        token = DesignTypography.from_dict({"name": "h1", "fontSize": 32, "fontWeight": raw})
        assert token.font_weight == expected

    def test_parse_font_weight_unparseable(self):
        assert parse_font_weight("heavy") is None
        assert parse_font_weight(None) is None
        assert DesignTypography.from_dict({"name": "x", "fontWeight": "heavy"}).font_weight == 400


class TestDesignComponent:
    """Tests for DesignComponent."""

    def test_from_dict_normalizes_styles(self):
        component = DesignComponent.from_dict(
            {"id": "1:2", "name": "Button", "styles": {"borderRadius": "8px", "padding": None}}
        )
        assert component.styles == {"border-radius": "8px"}
        assert component.type == "COMPONENT"


class TestStyleMismatch:
    """Tests for StyleMismatch serialization."""

    def test_to_dict(self):
        data = _mismatch().to_dict()

        assert data["id"] == "mismatch-1"
        assert data["category"] == "color"
        assert data["severity"] == "major"
        assert data["expectedValue"] == "#00FF00"
        assert data["element"] == {
            "selector": "#title",
            "tagName": "h1",
            "id": "title",
            "className": None,
        }
        assert data["token"] == "primary"
        assert data["figmaComponent"] is None


class TestComparisonResult:
    """Tests for ComparisonResult."""

    def _result(self, mismatches):
        return ComparisonResult(
            mismatches=tuple(mismatches),
            category_scores={MismatchCategory.COLOR: 90},
            overall_score=98,
            summary=MismatchSummary(total=len(mismatches)),
        )

    def test_filters(self):
        result = self._result(
            [
                _mismatch("mismatch-1", MismatchCategory.COLOR, MismatchSeverity.MAJOR),
                _mismatch("mismatch-2", MismatchCategory.SPACING, MismatchSeverity.MINOR),
            ]
        )

        assert [m.id for m in result.get_mismatches_by_category(MismatchCategory.SPACING)] == ["mismatch-2"]
        assert [m.id for m in result.get_mismatches_by_severity(MismatchSeverity.MAJOR)] == ["mismatch-1"]
        assert result.get_highest_severity() == MismatchSeverity.MAJOR

    def test_highest_severity_empty(self):
        assert self._result([]).get_highest_severity() is None

    def test_to_json(self):
        payload = json.loads(self._result([_mismatch()]).to_json())

        assert payload["overallScore"] == 98
        assert payload["categoryScores"] == {"color": 90}
        assert payload["summary"]["total"] == 1
        assert payload["timestamp"]


class TestDiffRegion:
    """Tests for DiffRegion geometry."""

    def test_edges_and_area(self):
        region = DiffRegion(x=10, y=20, width=5, height=4)
        assert region.right == 15
        assert region.bottom == 24
        assert region.area == 20

    def test_is_near_overlapping(self):
        a = DiffRegion(0, 0, 10, 10)
        b = DiffRegion(5, 5, 10, 10)
        assert a.is_near(b, 0)
        assert b.is_near(a, 0)

    def test_is_near_within_distance(self):
        a = DiffRegion(0, 0, 10, 10)
        b = DiffRegion(25, 0, 10, 10)
        assert a.is_near(b, 20)
        assert not a.is_near(b, 10)

    def test_union(self):
        merged = DiffRegion(0, 0, 10, 10).union(DiffRegion(20, 5, 10, 10))
        assert merged == DiffRegion(0, 0, 30, 15)


class TestVisualDiffResult:
    """Tests for VisualDiffResult."""

    def test_to_dict_encodes_image(self):
        result = VisualDiffResult(
            diff_image=b"\x89PNG",
            width=2,
            height=1,
            match_percentage=50.0,
            mismatched_pixels=1,
            total_pixels=2,
            diff_areas=(DiffRegion(0, 0, 1, 1),),
        )

        data = result.to_dict()

        assert base64.b64decode(data["diffImage"]) == b"\x89PNG"
        assert data["diffAreas"] == [{"x": 0, "y": 0, "width": 1, "height": 1}]
        assert not result.is_identical
