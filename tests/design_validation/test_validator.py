"""Tests for design_validation/validator.py."""

import asyncio
import time

import pytest

from src.design_validation.comparison_engine import ComparisonEngine
from src.design_validation.models import DesignTokenSet, StyleElement
from src.design_validation.validator import DesignValidator, ValidationOutcome
from src.design_validation.visual_diff import ImageDecodeError


class SlowComparisonEngine(ComparisonEngine):
    """Comparison engine that blocks before comparing."""

    def compare(self, style_tree, tokens, components=None):
        time.sleep(0.5)
        return super().compare(style_tree, tokens, components)


class TestDesignValidator:
    """Tests for DesignValidator.validate."""

    @pytest.mark.asyncio
    async def test_styles_only(self, nested_tree, brand_tokens):
        outcome = await DesignValidator().validate(nested_tree, brand_tokens)

        assert isinstance(outcome, ValidationOutcome)
        assert outcome.comparison.overall_score == 100
        assert outcome.visual_diff is None
        assert outcome.duration_ms >= 0

    @pytest.mark.asyncio
    async def test_both_engines(self, brand_tokens, solid_png):
        element = StyleElement(tag_name="h1", styles={"color": "#FF0000"})

        outcome = await DesignValidator().validate(
            element,
            brand_tokens,
            image_a=solid_png(20, 20, (255, 0, 0, 255)),
            image_b=solid_png(20, 20, (0, 0, 255, 255)),
        )

        assert outcome.comparison.summary.total == 1
        assert outcome.visual_diff is not None
        assert outcome.visual_diff.mismatched_pixels == 400

    @pytest.mark.asyncio
    async def test_single_image_skips_diff(self, nested_tree, solid_png):
        outcome = await DesignValidator().validate(
            nested_tree, DesignTokenSet(), image_a=solid_png(5, 5)
        )
        assert outcome.visual_diff is None

    @pytest.mark.asyncio
    async def test_decode_error_propagates(self, nested_tree, solid_png):
        with pytest.raises(ImageDecodeError):
            await DesignValidator().validate(
                nested_tree, DesignTokenSet(), image_a=b"bad", image_b=solid_png(5, 5)
            )

    @pytest.mark.asyncio
    async def test_timeout(self, nested_tree):
        validator = DesignValidator(comparison_engine=SlowComparisonEngine())

        with pytest.raises(asyncio.TimeoutError):
            await validator.validate(nested_tree, DesignTokenSet(), timeout=0.05)

    @pytest.mark.asyncio
    async def test_to_dict(self, nested_tree, solid_png):
        image = solid_png(10, 10)

        outcome = await DesignValidator().validate(
            nested_tree, DesignTokenSet(), image_a=image, image_b=image
        )
        data = outcome.to_dict()

        assert data["comparison"]["overallScore"] == 100
        assert data["visualDiff"]["matchPercentage"] == 100.0
        assert "durationMs" in data
