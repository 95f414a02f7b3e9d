"""Fixtures for design validation tests."""

import io

import pytest
from PIL import Image

from src.design_validation import (
    DesignColor,
    DesignSpacing,
    DesignTokenSet,
    DesignTypography,
    StyleElement,
)


def make_png(width, height, color=(255, 255, 255, 255)):
    """Encode a solid RGBA image as PNG bytes."""
    img = Image.new("RGBA", (width, height), color)
    buffer = io.BytesIO()
    img.save(buffer, format="PNG")
    return buffer.getvalue()


def png_with_square(width, height, box, background=(255, 255, 255, 255), fill=(255, 0, 0, 255)):
    """PNG bytes of a solid background with one filled rectangle."""
    img = Image.new("RGBA", (width, height), background)
    x, y, w, h = box
    img.paste(Image.new("RGBA", (w, h), fill), (x, y))
    buffer = io.BytesIO()
    img.save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def brand_tokens():
    """A small token set with one color, two type styles and a spacing scale."""
    return DesignTokenSet(
        colors=(
            DesignColor(name="primary", hex="#00FF00"),
            DesignColor(name="text", hex="#333333"),
        ),
        typography=(
            DesignTypography(name="body", font_family="Inter", font_size=16, font_weight=400, line_height=24),
            DesignTypography(name="heading", font_family="Inter", font_size=32, font_weight=700, line_height="125%"),
        ),
        spacing=(
            DesignSpacing(name="md", value=16),
            DesignSpacing(name="xs", value=4),
            DesignSpacing(name="sm", value=8),
        ),
    )


@pytest.fixture
def button_element():
    """A button with id and classes."""
    return StyleElement(
        tag_name="button",
        id="submit",
        class_list=("btn", "btn-primary"),
        styles={"backgroundColor": "rgb(0, 255, 0)", "paddingTop": "8px"},
    )


@pytest.fixture
def nested_tree():
    """Root section with an anonymous paragraph and a classed card."""
    return StyleElement(
        tag_name="section",
        children=[
            StyleElement(tag_name="p"),
            StyleElement(
                tag_name="div",
                class_list=("card",),
                children=[StyleElement(tag_name="span")],
            ),
        ],
    )


@pytest.fixture
def solid_png():
    """Factory for solid color PNG bytes."""
    return make_png


@pytest.fixture
def square_png():
    """Factory for PNG bytes with one filled rectangle."""
    return png_with_square
