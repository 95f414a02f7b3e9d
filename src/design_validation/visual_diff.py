"""Pixel-level visual diff.

Decodes two screenshots, extends them to a common canvas, classifies every
pixel with pixelmatch, and clusters the differing pixels into merged
bounding regions. Inputs are never modified; every call allocates its own
buffers.
"""

import base64
import binascii
import io
import re
import time

import numpy as np
import structlog
from PIL import Image
from pixelmatch.contrib.PIL import pixelmatch

from .models import DiffRegion, VisualDiffResult
from .regions import extract_regions, merge_regions
from .thresholds import VisualDiffOptions

logger = structlog.get_logger()

CANVAS_FILL = (255, 255, 255, 255)
SIDE_BY_SIDE_GAP = 10
SIDE_BY_SIDE_BACKGROUND = (245, 245, 245, 255)

_DATA_URI_PREFIX = re.compile(r"^data:image/[\w.+-]+;base64,", re.IGNORECASE)

ImageSource = bytes | bytearray | str | Image.Image


class ImageDecodeError(Exception):
    """Raised when an input cannot be decoded into an image."""

    pass


def _source_to_bytes(source: bytes | bytearray | str) -> bytes:
    """Raw image bytes from bytes, base64 text, or a data URI."""
    if isinstance(source, (bytes, bytearray)):
        raw = bytes(source)
        if raw[:5].lower() != b"data:":
            return raw
        source = raw.decode("ascii")

    text = _DATA_URI_PREFIX.sub("", source.strip(), count=1)
    return base64.b64decode("".join(text.split()), validate=True)


def _image_to_bytes(image: Image.Image, format: str = "PNG") -> bytes:
    """Convert PIL Image to bytes."""
    buffer = io.BytesIO()
    image.save(buffer, format=format)
    return buffer.getvalue()


def decode_image(source: ImageSource) -> Image.Image:
    """
    Decode an image into a new RGBA buffer.

    Args:
        source: Raw image bytes, base64 text, a ``data:image/...;base64,``
            URI (str or bytes), or a PIL Image

    Returns:
        RGBA PIL Image owned by the caller

    Raises:
        ImageDecodeError: If the input is not a decodable image
    """
    if isinstance(source, Image.Image):
        return source.convert("RGBA")
    if not isinstance(source, (bytes, bytearray, str)):
        raise TypeError(f"Unsupported image source type: {type(source).__name__}")

    try:
        raw = _source_to_bytes(source)
        image = Image.open(io.BytesIO(raw))
        image.load()
        return image.convert("RGBA")
    except (
        binascii.Error,
        UnicodeDecodeError,
        OSError,
        ValueError,
        Image.DecompressionBombError,
    ) as e:
        logger.error("Failed to decode image", error=str(e))
        raise ImageDecodeError(f"Failed to parse image: {e}") from e


def extend_canvas(image: Image.Image, width: int, height: int) -> Image.Image:
    """Place ``image`` at the top-left of an opaque white canvas.

    No scaling is applied; pixels outside the target size are cropped.
    """
    canvas = Image.new("RGBA", (width, height), CANVAS_FILL)
    canvas.paste(image, (0, 0))
    return canvas


def normalize_images(
    image_a: Image.Image,
    image_b: Image.Image,
) -> tuple[Image.Image, Image.Image]:
    """Bring two images to common dimensions (max width, max height)."""
    if image_a.size == image_b.size:
        return image_a, image_b

    width = max(image_a.width, image_b.width)
    height = max(image_a.height, image_b.height)
    logger.debug(
        "Normalizing image sizes",
        size_a=image_a.size,
        size_b=image_b.size,
        target=(width, height),
    )
    return extend_canvas(image_a, width, height), extend_canvas(image_b, width, height)


def changed_pixels(image_a: Image.Image, image_b: Image.Image) -> np.ndarray:
    """Boolean mask of pixels whose RGBA values differ between two same-size images."""
    return np.any(np.asarray(image_a) != np.asarray(image_b), axis=-1)


def find_diff_areas(
    diff_image: Image.Image,
    options: VisualDiffOptions,
    changed: np.ndarray | None = None,
) -> list[DiffRegion]:
    """Merged bounding boxes of diff-colored pixels in a diff visualization.

    Unchanged pixels are drawn as faded grayscale, which can land exactly on
    a gray ``diff_color``. Passing the ``changed`` mask restricts detection to
    pixels that actually differ between the inputs.
    """
    pixels = np.asarray(diff_image.convert("RGB"))
    mask = np.all(pixels == np.array(options.diff_color, dtype=pixels.dtype), axis=-1)
    if changed is not None:
        mask &= changed
    if not mask.any():
        return []

    regions = extract_regions(
        mask,
        min_pixels=options.min_region_pixels,
        max_stack=options.max_fill_stack,
    )
    return merge_regions(regions, options.merge_distance)


class VisualDiffEngine:
    """Pixel diff between a rendered page and a reference design.

    Example:
        engine = VisualDiffEngine()
        result = engine.compare(screenshot_png, design_png)
        print(f"{result.match_percentage}% match, {len(result.diff_areas)} regions")
    """

    def __init__(self, options: VisualDiffOptions | None = None):
        self.options = options or VisualDiffOptions()

    def compare(
        self,
        image_a: ImageSource,
        image_b: ImageSource,
        options: VisualDiffOptions | None = None,
    ) -> VisualDiffResult:
        """
        Compare two images pixel by pixel.

        Args:
            image_a: First image (PNG bytes, base64, or data URI)
            image_b: Second image
            options: Overrides the engine's default options for this call

        Returns:
            VisualDiffResult with the diff visualization as PNG bytes

        Raises:
            ImageDecodeError: If either input cannot be decoded
        """
        opts = options or self.options
        started = time.perf_counter()

        img_a, img_b = normalize_images(decode_image(image_a), decode_image(image_b))
        width, height = img_a.size

        diff = Image.new("RGBA", (width, height))
        mismatched_pixels = pixelmatch(
            img_a,
            img_b,
            diff,
            threshold=opts.threshold,
            includeAA=opts.include_aa,
            alpha=opts.alpha,
            aa_color=opts.diff_color_alt,
            diff_color=opts.diff_color,
        )

        total_pixels = width * height
        if total_pixels:
            match_percentage = round((total_pixels - mismatched_pixels) / total_pixels * 100, 2)
        else:
            match_percentage = 100.0

        diff_areas = (
            find_diff_areas(diff, opts, changed_pixels(img_a, img_b)) if mismatched_pixels else []
        )

        logger.info(
            "Visual diff completed",
            width=width,
            height=height,
            mismatched_pixels=mismatched_pixels,
            match_percentage=match_percentage,
            regions=len(diff_areas),
            duration_ms=int((time.perf_counter() - started) * 1000),
        )

        return VisualDiffResult(
            diff_image=_image_to_bytes(diff),
            width=width,
            height=height,
            match_percentage=match_percentage,
            mismatched_pixels=mismatched_pixels,
            total_pixels=total_pixels,
            diff_areas=tuple(diff_areas),
        )

    def generate_side_by_side(
        self,
        image_a: ImageSource,
        image_b: ImageSource,
        diff_image: ImageSource,
    ) -> bytes:
        """
        Lay out two images and their diff left to right.

        Images are separated by fixed gaps on a light gray background and
        top-aligned; shorter images leave the background visible below.

        Returns:
            PNG bytes of the combined image
        """
        images = [decode_image(image_a), decode_image(image_b), decode_image(diff_image)]

        width = sum(img.width for img in images) + SIDE_BY_SIDE_GAP * (len(images) - 1)
        height = max(img.height for img in images)
        combined = Image.new("RGBA", (width, height), SIDE_BY_SIDE_BACKGROUND)

        offset = 0
        for img in images:
            combined.paste(img, (offset, 0))
            offset += img.width + SIDE_BY_SIDE_GAP

        return _image_to_bytes(combined)
