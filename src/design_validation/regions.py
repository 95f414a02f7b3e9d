"""Connected region extraction and merging for diff masks.

Regions are found with an iterative 4-connected flood fill that uses an
explicit stack instead of recursion. The stack is capped: when a fill
exceeds ``max_stack`` pending pixels it stops early and the region's box
covers only the pixels visited so far. Pixels left unvisited by a
truncated fill seed new regions, which the merge step usually joins back.
"""

import numpy as np

from .models import DiffRegion

DEFAULT_MIN_PIXELS = 10
DEFAULT_MAX_STACK = 100_000
DEFAULT_MERGE_DISTANCE = 20


def _flood_fill(
    mask: list[list[bool]],
    visited: bytearray,
    width: int,
    height: int,
    start_x: int,
    start_y: int,
    max_stack: int,
) -> tuple[DiffRegion, int]:
    stack = [(start_x, start_y)]
    min_x = max_x = start_x
    min_y = max_y = start_y
    pixel_count = 0

    while stack:
        x, y = stack.pop()
        if x < 0 or x >= width or y < 0 or y >= height:
            continue
        key = y * width + x
        if visited[key] or not mask[y][x]:
            continue

        visited[key] = 1
        pixel_count += 1

        if x < min_x:
            min_x = x
        elif x > max_x:
            max_x = x
        if y < min_y:
            min_y = y
        elif y > max_y:
            max_y = y

        stack.append((x + 1, y))
        stack.append((x - 1, y))
        stack.append((x, y + 1))
        stack.append((x, y - 1))

        if len(stack) > max_stack:
            break

    region = DiffRegion(x=min_x, y=min_y, width=max_x - min_x + 1, height=max_y - min_y + 1)
    return region, pixel_count


def extract_regions(
    mask: np.ndarray,
    min_pixels: int = DEFAULT_MIN_PIXELS,
    max_stack: int = DEFAULT_MAX_STACK,
) -> list[DiffRegion]:
    """
    Find bounding boxes of connected clusters in a boolean mask.

    Seeds are taken in row-major order. Clusters with fewer than
    ``min_pixels`` pixels are dropped as noise.

    Args:
        mask: 2-D boolean array, True where pixels differ
        min_pixels: Noise floor in pixels
        max_stack: Flood fill stack cap per region

    Returns:
        List of DiffRegion in discovery order
    """
    if mask.ndim != 2:
        raise ValueError(f"Expected a 2-D mask, got shape {mask.shape}")

    height, width = mask.shape
    rows = mask.astype(bool).tolist()
    visited = bytearray(width * height)
    regions: list[DiffRegion] = []

    for index in np.flatnonzero(mask).tolist():
        if visited[index]:
            continue
        y, x = divmod(index, width)
        region, pixel_count = _flood_fill(rows, visited, width, height, x, y, max_stack)
        if pixel_count >= min_pixels:
            regions.append(region)

    return regions


def merge_regions(
    regions: list[DiffRegion],
    distance: int = DEFAULT_MERGE_DISTANCE,
) -> list[DiffRegion]:
    """
    Merge regions that overlap or lie within ``distance`` pixels.

    Passes repeat until one completes without a merge, so no two regions
    in the result are near each other and merging the result again is a
    no-op.
    """
    merged = list(regions)
    changed = True

    while changed and len(merged) > 1:
        changed = False
        result: list[DiffRegion] = []
        for region in merged:
            for index, existing in enumerate(result):
                if existing.is_near(region, distance):
                    result[index] = existing.union(region)
                    changed = True
                    break
            else:
                result.append(region)
        merged = result

    return merged
