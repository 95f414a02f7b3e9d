"""Concurrent runner for the comparison and pixel diff engines.

Both engines are synchronous and share no state, so the validator runs
them side by side in worker threads and joins their results. Timeouts are
applied around the call boundary; the engines themselves cannot be
cancelled and a timed-out worker thread finishes in the background.
"""

import asyncio
import time
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any

import structlog

from .comparison_engine import ComparisonEngine
from .models import (
    ComparisonResult,
    DesignComponent,
    DesignTokenSet,
    StyleElement,
    VisualDiffResult,
)
from .visual_diff import ImageSource, VisualDiffEngine

logger = structlog.get_logger()


@dataclass(frozen=True)
class ValidationOutcome:
    """Joined output of both engines."""

    comparison: ComparisonResult
    visual_diff: VisualDiffResult | None
    duration_ms: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "comparison": self.comparison.to_dict(),
            "visualDiff": self.visual_diff.to_dict() if self.visual_diff else None,
            "durationMs": self.duration_ms,
        }


class DesignValidator:
    """Runs style comparison and pixel diff concurrently."""

    def __init__(
        self,
        comparison_engine: ComparisonEngine | None = None,
        visual_diff_engine: VisualDiffEngine | None = None,
    ):
        self.comparison_engine = comparison_engine or ComparisonEngine()
        self.visual_diff_engine = visual_diff_engine or VisualDiffEngine()

    async def validate(
        self,
        style_tree: StyleElement | Iterable[StyleElement],
        tokens: DesignTokenSet,
        components: Sequence[DesignComponent] | None = None,
        image_a: ImageSource | None = None,
        image_b: ImageSource | None = None,
        timeout: float | None = None,
    ) -> ValidationOutcome:
        """
        Run both engines and join their results.

        The pixel diff runs only when both images are supplied.

        Args:
            style_tree: Root element or sequence of root elements
            tokens: Design tokens for the style comparison
            components: Optional design components
            image_a: Rendered page screenshot
            image_b: Reference design image
            timeout: Seconds to wait for both engines, None for no limit

        Returns:
            ValidationOutcome with both results

        Raises:
            ImageDecodeError: If an image cannot be decoded
            asyncio.TimeoutError: If the timeout elapses first
        """
        started = time.perf_counter()

        tasks = [
            asyncio.to_thread(self.comparison_engine.compare, style_tree, tokens, components)
        ]
        run_diff = image_a is not None and image_b is not None
        if run_diff:
            tasks.append(asyncio.to_thread(self.visual_diff_engine.compare, image_a, image_b))
        else:
            logger.debug("Skipping visual diff, images not provided")

        results = await asyncio.wait_for(asyncio.gather(*tasks), timeout=timeout)

        outcome = ValidationOutcome(
            comparison=results[0],
            visual_diff=results[1] if run_diff else None,
            duration_ms=int((time.perf_counter() - started) * 1000),
        )
        logger.info(
            "Validation completed",
            overall_score=outcome.comparison.overall_score,
            match_percentage=outcome.visual_diff.match_percentage if outcome.visual_diff else None,
            duration_ms=outcome.duration_ms,
        )
        return outcome
