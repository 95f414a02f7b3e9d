"""Main entry point for the design validator."""

import argparse
import asyncio
import json
from pathlib import Path
from typing import Any

import structlog

from .config import Settings, get_settings
from .design_validation import (
    ComparisonEngine,
    DesignComponent,
    DesignTokenSet,
    DesignValidator,
    ImageDecodeError,
    StyleElement,
    VisualDiffEngine,
)
from .utils.logging import configure_logging, log_operation

logger = structlog.get_logger()


def load_json(path: str) -> Any:
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def load_style_tree(path: str) -> list[StyleElement]:
    """Load a style tree file holding one root element or a list of roots.

    A ``domTree`` key (web analyzer output) is unwrapped.
    """
    data = load_json(path)
    if isinstance(data, dict) and "domTree" in data:
        data = data["domTree"]
    if isinstance(data, dict):
        data = [data]
    return [StyleElement.from_dict(item) for item in data]


def load_tokens(path: str) -> DesignTokenSet:
    """Load design tokens; a ``designTokens`` key (design analyzer output) is unwrapped."""
    data = load_json(path)
    if "designTokens" in data:
        data = data["designTokens"]
    return DesignTokenSet.from_dict(data)


def load_components(path: str | None) -> list[DesignComponent]:
    if not path:
        return []
    data = load_json(path)
    if isinstance(data, dict):
        data = data.get("components", [])
    return [DesignComponent.from_dict(item) for item in data]


def write_output(payload: dict, output: str | None) -> None:
    text = json.dumps(payload, indent=2)
    if output:
        output_path = Path(output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(text, encoding="utf-8")
        logger.info("Results saved", path=str(output_path))
    else:
        print(text)


def run_styles(args: argparse.Namespace, settings: Settings) -> dict:
    engine = ComparisonEngine(thresholds=settings.comparison_thresholds())
    with log_operation("style_comparison", tree=args.tree, tokens=args.tokens) as op:
        result = engine.compare(
            load_style_tree(args.tree),
            load_tokens(args.tokens),
            load_components(args.components),
        )
        op["overall_score"] = result.overall_score
    return result.to_dict()


def run_pixels(args: argparse.Namespace, settings: Settings) -> dict:
    options = settings.visual_diff_options()
    if args.threshold is not None:
        options = options.model_copy(update={"threshold": args.threshold})
    if args.include_aa:
        options = options.model_copy(update={"include_aa": True})

    engine = VisualDiffEngine(options)
    image_a = Path(args.image_a).read_bytes()
    image_b = Path(args.image_b).read_bytes()

    with log_operation("pixel_diff", image_a=args.image_a, image_b=args.image_b) as op:
        result = engine.compare(image_a, image_b)
        op["match_percentage"] = result.match_percentage

    if args.diff_out:
        Path(args.diff_out).write_bytes(result.diff_image)
    if args.side_by_side_out:
        Path(args.side_by_side_out).write_bytes(
            engine.generate_side_by_side(image_a, image_b, result.diff_image)
        )

    payload = result.to_dict()
    if args.diff_out:
        # Image already on disk
        payload.pop("diffImage")
    return payload


async def run_validate(args: argparse.Namespace, settings: Settings) -> dict:
    validator = DesignValidator(
        comparison_engine=ComparisonEngine(thresholds=settings.comparison_thresholds()),
        visual_diff_engine=VisualDiffEngine(settings.visual_diff_options()),
    )
    image_a = Path(args.image_a).read_bytes() if args.image_a else None
    image_b = Path(args.image_b).read_bytes() if args.image_b else None

    outcome = await validator.validate(
        load_style_tree(args.tree),
        load_tokens(args.tokens),
        load_components(args.components),
        image_a=image_a,
        image_b=image_b,
        timeout=args.timeout or settings.validation_timeout_seconds,
    )
    return outcome.to_dict()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Compare a rendered web page against a reference design"
    )
    parser.add_argument(
        "--output", "-o",
        help="Write the JSON result to this file instead of stdout"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    styles = subparsers.add_parser("styles", help="Compare computed styles against design tokens")
    styles.add_argument("--tree", required=True, help="Style tree JSON file")
    styles.add_argument("--tokens", required=True, help="Design tokens JSON file")
    styles.add_argument("--components", help="Design components JSON file")

    pixels = subparsers.add_parser("pixels", help="Pixel diff two images")
    pixels.add_argument("image_a", help="Rendered page screenshot")
    pixels.add_argument("image_b", help="Reference design image")
    pixels.add_argument("--diff-out", help="Write the diff visualization PNG here")
    pixels.add_argument("--side-by-side-out", help="Write a side-by-side PNG here")
    pixels.add_argument("--threshold", type=float, help="Matching threshold between 0 and 1")
    pixels.add_argument("--include-aa", action="store_true", help="Count anti-aliased pixels")

    validate = subparsers.add_parser("validate", help="Run both comparisons concurrently")
    validate.add_argument("--tree", required=True, help="Style tree JSON file")
    validate.add_argument("--tokens", required=True, help="Design tokens JSON file")
    validate.add_argument("--components", help="Design components JSON file")
    validate.add_argument("--image-a", help="Rendered page screenshot")
    validate.add_argument("--image-b", help="Reference design image")
    validate.add_argument("--timeout", type=float, help="Timeout in seconds")

    return parser


def cli(argv: list[str] | None = None) -> int:
    """Command-line interface."""
    args = build_parser().parse_args(argv)
    settings = get_settings()
    configure_logging(level=settings.log_level, json_format=settings.log_json)

    try:
        if args.command == "styles":
            payload = run_styles(args, settings)
        elif args.command == "pixels":
            payload = run_pixels(args, settings)
        else:
            payload = asyncio.run(run_validate(args, settings))
    except ImageDecodeError as e:
        logger.error("Image could not be decoded", error=str(e))
        return 1
    except asyncio.TimeoutError:
        logger.error("Validation timed out", timeout=getattr(args, "timeout", None))
        return 1
    except (OSError, json.JSONDecodeError, KeyError, ValueError) as e:
        logger.error("Invalid input", error=str(e))
        return 1

    write_output(payload, args.output)
    return 0


if __name__ == "__main__":
    raise SystemExit(cli())
