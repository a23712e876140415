#!/usr/bin/env python3
"""Manual script running an interactive segmentation session headless.

Points are normalized image coordinates (0..1). Each point is applied as a
click, the same way the UI does, and the final mask is saved.

Usage examples:
    # Single positive point in the middle of the image
    python scripts/segment_image.py --image scripts/data/test.jpg --point 0.5,0.5

    # Refine with a negative point
    python scripts/segment_image.py --image scripts/data/test.jpg --point 0.5,0.5 --negative 0.2,0.8

    # Use the example image
    python scripts/segment_image.py --example --point 0.45,0.55
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

# Add backend package to path
sys.path.insert(0, str(Path(__file__).parent.parent / "packages/samcut-backend/src"))

from samcut_backend.enums import PointerButton, PointerKind
from samcut_backend.services import EXAMPLE_IMAGE_URL, SamService, fetch_image_url, load_image_bytes
from samcut_backend.session import CUTOUT_FILENAME, PointerEvent, SegmentationSession, Viewport, encode_png

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
logger = logging.getLogger(__name__)

# Clicks are expressed directly in normalized coordinates
UNIT_VIEWPORT = Viewport(left=0.0, top=0.0, width=1.0, height=1.0)


def parse_point(value: str) -> tuple[float, float]:
    """Parse an 'x,y' pair of normalized coordinates."""
    try:
        x_str, y_str = value.split(",")
        x, y = float(x_str), float(y_str)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Expected x,y but got {value!r}") from None
    if not (0 <= x <= 1 and 0 <= y <= 1):
        raise argparse.ArgumentTypeError(f"Coordinates must be in [0, 1], got {value!r}")
    return x, y


async def run(args: argparse.Namespace) -> None:
    if args.example:
        logger.info(f"Fetching example image: {EXAMPLE_IMAGE_URL}")
        data = await fetch_image_url(EXAMPLE_IMAGE_URL)
    else:
        logger.info(f"Loading image: {args.image}")
        data = args.image.read_bytes()
    image = load_image_bytes(data)

    sam = SamService(model_name=args.model) if args.model else SamService()
    logger.info("Loading SAM model...")
    sam.load_model()

    try:
        session = SegmentationSession(sam)
        await session.load_image(image)

        clicks = [(p, PointerButton.PRIMARY) for p in args.point] + [
            (p, PointerButton.SECONDARY) for p in args.negative
        ]
        for (x, y), button in clicks:
            session.handle_pointer(
                PointerEvent(kind=PointerKind.DOWN, client_x=x, client_y=y, button=button),
                UNIT_VIEWPORT,
            )
            await session.wait_until_settled()
            logger.info(session.status)

        save_results(session, args.output_dir)
    finally:
        logger.info("Unloading SAM model...")
        sam.unload_model()


def save_results(session: SegmentationSession, output_dir: Path) -> None:
    """Save the overlay preview and the cutout."""
    output_dir.mkdir(parents=True, exist_ok=True)

    if session.rendered_mask is None:
        logger.warning("No mask was produced")
        return

    overlay_path = output_dir / "overlay.png"
    overlay_path.write_bytes(encode_png(session.overlay_image(with_source=True)))
    logger.info(f"Saved overlay to {overlay_path}")

    cutout_path = output_dir / CUTOUT_FILENAME
    cutout_path.write_bytes(encode_png(session.cutout()))
    logger.info(f"Saved cutout to {cutout_path}")

    print(f"\n{'=' * 50}")
    print(f"Results saved to: {output_dir}")
    print(f"Points: {len(session.points)}")
    print(session.status)
    print(f"{'=' * 50}\n")


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Segment an image from point prompts",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--image", type=Path, help="Path to input image")
    source.add_argument("--example", action="store_true", help="Use the example image")
    parser.add_argument("--point", type=parse_point, action="append", default=[], help="Positive point x,y")
    parser.add_argument("--negative", type=parse_point, action="append", default=[], help="Negative point x,y")
    parser.add_argument("--model", type=str, help="Hugging Face SAM checkpoint to use")
    parser.add_argument("--output-dir", type=Path, default=Path("./output"), help="Output directory for results")
    args = parser.parse_args()

    if args.image and not args.image.exists():
        parser.error(f"Image file not found: {args.image}")
    if not args.point and not args.negative:
        parser.error("At least one --point or --negative is required")

    asyncio.run(run(args))


if __name__ == "__main__":
    main()
