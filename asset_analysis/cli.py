"""Command line entry point for asset image analysis.

Usage:
    python -m asset_analysis.cli analyze     <inputs...> [-o results.jsonl] [--tags a,b] [--records]
    python -m asset_analysis.cli categorize  --width W --height H [--transparent] [--tags a,b]
    python -m asset_analysis.cli overlay     <image> -o <overlay.png>

Subcommands:
  analyze     Detect grid, animation, colours and category for preview images
  categorize  Categorize an asset from its dimensions and tags alone
  overlay     Save the detected tile grid drawn over an image
"""

import argparse
import json
import logging
import sys
from collections import Counter
from pathlib import Path
from typing import List, Optional

logger = logging.getLogger("asset_analysis")


def _setup_logging(debug: bool = False):
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def _parse_tags(value: Optional[str]) -> List[str]:
    if not value:
        return []
    return [t.strip() for t in value.split(",") if t.strip()]


# ---- Subcommand: analyze ----

def cmd_analyze(args):
    from asset_analysis.analyzer import analyze_batch
    from asset_analysis.loader import gather_images

    image_paths = gather_images(args.inputs, recursive=args.recursive)
    if not image_paths:
        logger.error("No images found in %s", args.inputs)
        return 1

    tags = _parse_tags(args.tags)
    tags_by_path = {str(p): tags for p in image_paths}
    results = analyze_batch(
        image_paths,
        tags_by_path=tags_by_path,
        workers=args.workers,
        max_colors=args.max_colors,
    )

    lines = []
    categories = Counter()
    failed = 0
    for path, result in zip(image_paths, results):
        if result is None:
            failed += 1
            continue
        payload = result.to_record() if args.records else result.to_dict()
        lines.append(json.dumps({"image": path.name, **payload}))
        categories[result.category.value] += 1
        logger.info("%s: %s (confidence %.2f)", path.name,
                    result.category.value, result.confidence)

    if args.output:
        output_path = Path(args.output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w") as f:
            for line in lines:
                f.write(line + "\n")
        logger.info("Analysed %d images → %s", len(lines), output_path)
    else:
        for line in lines:
            print(line)

    logger.info("Categories: %s", dict(categories))
    if failed:
        logger.warning("%d images could not be decoded", failed)
        return 1
    return 0


# ---- Subcommand: categorize ----

def cmd_categorize(args):
    from asset_analysis.categorizer import CategorizationInput, categorize

    result = categorize(CategorizationInput(
        width=args.width,
        height=args.height,
        has_transparency=args.transparent,
        tags=_parse_tags(args.tags),
    ))
    print(json.dumps(result.to_dict()))
    return 0


# ---- Subcommand: overlay ----

def cmd_overlay(args):
    from asset_analysis.buffer import ImageLoadError
    from asset_analysis.loader import load_raw_image
    from asset_analysis.qc_visual import save_grid_overlay
    from asset_analysis.tile_grid import detect_tile_grid

    try:
        raw = load_raw_image(args.image)
    except ImageLoadError as e:
        logger.error("%s", e)
        return 1

    grid = detect_tile_grid(raw)
    if grid is None:
        logger.info("No tile grid detected in %s", args.image)
    else:
        logger.info("Grid: %dx%d tiles of %dx%d (score %.3f)",
                    grid.columns, grid.rows, grid.tile_width,
                    grid.tile_height, grid.score)
    save_grid_overlay(raw, grid, Path(args.output))
    return 0


# ---- Argument parser ----

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="asset-analysis",
        description="Tile grid, animation and category analysis for game asset previews.",
    )
    parser.add_argument("--debug", action="store_true", help="Verbose logging")
    sub = parser.add_subparsers(dest="command", required=True)

    # -- analyze --
    p_analyze = sub.add_parser("analyze", help="Analyse preview images")
    p_analyze.add_argument("inputs", nargs="+", help="Image files or directories")
    p_analyze.add_argument("-o", "--output", default=None,
                           help="JSONL output path (default: stdout)")
    p_analyze.add_argument("--tags", default=None,
                           help="Comma-separated catalog tags applied to every image")
    p_analyze.add_argument("--max-colors", type=int, default=5,
                           help="Number of dominant colours to report")
    p_analyze.add_argument("--workers", type=int, default=None,
                           help="Worker processes (default: one per core)")
    p_analyze.add_argument("--records", action="store_true",
                           help="Emit flattened storage rows instead of nested results")
    p_analyze.add_argument("--recursive", "-r", action="store_true")
    p_analyze.set_defaults(func=cmd_analyze)

    # -- categorize --
    p_cat = sub.add_parser("categorize", help="Categorize from metadata only")
    p_cat.add_argument("--width", type=int, required=True)
    p_cat.add_argument("--height", type=int, required=True)
    p_cat.add_argument("--transparent", action="store_true",
                       help="The image has transparent pixels")
    p_cat.add_argument("--tags", default=None, help="Comma-separated tags")
    p_cat.set_defaults(func=cmd_categorize)

    # -- overlay --
    p_overlay = sub.add_parser("overlay", help="Draw the detected grid over an image")
    p_overlay.add_argument("image", help="Image file")
    p_overlay.add_argument("-o", "--output", required=True, help="Output PNG path")
    p_overlay.set_defaults(func=cmd_overlay)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    _setup_logging(args.debug)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
