from __future__ import annotations

import argparse
import logging
import time
from datetime import datetime
from pathlib import Path
from typing import List

from PIL import UnidentifiedImageError

from .core import PhotoCollator
from .layout import InvalidDimension, placement_grid
from .logger import DEFAULT_LOG_FILE, log_job, log_layout_calculation, setup_logging
from .render import parse_crop, save_pdf_proof, save_sheet, to_data_url

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_INVALID_DIMENSION = 2
EXIT_NO_PLACEMENTS = 4
EXIT_IO_ERROR = 5


def _make_collator(args: argparse.Namespace) -> PhotoCollator:
    return PhotoCollator(
        paper_width_in=args.paper_width_in,
        paper_height_in=args.paper_height_in,
        item_width_in=args.item_width_in,
        item_height_in=args.item_height_in,
        dpi=args.dpi,
        gap_px=args.gap_px,
    )


def cli_plan(args: argparse.Namespace) -> int:
    """Print the grid arrangement for the configured paper and item."""
    logging.info("Starting plan operation")
    logging.debug(f"Args: {vars(args)}")

    try:
        collator = _make_collator(args)
        result = collator.plan()
    except InvalidDimension as e:
        logging.error(f"Invalid dimensions: {e}")
        print(f"Invalid dimensions: {e}")
        return EXIT_INVALID_DIMENSION

    log_layout_calculation(result.arrangement, result.elapsed)

    arr = result.arrangement
    width_in, height_in = collator.sheet_size_in(arr)
    print(f"Grid: {arr.columns} columns x {arr.rows} rows = {arr.count} copies")
    print(f"Sheet: {width_in:g} x {height_in:g} in ({arr.sheet.width:g} x {arr.sheet.height:g} px)"
          f"{', rotated' if arr.rotated else ''}")
    print(f"Start: ({arr.horizontal_start:g}, {arr.vertical_start:g}) px")
    print(f"Coverage: {arr.coverage:.1%}")

    if args.list:
        for j, row in enumerate(placement_grid(arr)):
            for i, pl in enumerate(row):
                print(f"row {j} col {i} {pl.x:g},{pl.y:g}")

    if arr.is_degenerate:
        print("No copies fit on the sheet with current parameters.")
        return EXIT_NO_PLACEMENTS
    return EXIT_OK


def cli_compose(args: argparse.Namespace) -> int:
    """Compose a print sheet from a cropped source photo."""
    logging.info("Starting compose operation")
    logging.debug(f"Args: {vars(args)}")
    started = datetime.now()
    t0 = time.perf_counter()

    try:
        crop = parse_crop(args.crop) if args.crop else None
    except ValueError as e:
        logging.error(f"Bad crop: {e}")
        print(f"Bad crop: {e}")
        return EXIT_ERROR

    try:
        collator = _make_collator(args)
        result = collator.collate(args.input, crop)
    except InvalidDimension as e:
        logging.error(f"Invalid dimensions: {e}")
        print(f"Invalid dimensions: {e}")
        return EXIT_INVALID_DIMENSION
    except (OSError, UnidentifiedImageError) as e:
        logging.error(f"Error reading source image: {e}")
        print(f"Error reading source image: {e}")
        return EXIT_IO_ERROR
    except ValueError as e:
        logging.error(f"Error composing sheet: {e}")
        print(f"Error composing sheet: {e}")
        return EXIT_ERROR

    log_layout_calculation(result.arrangement, result.elapsed)

    if not result.placements and not args.allow_empty:
        logging.error("No placements computed with current parameters")
        print("No placements computed with current parameters.")
        if args.report:
            log_job(Path(args.report), Path(args.input), started,
                    (args.paper_width_in, args.paper_height_in),
                    (args.item_width_in, args.item_height_in), args.dpi, args.gap_px,
                    result.arrangement, None, time.perf_counter() - t0,
                    error="no copies fit on the sheet")
        return EXIT_NO_PLACEMENTS

    try:
        output = Path(args.output)
        output.parent.mkdir(parents=True, exist_ok=True)
        save_sheet(result.sheet, output, dpi=args.dpi, quality=args.quality)
        print(f"Wrote sheet: {output} ({result.copies} copies)")

        if args.pdf_proof:
            width_in, height_in = collator.sheet_size_in(result.arrangement)
            save_pdf_proof(result.sheet, args.pdf_proof, width_in, height_in)
            print(f"Wrote PDF proof: {args.pdf_proof}")

        if args.data_url:
            Path(args.data_url).write_text(to_data_url(result.sheet, args.quality), encoding="ascii")
            print(f"Wrote data URL: {args.data_url}")
    except ValueError as e:
        logging.error(f"Error saving sheet: {e}")
        print(f"Error saving sheet: {e}")
        return EXIT_ERROR
    except OSError as e:
        logging.error(f"Error writing output: {e}")
        print(f"Error writing output: {e}")
        return EXIT_IO_ERROR

    if args.report:
        log_job(Path(args.report), Path(args.input), started,
                (args.paper_width_in, args.paper_height_in),
                (args.item_width_in, args.item_height_in), args.dpi, args.gap_px,
                result.arrangement, output, time.perf_counter() - t0)

    return EXIT_OK


def _add_layout_arguments(c: argparse.ArgumentParser) -> None:
    c.add_argument("--paper-width-in", type=float, default=6.0, help="Paper width in inches (default: 6)")
    c.add_argument("--paper-height-in", type=float, default=4.0, help="Paper height in inches (default: 4)")
    c.add_argument("--item-width-in", type=float, default=0.6, help="Photo width in inches (default: 0.6)")
    c.add_argument("--item-height-in", type=float, default=1.0, help="Photo height in inches (default: 1)")
    c.add_argument("--dpi", type=int, default=96, help="Pixels per inch for the sheet (default: 96)")
    c.add_argument("--gap-px", type=float, default=5.0, help="Gap between photos and at the border in pixels (default: 5)")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="photocollate", description="Photo print sheet layout CLI")
    p.add_argument("--log-file", default=DEFAULT_LOG_FILE, help=f"Debug log path (default: {DEFAULT_LOG_FILE})")
    sub = p.add_subparsers(dest="cmd")

    pl = sub.add_parser("plan", help="Show how many copies fit on the sheet")
    _add_layout_arguments(pl)
    pl.add_argument("--list", action="store_true", help="Print every placement as x,y, row by row")
    pl.set_defaults(func=cli_plan)

    c = sub.add_parser("compose", help="Tile a cropped photo onto a print sheet")
    c.add_argument("input", help="Source photo path")
    c.add_argument("--output", required=True, help="Output sheet path (.jpg, .png, .tif)")
    c.add_argument("--crop", help="Crop region in source pixels as x,y,width,height")
    _add_layout_arguments(c)
    c.add_argument("--quality", type=int, default=92, help="JPEG quality (default: 92)")
    c.add_argument("--pdf-proof", help="Optional PDF proof at physical sheet size")
    c.add_argument("--data-url", help="Optional file to receive the sheet as a JPEG data URL")
    c.add_argument("--report", help="Optional job report path")
    c.add_argument("--allow-empty", action="store_true", help="Write a blank sheet when no copies fit")
    c.set_defaults(func=cli_compose)

    return p


def main(argv: List[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(args.log_file)

    if not hasattr(args, "func"):
        parser.print_help()
        return EXIT_ERROR

    try:
        result = args.func(args)
        logging.info(f"Operation completed with exit code: {result}")
        return result
    except Exception as e:
        logging.error(f"Unhandled exception: {e}", exc_info=True)
        print(f"Fatal error: {e}")
        return EXIT_ERROR


if __name__ == "__main__":
    raise SystemExit(main())
