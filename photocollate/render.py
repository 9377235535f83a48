from __future__ import annotations

import base64
import io
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Tuple, Union

import fitz  # PyMuPDF
from PIL import Image, ImageOps

from .layout import GridArrangement, Placement
from .units import inch_to_pt

# Surfaces above this many pixels are refused before allocation
MAX_SHEET_PIXELS = 200_000_000

_FORMATS = {
    ".jpg": "JPEG",
    ".jpeg": "JPEG",
    ".png": "PNG",
    ".tif": "TIFF",
    ".tiff": "TIFF",
}


@dataclass(frozen=True)
class CropBox:
    """Crop rectangle in pixels, relative to the decoded source image."""
    x: int
    y: int
    width: int
    height: int

    @property
    def box(self) -> Tuple[int, int, int, int]:
        return (self.x, self.y, self.x + self.width, self.y + self.height)


def parse_crop(text: str) -> CropBox:
    """Parse ``"x,y,width,height"`` into a CropBox."""
    parts = [p.strip() for p in text.split(",")]
    if len(parts) != 4:
        raise ValueError(f"Crop must be 'x,y,width,height', got {text!r}")
    try:
        x, y, width, height = (int(round(float(p))) for p in parts)
    except (ValueError, OverflowError):
        raise ValueError(f"Crop values must be numbers, got {text!r}") from None
    return CropBox(x, y, width, height)


def load_image(path: Union[str, Path]) -> Image.Image:
    """Decode an image file, honour its EXIF orientation and return an RGB copy."""
    logging.debug(f"Loading source image: {path}")
    with Image.open(path) as img:
        img = ImageOps.exif_transpose(img)
        rgb = img.convert("RGB")
    logging.info(f"Loaded {path}: {rgb.width}x{rgb.height} pixels")
    return rgb


def crop_image(image: Image.Image, crop: CropBox) -> Image.Image:
    if crop.width <= 0 or crop.height <= 0:
        raise ValueError(f"Crop area is empty: {crop.width}x{crop.height}")

    left, top, right, bottom = crop.box
    if left < 0 or top < 0 or right > image.width or bottom > image.height:
        logging.warning(
            f"Crop {crop.box} extends past the {image.width}x{image.height} image, "
            f"outside area will be black"
        )

    return image.crop(crop.box)


def scale_image(image: Image.Image, width_px: int, height_px: int) -> Image.Image:
    if (image.width, image.height) == (width_px, height_px):
        return image.copy()
    logging.debug(f"Scaling {image.width}x{image.height} to {width_px}x{height_px} pixels")
    return image.resize((width_px, height_px), Image.LANCZOS)


def validate_sheet_pixels(width_px: int, height_px: int, max_pixels: int = MAX_SHEET_PIXELS) -> None:
    if width_px <= 0 or height_px <= 0:
        raise ValueError(f"Sheet surface is empty: {width_px}x{height_px} pixels")
    total = width_px * height_px
    if total > max_pixels:
        raise ValueError(
            f"Sheet surface of {width_px:,} x {height_px:,} pixels ({total:,}) exceeds the "
            f"limit of {max_pixels:,} pixels. Try a lower DPI."
        )


def compose_sheet(
    item_image: Image.Image,
    arrangement: GridArrangement,
    placements: List[Placement],
    background: str = "white",
) -> Image.Image:
    """
    Paste one copy of ``item_image`` at every placement on a fresh sheet.

    The sheet is sized from ``arrangement.surface``, so it is already turned
    when the arrangement chose the rotated orientation.
    """
    width_px = int(round(arrangement.surface.width))
    height_px = int(round(arrangement.surface.height))
    validate_sheet_pixels(width_px, height_px)

    logging.info(f"Composing {len(placements)} copies on a {width_px}x{height_px} sheet")
    sheet = Image.new("RGB", (width_px, height_px), color=background)

    expected = (int(round(arrangement.item.width)), int(round(arrangement.item.height)))
    if item_image.size != expected:
        logging.debug(f"Item image is {item_image.size}, arrangement expects {expected}")

    for pl in placements:
        sheet.paste(item_image, (int(round(pl.x)), int(round(pl.y))))

    return sheet


def save_sheet(image: Image.Image, path: Union[str, Path], dpi: int = 96, quality: int = 92) -> None:
    path = Path(path)
    fmt = _FORMATS.get(path.suffix.lower())
    if fmt is None:
        raise ValueError(f"Unsupported output format: {path.suffix or path.name}")

    if fmt == "JPEG":
        image.convert("RGB").save(path, format=fmt, quality=quality, dpi=(dpi, dpi))
    elif fmt == "TIFF":
        image.save(path, format=fmt, compression="tiff_lzw", dpi=(dpi, dpi))
    else:
        image.save(path, format=fmt, dpi=(dpi, dpi))
    logging.info(f"Wrote {fmt} sheet: {path}")


def to_data_url(image: Image.Image, quality: int = 92) -> str:
    """Encode the sheet as a ``data:image/jpeg;base64`` URL."""
    with io.BytesIO() as buf:
        image.convert("RGB").save(buf, format="JPEG", quality=quality)
        encoded = base64.b64encode(buf.getvalue()).decode("ascii")
    return f"data:image/jpeg;base64,{encoded}"


def save_pdf_proof(image: Image.Image, path: Union[str, Path], width_in: float, height_in: float) -> None:
    width_pt = inch_to_pt(width_in)
    height_pt = inch_to_pt(height_in)
    doc = fitz.open()
    try:
        page = doc.new_page(width=width_pt, height=height_pt)

        with io.BytesIO() as buf:
            image.convert("RGB").save(buf, format="PNG")
            stream = buf.getvalue()

        rect = fitz.Rect(0, 0, width_pt, height_pt)
        page.insert_image(rect, stream=stream, keep_proportion=False)
        doc.save(str(path))
    finally:
        doc.close()
    logging.info(f"Wrote PDF proof: {path} ({width_in:g}x{height_in:g} in)")
