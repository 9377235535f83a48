#!/usr/bin/env python3
"""
Tests for the rendering stages: crop, scale, compose and export.
"""

import base64
import io
import logging

import fitz  # PyMuPDF
import pytest
from PIL import Image

from photocollate.layout import Dimension, enumerate_placements, pack_grid
from photocollate.render import (
    CropBox,
    compose_sheet,
    crop_image,
    parse_crop,
    save_pdf_proof,
    save_sheet,
    scale_image,
    to_data_url,
    validate_sheet_pixels,
)


def _solid(width, height, color="red"):
    return Image.new("RGB", (width, height), color=color)


def test_parse_crop():
    assert parse_crop("10,20,300,400") == CropBox(10, 20, 300, 400)
    assert parse_crop(" 1.4, 2.6 ,3,4") == CropBox(1, 3, 3, 4)


@pytest.mark.parametrize("text", ["10,20,30", "a,b,c,d", "", "0,0,inf,10", "nan,0,1,1"])
def test_parse_crop_rejects_bad_input(text):
    with pytest.raises(ValueError):
        parse_crop(text)


def test_crop_image_returns_new_image():
    src = _solid(200, 100)
    src.putpixel((50, 20), (0, 0, 255))

    out = crop_image(src, CropBox(50, 20, 30, 40))

    assert out.size == (30, 40)
    assert out.getpixel((0, 0)) == (0, 0, 255)
    assert src.size == (200, 100)


def test_crop_image_rejects_empty_crop():
    with pytest.raises(ValueError):
        crop_image(_solid(10, 10), CropBox(0, 0, 0, 5))


def test_crop_past_edge_warns_and_fills_black(caplog):
    with caplog.at_level(logging.WARNING):
        out = crop_image(_solid(10, 10), CropBox(5, 5, 10, 10))

    assert out.size == (10, 10)
    assert out.getpixel((9, 9)) == (0, 0, 0)
    assert any("extends past" in r.message for r in caplog.records)


def test_scale_image():
    out = scale_image(_solid(300, 500), 58, 96)
    assert out.size == (58, 96)


def test_scale_image_same_size_copies():
    src = _solid(58, 96)
    out = scale_image(src, 58, 96)
    assert out.size == src.size
    assert out is not src


def test_compose_sheet_uses_rotated_surface():
    arr = pack_grid(Dimension(600, 400), Dimension(60, 100), gap=5)
    placements = enumerate_placements(arr)

    sheet = compose_sheet(_solid(60, 100), arr, placements)

    assert arr.rotated
    assert sheet.size == (400, 600)
    assert sheet.getpixel((0, 0)) == (255, 255, 255)
    for pl in placements:
        assert sheet.getpixel((int(round(pl.x)) + 1, int(round(pl.y)) + 1)) == (255, 0, 0)


def test_compose_sheet_leaves_gaps_blank():
    arr = pack_grid(Dimension(100, 100), Dimension(45, 45), gap=5)
    sheet = compose_sheet(_solid(45, 45), arr, enumerate_placements(arr))

    # Copies land at x 2..46 and 52..96 after rounding
    assert sheet.getpixel((50, 10)) == (255, 255, 255)
    assert sheet.getpixel((10, 50)) == (255, 255, 255)
    assert sheet.getpixel((60, 60)) == (255, 0, 0)


def test_compose_sheet_without_placements_is_blank():
    arr = pack_grid(Dimension(100, 100), Dimension(60, 100), gap=5)
    sheet = compose_sheet(_solid(60, 100), arr, enumerate_placements(arr))

    assert sheet.size == (100, 100)
    assert sheet.getextrema() == ((255, 255), (255, 255), (255, 255))


def test_validate_sheet_pixels():
    validate_sheet_pixels(576, 384)
    with pytest.raises(ValueError):
        validate_sheet_pixels(0, 384)
    with pytest.raises(ValueError):
        validate_sheet_pixels(100_000, 100_000, max_pixels=1_000_000)


@pytest.mark.parametrize("name, fmt", [
    ("sheet.jpg", "JPEG"),
    ("sheet.png", "PNG"),
    ("sheet.tif", "TIFF"),
])
def test_save_sheet_formats(tmp_path, name, fmt):
    path = tmp_path / name
    save_sheet(_solid(40, 30), path, dpi=300)

    with Image.open(path) as img:
        assert img.format == fmt
        assert img.size == (40, 30)


def test_save_sheet_tiff_keeps_dpi(tmp_path):
    path = tmp_path / "sheet.tiff"
    save_sheet(_solid(40, 30), path, dpi=300)

    with Image.open(path) as img:
        dpi = img.info["dpi"]
        assert float(dpi[0]) == pytest.approx(300, abs=0.5)


def test_save_sheet_rejects_unknown_suffix(tmp_path):
    with pytest.raises(ValueError):
        save_sheet(_solid(4, 3), tmp_path / "sheet.bmpx")


def test_to_data_url_is_jpeg():
    url = to_data_url(_solid(40, 30))

    prefix = "data:image/jpeg;base64,"
    assert url.startswith(prefix)
    raw = base64.b64decode(url[len(prefix):])
    with Image.open(io.BytesIO(raw)) as img:
        assert img.format == "JPEG"
        assert img.size == (40, 30)


def test_save_pdf_proof_page_size(tmp_path):
    path = tmp_path / "proof.pdf"
    save_pdf_proof(_solid(384, 576), path, 4, 6)

    doc = fitz.open(str(path))
    try:
        assert doc.page_count == 1
        rect = doc[0].rect
        assert rect.width == pytest.approx(288)
        assert rect.height == pytest.approx(432)
    finally:
        doc.close()
