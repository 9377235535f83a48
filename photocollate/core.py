"""
Print sheet pipeline for photocollate.

Every stage hands a new value to the next one:
decoded image -> cropped image -> scaled item -> composed sheet.
"""

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Union

from PIL import Image

from .layout import DEFAULT_GAP_PX, Dimension, GridArrangement, Placement, check_side, plan_sheet
from .render import CropBox, compose_sheet, crop_image, load_image, scale_image
from .units import SCREEN_DPI, inch_to_px


@dataclass
class CollateResult:
    """Result of planning or composing one print sheet."""
    arrangement: GridArrangement
    placements: List[Placement]
    sheet: Optional[Image.Image]
    elapsed: float

    @property
    def copies(self) -> int:
        return len(self.placements)


class PhotoCollator:
    """Lays out copies of one photo on a print sheet of fixed physical size."""

    def __init__(self, paper_width_in: float = 6.0, paper_height_in: float = 4.0,
                 item_width_in: float = 0.6, item_height_in: float = 1.0,
                 dpi: int = SCREEN_DPI, gap_px: float = DEFAULT_GAP_PX):
        """Initialize with physical paper and item sizes in inches."""
        self.paper_width_in = paper_width_in
        self.paper_height_in = paper_height_in
        self.item_width_in = item_width_in
        self.item_height_in = item_height_in
        self.dpi = dpi
        self.gap_px = gap_px
        self.logger = logging.getLogger(__name__)

        for name, value in (('paper width', paper_width_in), ('paper height', paper_height_in),
                            ('item width', item_width_in), ('item height', item_height_in),
                            ('dpi', dpi)):
            check_side(name, value)

        self.sheet_px = Dimension(inch_to_px(paper_width_in, dpi), inch_to_px(paper_height_in, dpi))
        self.item_px = Dimension(inch_to_px(item_width_in, dpi), inch_to_px(item_height_in, dpi))
        self.logger.debug(f"Sheet {self.sheet_px.width}x{self.sheet_px.height}px, "
                          f"item {self.item_px.width}x{self.item_px.height}px at {dpi} DPI")

    def sheet_size_in(self, arrangement: GridArrangement):
        """Physical size of the output sheet in the arrangement's orientation."""
        if arrangement.rotated:
            return self.paper_height_in, self.paper_width_in
        return self.paper_width_in, self.paper_height_in

    def plan(self) -> CollateResult:
        start = time.perf_counter()
        arrangement, placements = plan_sheet(self.sheet_px, self.item_px, self.gap_px)
        return CollateResult(arrangement, placements, None, time.perf_counter() - start)

    def collate(self, source: Union[str, Path, Image.Image], crop: Optional[CropBox] = None) -> CollateResult:
        """
        Crop the source photo, scale it to the item size and tile it on a sheet.

        Args:
            source: Image file path or an already decoded image
            crop: Region of the source to print, whole image when omitted

        Returns:
            CollateResult with the composed sheet. A degenerate layout yields
            a blank sheet rather than an error.
        """
        start = time.perf_counter()

        arrangement, placements = plan_sheet(self.sheet_px, self.item_px, self.gap_px)
        if not placements:
            self.logger.warning("No copies fit on the sheet, output will be blank")

        image = source if isinstance(source, Image.Image) else load_image(source)
        cropped = crop_image(image, crop) if crop is not None else image.copy()
        item = scale_image(cropped, int(self.item_px.width), int(self.item_px.height))

        sheet = compose_sheet(item, arrangement, placements)
        elapsed = time.perf_counter() - start
        self.logger.info(f"Collated {len(placements)} copies in {elapsed:.3f} seconds")
        return CollateResult(arrangement, placements, sheet, elapsed)
