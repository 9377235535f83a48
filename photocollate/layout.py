from __future__ import annotations

import logging
import math
import numbers
from dataclasses import dataclass
from decimal import Decimal
from typing import List, Tuple

DEFAULT_GAP_PX = 5.0

logger = logging.getLogger(__name__)


class InvalidDimension(ValueError):
    """Raised when a sheet, item or gap value cannot describe real geometry."""


@dataclass(frozen=True)
class Dimension:
    """Width and height of a sheet or item, both in the same linear unit."""
    width: float
    height: float

    def rotated(self) -> Dimension:
        return Dimension(self.height, self.width)

    @property
    def area(self) -> float:
        return self.width * self.height


@dataclass(frozen=True)
class Placement:
    """Top-left offset of one item copy on the sheet."""
    x: float
    y: float


@dataclass(frozen=True)
class GridArrangement:
    """Chosen grid for one item size on one sheet.

    ``sheet`` is already in the chosen orientation, so when ``rotated`` is set
    its width and height are swapped relative to the sheet passed in.
    """
    columns: int
    rows: int
    horizontal_start: float
    vertical_start: float
    rotated: bool
    sheet: Dimension
    item: Dimension
    gap: float

    @property
    def count(self) -> int:
        return self.columns * self.rows

    @property
    def is_degenerate(self) -> bool:
        return self.count == 0 or self.horizontal_start < 0 or self.vertical_start < 0

    @property
    def coverage(self) -> float:
        """Fraction of the sheet area covered by item copies."""
        return self.count * self.item.area / self.sheet.area

    @property
    def surface(self) -> Dimension:
        return self.sheet


def _is_real(value) -> bool:
    # bool is an int subclass but never a length
    return isinstance(value, (numbers.Real, Decimal)) and not isinstance(value, bool)


def check_side(name: str, value) -> float:
    """Return ``value`` as a float, or raise InvalidDimension unless it is positive and finite."""
    if not _is_real(value) or not math.isfinite(value) or value <= 0:
        raise InvalidDimension(f"{name} must be a positive finite number, got {value!r}")
    return float(value)


def _validate(sheet: Dimension, item: Dimension, gap) -> Tuple[Dimension, Dimension, float]:
    sheet = Dimension(check_side("sheet width", sheet.width), check_side("sheet height", sheet.height))
    item = Dimension(check_side("item width", item.width), check_side("item height", item.height))
    if not _is_real(gap) or not math.isfinite(gap) or gap < 0:
        raise InvalidDimension(f"gap must be a non-negative finite number, got {gap!r}")
    return sheet, item, float(gap)


def _start_offset(sheet_side: float, count: int, item_side: float, gap: float) -> float:
    # Gap is counted once more than needed between items, half of it lands on each border
    return (sheet_side - count * (item_side + gap) + gap) / 2


def pack_grid(sheet: Dimension, item: Dimension, gap: float = DEFAULT_GAP_PX) -> GridArrangement:
    """
    Pick the grid that fits the most whole copies of ``item`` on ``sheet``.

    Two candidates are compared: the sheet as given and the sheet turned by
    90 degrees. The turned sheet wins only when it holds strictly more copies,
    so ties keep the original orientation.

    Args:
        sheet: Sheet size
        item: Item size, in the same unit as the sheet
        gap: Spacing between neighbouring items and around the border

    Returns:
        GridArrangement with counts and centering offsets for the chosen
        orientation. A degenerate arrangement (nothing fits) is returned as
        is and reported as a warning.

    Raises:
        InvalidDimension: if a side is not a positive finite number or the
            gap is negative.
    """
    sheet, item, gap = _validate(sheet, item, gap)

    step_x = item.width + gap
    step_y = item.height + gap

    columns = math.floor(sheet.width / step_x)
    rows = math.floor(sheet.height / step_y)
    rotate_columns = math.floor(sheet.height / step_x)
    rotate_rows = math.floor(sheet.width / step_y)

    logger.debug(f"Unrotated grid: {columns} cols x {rows} rows = {columns * rows}")
    logger.debug(f"Rotated grid: {rotate_columns} cols x {rotate_rows} rows = {rotate_columns * rotate_rows}")

    rotated = rotate_columns * rotate_rows > columns * rows
    if rotated:
        columns, rows = rotate_columns, rotate_rows
        oriented = sheet.rotated()
    else:
        oriented = sheet

    arrangement = GridArrangement(
        columns=columns,
        rows=rows,
        horizontal_start=_start_offset(oriented.width, columns, item.width, gap),
        vertical_start=_start_offset(oriented.height, rows, item.height, gap),
        rotated=rotated,
        sheet=oriented,
        item=item,
        gap=gap,
    )

    if arrangement.is_degenerate:
        logger.warning(
            f"Degenerate layout: {columns} cols x {rows} rows for item "
            f"{item.width:g}x{item.height:g} on sheet {sheet.width:g}x{sheet.height:g} "
            f"(gap {gap:g}), start ({arrangement.horizontal_start:g}, {arrangement.vertical_start:g})"
        )

    return arrangement


def enumerate_placements(arrangement: GridArrangement) -> List[Placement]:
    """Top-left coordinates of every grid cell, columns outer and rows inner."""
    step_x = arrangement.item.width + arrangement.gap
    step_y = arrangement.item.height + arrangement.gap

    placements: List[Placement] = []
    for i in range(arrangement.columns):
        x = arrangement.horizontal_start + step_x * i
        for j in range(arrangement.rows):
            y = arrangement.vertical_start + step_y * j
            placements.append(Placement(x, y))
    return placements


def placement_grid(arrangement: GridArrangement) -> List[List[Placement]]:
    """Same placements as :func:`enumerate_placements`, indexed ``[row][column]``."""
    grid: List[List[Placement]] = [[] for _ in range(arrangement.rows)]
    for index, placement in enumerate(enumerate_placements(arrangement)):
        grid[index % arrangement.rows].append(placement)
    return grid


def plan_sheet(
    sheet: Dimension,
    item: Dimension,
    gap: float = DEFAULT_GAP_PX,
) -> Tuple[GridArrangement, List[Placement]]:
    arrangement = pack_grid(sheet, item, gap)
    placements = enumerate_placements(arrangement)
    logger.info(
        f"Sheet plan: {arrangement.columns} cols x {arrangement.rows} rows = {len(placements)} copies"
        f"{' (sheet rotated)' if arrangement.rotated else ''}, coverage {arrangement.coverage:.1%}"
    )
    return arrangement, placements
