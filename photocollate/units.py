SCREEN_DPI = 96
PT_PER_INCH = 72.0
MM_PER_INCH = 25.4


def inch_to_px(inches: float, dpi: int = SCREEN_DPI) -> int:
    return int(round(inches * dpi))


def px_to_inch(px: float, dpi: int = SCREEN_DPI) -> float:
    return px / dpi


def mm_to_px(mm: float, dpi: int = SCREEN_DPI) -> int:
    return int(round(mm / MM_PER_INCH * dpi))


def px_to_mm(px: float, dpi: int = SCREEN_DPI) -> float:
    return px * MM_PER_INCH / dpi


def inch_to_pt(inches: float) -> float:
    return inches * PT_PER_INCH


def mm_to_pt(mm: float) -> float:
    return mm * PT_PER_INCH / MM_PER_INCH
