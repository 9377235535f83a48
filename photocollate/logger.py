"""
Logging utilities for photocollate.

Handles debug logging setup and the per-job report.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional, Tuple, Union

DEFAULT_LOG_FILE = "photocollate_debug.log"


def setup_logging(log_path: Union[str, Path] = DEFAULT_LOG_FILE) -> None:
    """Setup logging to both file and console."""
    logger = logging.getLogger()
    logger.setLevel(logging.DEBUG)

    # Clear existing handlers
    logger.handlers.clear()

    # File handler - detailed logs
    file_handler = logging.FileHandler(log_path, mode='w', encoding='utf-8')
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(
        logging.Formatter('%(asctime)s - %(levelname)s - %(module)s:%(lineno)d - %(message)s')
    )

    # Console handler - important messages only
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))

    logger.addHandler(file_handler)
    logger.addHandler(console_handler)

    logging.info(f"Logging initialized. Debug log: {log_path}")


def log_layout_calculation(arrangement, calculation_time: float) -> None:
    """
    Log the chosen grid arrangement.

    Args:
        arrangement: GridArrangement object
        calculation_time: Time taken for calculation in seconds
    """
    logger = logging.getLogger(__name__)

    logger.info("Layout calculation:")
    logger.info(f"  Grid: {arrangement.columns} columns x {arrangement.rows} rows")
    logger.info(f"  Sheet: {arrangement.sheet.width:g}x{arrangement.sheet.height:g}"
                f"{' (rotated)' if arrangement.rotated else ''}")
    logger.info(f"  Item: {arrangement.item.width:g}x{arrangement.item.height:g}, gap {arrangement.gap:g}")
    logger.info(f"  Start: ({arrangement.horizontal_start:g}, {arrangement.vertical_start:g})")
    logger.info(f"  Copies: {arrangement.count}, coverage: {arrangement.coverage:.1%}")
    logger.info(f"  Calculation time: {calculation_time:.3f} seconds")


def log_job(log_path: Path, source: Optional[Path], timestamp: datetime,
            paper_in: Tuple[float, float], item_in: Tuple[float, float], dpi: int,
            gap_px: float, arrangement, output_path: Optional[Path],
            process_time: float, error: Optional[str] = None) -> None:
    """
    Write a plain-text report for one collate job.

    Args:
        log_path: Path to the report file
        source: Source photo path
        timestamp: Job start timestamp
        paper_in: Paper width and height in inches
        item_in: Item width and height in inches
        dpi: Pixels per inch used for conversion
        gap_px: Gap between copies in pixels
        arrangement: GridArrangement, or None when planning failed
        output_path: Written sheet path
        process_time: Processing time in seconds
        error: Error message if the job failed
    """
    content = f"""photocollate - Job Report
{'=' * 50}

Job Information:
    Timestamp: {timestamp.strftime('%Y-%m-%d %H:%M:%S')}
    Source: {source}
    Status: {'ERROR' if error else 'SUCCESS'}

Input Parameters:
    Paper: {paper_in[0]:g} x {paper_in[1]:g} in
    Item: {item_in[0]:g} x {item_in[1]:g} in
    DPI: {dpi}
    Gap: {gap_px:g} px

"""
    if arrangement is not None:
        content += f"""Layout:
    Grid: {arrangement.columns} columns x {arrangement.rows} rows
    Copies: {arrangement.count}
    Sheet Rotated: {'yes' if arrangement.rotated else 'no'}
    Sheet Size: {arrangement.sheet.width:g} x {arrangement.sheet.height:g} px
    Coverage: {arrangement.coverage:.1%}

"""
    content += f"""Output Information:
    Output Path: {output_path}
    Processing Time: {process_time:.2f} seconds
    Completion Time: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}
"""
    if error:
        content += f"""
Error Information:
    Error: {error}
"""

    logger = logging.getLogger(__name__)
    try:
        with open(log_path, 'w', encoding='utf-8') as f:
            f.write(content)
        logger.info(f"Job report written: {log_path}")
    except OSError as e:
        logger.error(f"Failed to write job report {log_path}: {e}")
