from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Union

_LOGGING_INITIALIZED = False

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_FILE_PREFIX = "room_annotator_"


class _SuppressLibraryDebugFilter(logging.Filter):
    """Drop DEBUG chatter from matplotlib and Pillow (font lookup, PNG chunks)."""

    NOISY_PREFIXES = ("matplotlib", "PIL")

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[name-defined]
        return not (record.levelno <= logging.DEBUG and record.name.startswith(self.NOISY_PREFIXES))


class _SuppressPointerMoveFilter(logging.Filter):
    """Keep per-move gesture updates out of the console."""

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[name-defined]
        return not (record.levelno <= logging.DEBUG and
                    record.name == "room_annotator.core.interaction_handler" and
                    record.funcName == "pointer_move")


def _cleanup_old_logs(log_dir: Path, keep_count: int = 5) -> List[str]:
    """Delete all but the most recent log files; returns the removed file names."""
    removed = []
    log_files = sorted(log_dir.glob(f"{LOG_FILE_PREFIX}*.log"),
                       key=lambda x: x.stat().st_mtime, reverse=True)
    for old_log in log_files[keep_count:]:
        try:
            old_log.unlink()
            removed.append(old_log.name)
        except OSError as e:
            logging.getLogger(__name__).warning(f"Could not delete old log file {old_log.name}: {e}")
    return removed


def init_logging(log_dir: Optional[Union[str, Path]] = None,
                 level: Union[int, str] = logging.INFO,
                 console_level: Union[int, str] = logging.WARNING,
                 keep_count: int = 5) -> Optional[Path]:
    """
    Configure the root logger once for the whole process.

    - Console: console_level (WARNING by default), without per-move noise
    - File (only when log_dir is given): room_annotator_YYYYMMDD_HHMMSS.log
      at level, keeping the keep_count most recent files

    Returns:
        Path of the log file, or None when logging only to the console
    """
    global _LOGGING_INITIALIZED
    if _LOGGING_INITIALIZED:
        return None

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
    library_filter = _SuppressLibraryDebugFilter()

    console_handler = logging.StreamHandler()
    console_handler.setLevel(console_level)
    console_handler.setFormatter(formatter)
    console_handler.addFilter(library_filter)
    console_handler.addFilter(_SuppressPointerMoveFilter())

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.addHandler(console_handler)

    log_file = None
    removed: List[str] = []
    if log_dir is not None:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        removed = _cleanup_old_logs(log_dir, keep_count=max(keep_count - 1, 0))

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file = log_dir / f"{LOG_FILE_PREFIX}{timestamp}.log"

        file_handler = logging.FileHandler(log_file, encoding="utf-8", mode='a')
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        file_handler.addFilter(library_filter)
        root_logger.addHandler(file_handler)

    _LOGGING_INITIALIZED = True

    logger = logging.getLogger(__name__)
    if removed:
        logger.info(f"Removed {len(removed)} old log files, keeping the {keep_count} most recent")
    if log_file is not None:
        logger.info(f"Logging to {log_file}")
    return log_file
