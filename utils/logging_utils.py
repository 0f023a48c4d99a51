"""
Logging setup for the command line entry point.
"""
import os
import logging
import sys
from datetime import datetime
from typing import Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _resolve_level(level_name: str) -> int:
    numeric_level = getattr(logging, level_name.upper(), None)
    if not isinstance(numeric_level, int):
        print(f"Warning: Invalid LOG_LEVEL '{level_name}' in environment. Defaulting to INFO.", file=sys.stderr)
        return logging.INFO
    return numeric_level


def setup_logging(output_folder: Optional[str] = None, run_id: Optional[str] = None) -> Optional[str]:
    """
    Configure root logging with a console handler and, when an output folder
    is given, a per-run log file under ``<output_folder>/logs``.

    Existing root handlers are closed and removed first so repeated calls
    (tests, notebooks) do not duplicate output.

    Args:
        output_folder: Folder to store log files, or None for console only
        run_id: Optional run ID to use in the log filename

    Returns:
        Path of the log file, or None if no file handler was installed
    """
    level = _resolve_level(os.getenv("LOG_LEVEL", "INFO"))

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in root_logger.handlers[:]:
        try:
            handler.close()
        except Exception:
            pass
        root_logger.removeHandler(handler)

    formatter = logging.Formatter(LOG_FORMAT)

    log_file_path = None
    if output_folder:
        log_folder = os.path.join(output_folder, "logs")
        run_id = run_id or datetime.now().strftime("%Y%m%d_%H%M%S")
        try:
            os.makedirs(log_folder, exist_ok=True)
            log_file_path = os.path.join(log_folder, f"pipeline_log_{run_id}.txt")
            file_handler = logging.FileHandler(log_file_path, mode="w")
            file_handler.setFormatter(formatter)
            file_handler.setLevel(level)
            root_logger.addHandler(file_handler)
        except OSError as e:
            print(f"Critical Error: Could not create log file in {log_folder}. Error: {e}", file=sys.stderr)
            log_file_path = None

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    console_handler.setLevel(level)
    root_logger.addHandler(console_handler)

    logging.getLogger(__name__).info(
        f"Logging initialized. Effective log level: {logging.getLevelName(level)}. Log file: {log_file_path}"
    )
    return log_file_path
