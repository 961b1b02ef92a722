"""
Logging setup for command-line runs.

Library modules only create ``logging.getLogger(__name__)`` loggers; handlers
are installed here by the application.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional, Union

LOG_FORMAT = "%(asctime)s [%(levelname)-5.5s] [%(name)s] %(message)s"


def setup_logging(level: Union[int, str] = logging.INFO, log_file: Optional[Union[str, Path]] = None):
    """Configure the root logger to write to stdout (and optionally a file).

    Existing root handlers are removed, so calling this twice does not
    duplicate output.
    """
    log_formatter = logging.Formatter(LOG_FORMAT)
    root_logger = logging.getLogger()

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(log_formatter)
    root_logger.addHandler(console_handler)

    if log_file is not None:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setFormatter(log_formatter)
        root_logger.addHandler(file_handler)

    root_logger.setLevel(level)
    logging.getLogger(__name__).info("Logging configured.")
