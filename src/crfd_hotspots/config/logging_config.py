# ============================================================================
# FILE: src/crfd_hotspots/config/logging_config.py
# ============================================================================
import logging
import sys
from pathlib import Path
from typing import List, Optional

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

_installed_handlers: List[logging.Handler] = []


def setup_logging(log_level: str = "INFO", log_file: Optional[str] = None) -> logging.Logger:
    """Configure root logging with a console handler and an optional log file."""
    root = logging.getLogger()
    root.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    # Repeated pipeline runs in one process replace their own handlers only
    while _installed_handlers:
        handler = _installed_handlers.pop()
        root.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT)

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(formatter)
    _installed_handlers.append(console)

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        _installed_handlers.append(file_handler)

    for handler in _installed_handlers:
        root.addHandler(handler)

    return root
