"""
Logging setup for Buzzword.
Level is controlled by the LOG_LEVEL environment variable (default INFO).
"""

import logging
import os
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logging(logs_dir: Optional[Path] = None, level: Optional[str] = None) -> int:
    """Configure root logging with a console handler and logs/game.log.

    Returns the numeric level in effect.
    """
    level_name = (level or os.getenv('LOG_LEVEL', 'INFO')).strip().upper()
    log_level = getattr(logging, level_name, logging.INFO)

    logs_dir = Path(logs_dir) if logs_dir else Path(os.getenv('LOG_DIR', 'logs'))
    handlers = [logging.StreamHandler()]
    try:
        logs_dir.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(logs_dir / 'game.log', encoding='utf-8'))
    except OSError as e:
        # Console logging still works without a writable log directory
        print(f"Could not open log file in {logs_dir}: {e}")

    logging.basicConfig(level=log_level, format=LOG_FORMAT, handlers=handlers, force=True)
    logging.getLogger('buzzword').setLevel(log_level)
    # httpx logs every request at INFO
    logging.getLogger('httpx').setLevel(max(log_level, logging.WARNING))
    return log_level


def log_info_safe(log: logging.Logger, prefix: str, text: str) -> None:
    """Log clue text with non-ASCII characters escaped.

    Spanish clues otherwise break some Windows consoles.
    """
    sanitized = f"{prefix}{text}".encode('ascii', errors='backslashreplace').decode('ascii')
    log.info(sanitized)
