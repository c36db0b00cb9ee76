"""Logging configuration"""

import logging
from pathlib import Path
from logging.handlers import RotatingFileHandler
from typing import Optional, Any


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[str] = None,
    log_dir: str = "data/logs"
) -> logging.Logger:
    """Set up logging configuration"""

    # Create log directory if it doesn't exist
    if log_file:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)

    # Configure root logger
    logger = logging.getLogger("matchday")
    logger.setLevel(getattr(logging, log_level.upper()))

    # Clear existing handlers
    logger.handlers.clear()

    console_handler = logging.StreamHandler()
    console_handler.setLevel(getattr(logging, log_level.upper()))
    console_format = logging.Formatter(
        '%(asctime)s | %(name)-30s | %(levelname)-8s | %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    console_handler.setFormatter(console_format)
    logger.addHandler(console_handler)

    # File handler (if specified)
    if log_file:
        file_path = Path(log_dir) / log_file
        file_handler = RotatingFileHandler(
            file_path,
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=5
        )
        file_handler.setLevel(getattr(logging, log_level.upper()))
        file_format = logging.Formatter(
            '%(asctime)s | %(name)-30s | %(levelname)-8s | %(funcName)s:%(lineno)d | %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        file_handler.setFormatter(file_format)
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger for a specific module"""
    return logging.getLogger(f"matchday.{name}")


class StageLogger:
    """Logger for acquisition pipeline stages"""

    def __init__(self, logger: logging.Logger):
        """Initialize stage logger"""
        self.logger = logger

    def log_cache_hit(self, match_key: str, sport: str):
        """Log a dossier served from the record store"""
        self.logger.info(f"💾 CACHE HIT: {sport} | {match_key}")

    def log_stage_start(self, stage: str, match_key: str, details: str = ""):
        """Log a stage starting work"""
        self.logger.info(f"▶️  STAGE START: {stage} | {match_key} | {details}")

    def log_stage_complete(self, stage: str, match_key: str, details: str = ""):
        """Log a stage completing work"""
        self.logger.info(f"✅ STAGE COMPLETE: {stage} | {match_key} | {details}")

    def log_degraded(self, field_name: str, match_key: str, reason: str):
        """Log a field that fell back to its default value"""
        self.logger.warning(
            f"⚠️  DEGRADED: {field_name} | {match_key} | Reason: {reason}"
        )


def log_data_object(logger: logging.Logger, obj_name: str, obj: Any, max_depth: int = 10) -> None:
    """Log a data object in a readable format for debugging

    Args:
        logger: Logger instance
        obj_name: Name/description of the object
        obj: Object to log
        max_depth: Maximum depth for nested structures
    """
    from matchday.utils.config import config
    if not config.is_debug_mode():
        return

    import json
    from dataclasses import asdict, is_dataclass

    def make_serializable(o: Any, depth: int = 0) -> Any:
        """Recursively convert object to JSON-serializable format"""
        if depth > max_depth:
            return f"<max depth {max_depth} reached>"

        if o is None:
            return None

        if isinstance(o, (str, int, float, bool)):
            return o
        elif is_dataclass(o):
            return make_serializable(asdict(o), depth + 1)
        elif isinstance(o, (list, tuple)):
            return [make_serializable(item, depth + 1) for item in o[:10]]  # Limit to 10 items
        elif isinstance(o, dict):
            return {k: make_serializable(v, depth + 1) for k, v in list(o.items())[:20]}  # Limit to 20 keys
        else:
            return str(o)[:500]  # Limit string length

    try:
        serializable = make_serializable(obj)
        json_str = json.dumps(serializable, indent=2, default=str, ensure_ascii=False)
        logger.debug(f"🔍 DEBUG DATA: {obj_name}\n{json_str}")
    except (TypeError, ValueError) as e:
        logger.debug(f"🔍 DEBUG DATA: {obj_name} (serialization failed: {e})\n{str(obj)[:1000]}")
