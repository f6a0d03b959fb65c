# trail_planner/log.py
import logging

from trail_planner.config import get_settings


def get_logger(name: str) -> logging.Logger:
    """Return a module logger with the shared stream handler attached once."""
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("[%(levelname)s] %(name)s: %(message)s"))
        logger.addHandler(handler)
    logger.setLevel(getattr(logging, get_settings().log_level, logging.INFO))
    logger.propagate = False
    return logger
