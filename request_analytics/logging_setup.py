from __future__ import annotations
import logging

FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"

def setup_logging(level: str = "INFO") -> logging.Logger:
    """Console logging on the root logger; safe to call more than once."""
    logger = logging.getLogger()
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    if not any(isinstance(h, logging.StreamHandler) for h in logger.handlers):
        console = logging.StreamHandler()
        console.setFormatter(logging.Formatter(FORMAT))
        logger.addHandler(console)

    return logger
