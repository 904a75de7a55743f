import logging
import os

LOG_LEVEL_ENV = "WSPACE_LOG_LEVEL"
TRACE_ENV = "WSPACE_TRACE"

def log_level():
    name = os.environ.get(LOG_LEVEL_ENV, "WARNING").upper()
    level = logging.getLevelName(name)
    # getLevelName hands back a string for names it does not know
    return level if isinstance(level, int) else logging.WARNING

def trace_enabled():
    return os.environ.get(TRACE_ENV, "") not in ("", "0")

def init_logger(name):
    logger = logging.getLogger(name)
    logger.setLevel(log_level())

    if not logger.handlers:
        ch = logging.StreamHandler()
        ch.setFormatter(logging.Formatter("[%(name)s] %(levelname)s - %(message)s"))
        logger.addHandler(ch)

    return logger

def label_repr(label):
    """Labels are arbitrary bytes; show printable ones as-is and the rest escaped."""
    chars = (ch if ch.isascii() and ch.isprintable() else f"\\x{ord(ch):02x}" for ch in label)
    return '"' + "".join(chars) + '"'
