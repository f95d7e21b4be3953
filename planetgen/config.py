import logging
import os

logger = logging.getLogger(__name__)


def _env_int(name, default):
    value = os.environ.get(name, "").strip()
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        logger.warning(f"Ignoring {name}={value!r}: not an integer, using {default}")
        return default


# viewer window
SCREEN_W = 900
SCREEN_H = 700
BG_COLOR = (5, 5, 15)
LINE_COLOR = (51, 51, 51)

# tessellation used when none is given on the command line
DEFAULT_SECTORS = _env_int("PLANETGEN_SECTORS", 96)
DEFAULT_STACKS = _env_int("PLANETGEN_STACKS", 48)
DEFAULT_RADIUS = 1.0

# unset means a new random seed per planet
DEFAULT_SEED = _env_int("PLANETGEN_SEED", None)

LOG_LEVEL = os.environ.get("PLANETGEN_LOG_LEVEL", "INFO").upper()
