"""Planet scene files.

One field per line, picked by the first character of the line:

    R 6357          polar radius, km
    M 5.9722e24     mass, kg
    D 23.93         sidereal day, hours
    S 0.1           surface roughness
    T 15            mean temperature at 45 deg latitude, C
    W 0.57          water fraction
    C terrestrial   or "C random", or "C color 193 68 14"

Missing fields keep the Earth-like defaults of PlanetParameters.
"""

import dataclasses
import logging
from pathlib import Path

import numpy as np

from .params import PlanetParameters

logger = logging.getLogger(__name__)


class SceneError(ValueError):
    pass


def _number(value, lineno, line):
    try:
        return float(value)
    except (TypeError, ValueError):
        raise SceneError(f"line {lineno}: cannot read a number from {line!r}") from None


def parse_scene(text, rng=None):
    """Build PlanetParameters from scene text.

    rng draws the base color of "C random" scenes.
    """
    if rng is None:
        rng = np.random.RandomState()
    fields = {}

    for lineno, raw in enumerate(text.splitlines(), start=1):
        tokens = raw.split()
        if not tokens:
            continue
        key = tokens[0][0]
        args = tokens[1:]
        value = args[0] if args else None

        if key == "R":
            fields["radius"] = _number(value, lineno, raw) * 1000.0
        elif key == "M":
            fields["mass"] = _number(value, lineno, raw)
        elif key == "D":
            fields["day"] = _number(value, lineno, raw) * 3600.0
        elif key == "S":
            fields["roughness"] = _number(value, lineno, raw)
        elif key == "T":
            fields["temperature"] = _number(value, lineno, raw)
        elif key == "W":
            fields["water"] = _number(value, lineno, raw)
        elif key == "C":
            mode = args[-1] if args else ""
            if mode != "terrestrial":
                fields["terrestrial"] = False
            if mode == "random":
                fields["base_color"] = tuple(rng.randint(0, 100) * 0.01 for _ in range(3))
            elif args and args[0] == "color":
                if len(args) != 4:
                    raise SceneError(f"line {lineno}: expected 'color r g b', got {raw!r}")
                fields["base_color"] = tuple(_number(c, lineno, raw) / 255.0 for c in args[1:])
        else:
            logger.debug(f"Ignoring scene line {lineno}: {raw!r}")

    return dataclasses.replace(PlanetParameters(), **fields)


def load_scene(path, rng=None):
    """Read a scene file; fall back to the default planet if it is missing."""
    path = Path(path)
    try:
        text = path.read_text()
    except OSError as e:
        logger.warning(f"Unable to open scene {path} ({e}); generating a terrestrial planet instead")
        return PlanetParameters()
    except UnicodeDecodeError as e:
        raise SceneError(f"{path}: not a text scene file ({e.reason})") from None
    params = parse_scene(text, rng=rng)
    logger.info(f"Loaded scene {path.name}: R={params.radius / 1000.0:.0f} km, "
                f"day={params.day / 3600.0:.2f} h, water={params.water}")
    return params
