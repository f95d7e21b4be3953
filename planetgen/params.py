import math
from dataclasses import dataclass


@dataclass(frozen=True)
class PlanetParameters:
    """Physical description of a planet.

    radius is the polar radius in meters, day the sidereal rotation period in
    seconds. temperature is the mean temperature (°C) at 45° latitude.
    Nothing here is validated; day must be positive.
    """
    radius: float = 6357000.0
    mass: float = 5.9722e24
    day: float = 86164.0
    roughness: float = 0.1
    temperature: float = 15.0
    water: float = 0.57
    terrestrial: bool = True
    base_color: tuple = (0.0, 0.0, 0.0)

    @property
    def angular_velocity(self):
        return 2 * math.pi / self.day
