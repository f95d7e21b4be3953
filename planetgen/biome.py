import math
from collections import namedtuple
from enum import Enum


class Biome(Enum):
    WATER = "water"
    ICE = "ice"
    SNOW = "snow"
    SAND = "sand"
    GRASS = "grass"
    ALIEN = "alien"


# RGBA
SNOW_COLOR = (1.0, 0.98, 0.98, 1.0)
ICE_COLOR = (180.0 / 255.0, 207.0 / 255.0, 250.0 / 255.0, 1.0)
WATER_COLOR = (0.0, 94.0 / 255.0, 184.0 / 255.0, 1.0)
SAND_COLOR = (0.761, 0.698, 0.502, 1.0)
GRASS_COLOR = (0.0, 154.0 / 255.0, 23.0 / 255.0, 1.0)

BIOME_COLORS = {
    Biome.SNOW: SNOW_COLOR,
    Biome.ICE: ICE_COLOR,
    Biome.WATER: WATER_COLOR,
    Biome.SAND: SAND_COLOR,
    Biome.GRASS: GRASS_COLOR,
}

WATERY = frozenset({Biome.WATER, Biome.ICE})

# snow line never climbs above this fraction of the height range
MAX_SNOW_COEFF = 0.91
SAND_BAND = 0.08
# exponents of the polar fringe jitter; smaller means a wider fuzzy band
POLAR_FUZZ = 0.25
SHELF_FUZZ = 0.9

Thresholds = namedtuple("Thresholds", ["snow", "water", "sand"])


class BiomeColorizer:
    """Classify vertices into biomes from height, latitude and climate.

    min_height and height_range come from the height grid of the whole
    planet. rng is any object with a numpy-style random_sample(); its draws
    happen in call order, so a seeded stream gives reproducible colors.
    """

    def __init__(self, params, radius, min_height, height_range, noise, rng):
        self.params = params
        self.radius = radius
        self.min_height = min_height
        self.height_range = height_range
        self.noise = noise
        self.rng = rng

    def thresholds(self, latitude):
        p = self.params
        abs_lat = abs(latitude)
        local_temp = (p.temperature + 45) - math.degrees(abs_lat)
        coeff = min(0.85 / 15 * local_temp, MAX_SNOW_COEFF)
        snow = (self.min_height + coeff * self.height_range) * p.roughness
        water = (self.min_height + p.water * self.height_range) * p.roughness
        sand = water + (snow - water) * SAND_BAND
        return Thresholds(snow, water, sand)

    def classify(self, adjusted_radius, latitude, position=None):
        """Return the Biome of one vertex.

        adjusted_radius is the radius before water smoothing. position is
        accepted for callers that pass the placed vertex; the bands only
        depend on latitude and height.
        """
        p = self.params
        t = self.thresholds(latitude)
        abs_lat = abs(latitude)
        has_water = p.water > 0.0

        if math.degrees(abs_lat - math.pi / 4) > p.temperature:
            # both draws are taken for every vertex past the polar edge so the
            # stream stays aligned whatever the water level is
            fringe = max(abs_lat - (math.pi / 4 + math.radians(p.temperature)), 0.0)
            zone_draw = self.rng.random_sample()
            shelf_draw = self.rng.random_sample()
            if zone_draw < fringe ** POLAR_FUZZ and has_water:
                if adjusted_radius > self.radius + t.water:
                    return Biome.SNOW
                if shelf_draw < fringe ** SHELF_FUZZ:
                    return Biome.ICE
                return Biome.WATER

        if adjusted_radius <= self.radius + t.water and has_water:
            return Biome.WATER
        if adjusted_radius < self.radius + t.sand and p.terrestrial:
            return Biome.SAND
        if adjusted_radius > self.radius + t.snow and has_water:
            return Biome.SNOW
        if p.terrestrial:
            return Biome.GRASS
        return Biome.ALIEN

    def color(self, biome, latitude):
        if biome is Biome.ALIEN:
            n = self.noise.noise1(latitude * 2)
            r, g, b = self.params.base_color
            return (r + n, g + n, b + n, 1.0)
        return BIOME_COLORS[biome]

    def colorize(self, adjusted_radius, latitude, position=None):
        biome = self.classify(adjusted_radius, latitude, position)
        return biome, self.color(biome, latitude)
