import logging
import math

import numpy as np

logger = logging.getLogger(__name__)

# spatial frequency of the noise relative to the unit sphere
NOISE_RES = 2.0


def sample_row(sampler, i, stack_count, sector_count, res=NOISE_RES):
    """Sample one stack row of the grid.

    Returns (values, row_min, row_max). Rows share no state, so they can be
    sampled in any order and merged afterwards.
    """
    stack_angle = math.pi / 2 - i * (math.pi / stack_count)
    sector_step = 2 * math.pi / sector_count
    xy = math.cos(stack_angle)
    z = math.sin(stack_angle)

    values = np.empty(sector_count + 1, dtype=np.float64)
    for j in range(sector_count + 1):
        sector_angle = j * sector_step
        x = xy * math.cos(sector_angle)
        y = xy * math.sin(sector_angle)
        values[j] = sampler.height(x * res, y * res, z * res)
    return values, float(values.min()), float(values.max())


class HeightGrid:
    """Noise heights for every (stack, sector) vertex of a UV sphere.

    Pole rows and the seam column are stored explicitly, so the grid holds
    (stack_count + 1) x (sector_count + 1) values in a flat row-major buffer.
    """

    def __init__(self, stack_count, sector_count, values, min_height, max_height):
        self.rows = stack_count + 1
        self.cols = sector_count + 1
        values = np.array(values, dtype=np.float64).ravel()
        if values.size != self.rows * self.cols:
            raise ValueError(
                f"expected {self.rows * self.cols} heights, got {values.size}")
        values.flags.writeable = False
        self.values = values
        self.min_height = min_height
        self.max_height = max_height

    @classmethod
    def build(cls, sampler, stack_count, sector_count, res=NOISE_RES):
        rows = []
        min_height = math.inf
        max_height = -math.inf
        for i in range(stack_count + 1):
            values, row_min, row_max = sample_row(sampler, i, stack_count, sector_count, res)
            rows.append(values)
            min_height = min(min_height, row_min)
            max_height = max(max_height, row_max)

        grid = cls(stack_count, sector_count, np.concatenate(rows), min_height, max_height)
        logger.debug(f"Height grid {grid.rows}x{grid.cols}: "
                     f"min={min_height:.4f} max={max_height:.4f}")
        return grid

    @property
    def height_range(self):
        return self.max_height - self.min_height

    def at(self, i, j):
        if not (0 <= i < self.rows and 0 <= j < self.cols):
            raise IndexError(f"grid index ({i}, {j}) outside {self.rows}x{self.cols}")
        return float(self.values[i * self.cols + j])

    def __getitem__(self, key):
        i, j = key
        return self.at(i, j)

    def as_array(self):
        return self.values.reshape(self.rows, self.cols)
