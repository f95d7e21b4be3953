import logging
import math
import random
from collections import Counter
from dataclasses import dataclass

import numpy as np

from .biome import BiomeColorizer, WATERY
from .heightgrid import HeightGrid
from .noise import FractalNoiseSampler, SimplexNoise
from .packing import FLOATS_PER_VERTEX, INTERLEAVED_STRIDE, interleave

logger = logging.getLogger(__name__)

G = 6.674e-11  # m^3 / (kg s^2)
MIN_SECTOR_COUNT = 3
MIN_STACK_COUNT = 2
NORMAL_EPSILON = 1e-6


def equatorial_bulge(params):
    """First-order equatorial bulge, normalised to the polar radius.

    Ratio of the centrifugal term R^4 w^2 to the gravitational term G M,
    divided by R. Not a geodesy model.
    """
    omega = params.angular_velocity
    return params.radius ** 4 * omega ** 2 / (G * params.mass * params.radius)


def compute_face_normal(v1, v2, v3):
    """Unit normal of triangle v1-v2-v3, or (0, 0, 0) if it has no area."""
    ex1, ey1, ez1 = v2[0] - v1[0], v2[1] - v1[1], v2[2] - v1[2]
    ex2, ey2, ez2 = v3[0] - v1[0], v3[1] - v1[1], v3[2] - v1[2]

    nx = ey1 * ez2 - ez1 * ey2
    ny = ez1 * ex2 - ex1 * ez2
    nz = ex1 * ey2 - ey1 * ex2

    length = math.sqrt(nx * nx + ny * ny + nz * nz)
    if length <= NORMAL_EPSILON:
        return (0.0, 0.0, 0.0)
    return (nx / length, ny / length, nz / length)


@dataclass
class RawVertex:
    position: tuple
    latitude: float
    adjusted_radius: float
    biome: object
    color: tuple


@dataclass
class MeshBuffers:
    positions: np.ndarray
    normals: np.ndarray
    colors: np.ndarray
    triangle_indices: np.ndarray
    line_indices: np.ndarray
    interleaved: np.ndarray

    stride = INTERLEAVED_STRIDE

    @property
    def vertex_count(self):
        return len(self.positions) // 3

    @property
    def triangle_count(self):
        return len(self.triangle_indices) // 3

    @property
    def line_count(self):
        return len(self.line_indices) // 2

    @property
    def interleaved_vertex_count(self):
        return len(self.interleaved) // FLOATS_PER_VERTEX


class _MeshWriter:
    """Accumulates unshared per-face vertices."""

    def __init__(self):
        self.positions = []
        self.normals = []
        self.colors = []
        self.indices = []
        self.lines = []
        self.index = 0

    def add_face(self, corners, normal):
        for v in corners:
            self.positions.extend(v.position)
            self.normals.extend(normal)
            self.colors.extend(v.color)

    def finish(self):
        positions = np.array(self.positions, dtype=np.float32)
        normals = np.array(self.normals, dtype=np.float32)
        colors = np.array(self.colors, dtype=np.float32)
        return MeshBuffers(
            positions=positions,
            normals=normals,
            colors=colors,
            triangle_indices=np.array(self.indices, dtype=np.uint32),
            line_indices=np.array(self.lines, dtype=np.uint32),
            interleaved=interleave(positions, normals, colors),
        )


def tessellate(raw_vertices, stack_count, sector_count):
    """Turn the (stack_count+1) x (sector_count+1) vertex grid into flat faces.

    Each face owns its vertices so it can carry a single normal. Pole rows
    get one triangle per sector, other rows a quad made of two triangles.
    The wireframe is partial: the pole row only has its meridian edges and
    quad diagonals are never drawn.
    """
    out = _MeshWriter()
    for i in range(stack_count):
        vi1 = i * (sector_count + 1)
        vi2 = (i + 1) * (sector_count + 1)

        for j in range(sector_count):
            #  v1--v3
            #  |    |
            #  v2--v4
            v1 = raw_vertices[vi1 + j]
            v2 = raw_vertices[vi2 + j]
            v3 = raw_vertices[vi1 + j + 1]
            v4 = raw_vertices[vi2 + j + 1]
            k = out.index

            if i == 0:
                n = compute_face_normal(v1.position, v2.position, v4.position)
                out.add_face((v1, v2, v4), n)
                out.indices.extend((k, k + 1, k + 2))
                out.lines.extend((k, k + 1))
                out.index += 3
            elif i == stack_count - 1:
                n = compute_face_normal(v1.position, v2.position, v3.position)
                out.add_face((v1, v2, v3), n)
                out.indices.extend((k, k + 1, k + 2))
                out.lines.extend((k, k + 1, k, k + 2))
                out.index += 3
            else:
                # one normal for both halves of the quad
                n = compute_face_normal(v1.position, v2.position, v3.position)
                out.add_face((v1, v2, v3, v4), n)
                out.indices.extend((k, k + 1, k + 2, k + 2, k + 1, k + 3))
                out.lines.extend((k, k + 1, k, k + 2))
                out.index += 4

    return out.finish()


class PlanetMesh:
    """Flat-shaded, oblate, biome-colored planet mesh.

    The mesh is rebuilt from scratch whenever radius, sector count or stack
    count changes. radius is the base shape scale, independent of the
    physical radius in params.
    """

    def __init__(self, params, radius=1.0, sector_count=36, stack_count=18, seed=None, noise=None):
        self.params = params
        self.seed = seed if seed is not None else random.randrange(0, 1000000)
        self.noise = noise if noise is not None else SimplexNoise(seed=self.seed)
        self.sampler = FractalNoiseSampler(self.noise)
        self.radius = radius
        self.sector_count = sector_count
        self.stack_count = stack_count
        self.height_grid = None
        self.raw_vertices = []
        self.buffers = None
        self.set(radius, sector_count, stack_count)

    def set(self, radius, sector_count, stack_count):
        self.radius = radius
        self.sector_count = max(sector_count, MIN_SECTOR_COUNT)
        self.stack_count = max(stack_count, MIN_STACK_COUNT)
        self.build()

    def set_radius(self, radius):
        if radius != self.radius:
            self.set(radius, self.sector_count, self.stack_count)

    def set_sector_count(self, sector_count):
        if sector_count != self.sector_count:
            self.set(self.radius, sector_count, self.stack_count)

    def set_stack_count(self, stack_count):
        if stack_count != self.stack_count:
            self.set(self.radius, self.sector_count, stack_count)

    def build(self):
        self.height_grid = HeightGrid.build(self.sampler, self.stack_count, self.sector_count)
        # fresh stream per build: same seed and traversal give the same mesh
        # RandomState only takes 32-bit seeds; the noise field takes any int
        rng = np.random.RandomState(self.seed % 2 ** 32)
        colorizer = BiomeColorizer(self.params, self.radius, self.height_grid.min_height,
                                   self.height_grid.height_range, self.noise, rng)
        self.raw_vertices = self._place_vertices(self.height_grid, colorizer)
        self.buffers = tessellate(self.raw_vertices, self.stack_count, self.sector_count)
        logger.info(f"Built planet mesh {self.sector_count}x{self.stack_count} "
                    f"(seed {self.seed}): {self.buffers.triangle_count} triangles, "
                    f"{self.buffers.vertex_count} vertices")
        return self.buffers

    def _place_vertices(self, grid, colorizer):
        p = self.params
        K = p.roughness
        h = equatorial_bulge(p)
        water_floor = self.radius + (grid.min_height + grid.height_range * p.water) * K
        sector_step = 2 * math.pi / self.sector_count
        stack_step = math.pi / self.stack_count

        vertices = []
        for i in range(self.stack_count + 1):
            stack_angle = math.pi / 2 - i * stack_step
            for j in range(self.sector_count + 1):
                sector_angle = j * sector_step
                height = grid.at(i, j)

                adj_radius1 = self.radius + height * K
                if adj_radius1 < water_floor:
                    # flatten the sea floor without clipping it
                    adj_radius2 = water_floor + height * K ** 2
                else:
                    adj_radius2 = adj_radius1

                xy = (adj_radius2 + h) * math.cos(stack_angle)
                z = adj_radius2 * math.sin(stack_angle)
                position = (xy * math.cos(sector_angle), xy * math.sin(sector_angle), z)

                biome, color = colorizer.colorize(adj_radius1, stack_angle, position)
                vertices.append(RawVertex(position, stack_angle, adj_radius1, biome, color))
        return vertices

    def biome_fractions(self):
        """Share of grid vertices per biome."""
        counts = Counter(v.biome for v in self.raw_vertices)
        total = len(self.raw_vertices)
        return {biome: n / total for biome, n in counts.items()}

    def water_fraction(self):
        fractions = self.biome_fractions()
        return sum(fractions.get(b, 0.0) for b in WATERY)

    def summary(self):
        b = self.buffers
        return "\n".join([
            "===== Planet =====",
            f"        Radius: {self.radius}",
            f"  Sector Count: {self.sector_count}",
            f"   Stack Count: {self.stack_count}",
            f"Triangle Count: {b.triangle_count}",
            f"   Index Count: {len(b.triangle_indices)}",
            f"  Vertex Count: {b.vertex_count}",
            f"  Normal Count: {len(b.normals) // 3}",
            f"   Color Count: {len(b.colors) // 4}",
        ])
