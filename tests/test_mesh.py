import dataclasses
import math

import numpy as np
import pytest

from planetgen.biome import ICE_COLOR, WATER_COLOR, WATERY
from planetgen.mesh import (
    MIN_SECTOR_COUNT, MIN_STACK_COUNT, PlanetMesh, compute_face_normal, equatorial_bulge,
)
from planetgen.noise import SimplexNoise
from planetgen.packing import FLOATS_PER_VERTEX

from conftest import ConstantNoise


def expected_vertex_count(sectors, stacks):
    return 2 * 3 * sectors + 4 * sectors * (stacks - 2)


@pytest.fixture
def earth_mesh(earth):
    return PlanetMesh(earth, 1.0, 8, 4, seed=7)


class TestEquatorialBulge:
    def test_earth_magnitude(self, earth):
        assert equatorial_bulge(earth) == pytest.approx(0.00342, rel=0.02)

    def test_positive(self, earth):
        assert equatorial_bulge(earth) > 0

    def test_grows_with_spin(self, earth):
        slow = dataclasses.replace(earth, day=earth.day * 2)
        fast = dataclasses.replace(earth, day=earth.day / 2)
        assert equatorial_bulge(fast) > equatorial_bulge(earth) > equatorial_bulge(slow)

    def test_shrinks_with_mass(self, earth):
        heavy = dataclasses.replace(earth, mass=earth.mass * 10)
        assert equatorial_bulge(heavy) < equatorial_bulge(earth)


class TestFaceNormal:
    def test_counter_clockwise_points_up(self):
        assert compute_face_normal((0, 0, 0), (1, 0, 0), (0, 1, 0)) == pytest.approx((0, 0, 1))

    def test_unit_length(self):
        n = compute_face_normal((0, 0, 0), (3, 1, 0), (0, 2, 5))
        assert math.sqrt(sum(c * c for c in n)) == pytest.approx(1.0)

    def test_degenerate_is_zero(self):
        assert compute_face_normal((1, 1, 1), (1, 1, 1), (2, 2, 2)) == (0.0, 0.0, 0.0)
        assert compute_face_normal((0, 0, 0), (1, 1, 1), (2, 2, 2)) == (0.0, 0.0, 0.0)


class TestTessellation:
    def test_earth_scenario_counts(self, earth_mesh):
        b = earth_mesh.buffers
        assert b.triangle_count == 48
        assert len(b.triangle_indices) == 144
        assert b.vertex_count == 112
        # 8 pole edges + 3 rows x 8 sectors x 2 edges
        assert b.line_count == 56

    @pytest.mark.parametrize("sectors, stacks", [(3, 2), (5, 3), (12, 7)])
    def test_vertex_count_formula(self, earth, sectors, stacks):
        b = PlanetMesh(earth, 1.0, sectors, stacks, seed=1).buffers
        n = expected_vertex_count(sectors, stacks)
        assert len(b.positions) == 3 * n
        assert len(b.normals) == 3 * n
        assert len(b.colors) == 4 * n
        assert b.triangle_count == 2 * sectors + 2 * sectors * (stacks - 2)

    def test_buffer_invariants(self, earth_mesh):
        b = earth_mesh.buffers
        assert len(b.positions) // 3 == len(b.normals) // 3 == len(b.colors) // 4
        assert len(b.triangle_indices) % 3 == 0
        assert len(b.line_indices) % 2 == 0
        assert b.triangle_indices.max() < b.vertex_count
        assert b.line_indices.max() < b.vertex_count
        assert b.positions.dtype == np.float32
        assert b.triangle_indices.dtype == np.uint32

    def test_interleaved_matches_streams(self, earth_mesh):
        b = earth_mesh.buffers
        assert b.interleaved_vertex_count == b.vertex_count
        rows = b.interleaved.reshape(-1, FLOATS_PER_VERTEX)
        assert np.array_equal(rows[:, :3].ravel(), b.positions)
        assert np.array_equal(rows[:, 3:6].ravel(), b.normals)
        assert np.array_equal(rows[:, 6:].ravel(), b.colors)
        assert b.stride == 40

    def test_flat_shading(self, earth_mesh):
        sectors = earth_mesh.sector_count
        normals = earth_mesh.buffers.normals.reshape(-1, 3)
        pole = normals[:3 * sectors].reshape(sectors, 3, 3)
        interior = normals[3 * sectors:-3 * sectors].reshape(-1, 4, 3)
        for face in list(pole) + list(interior):
            assert np.all(face == face[0])
        lengths = np.linalg.norm(normals, axis=1)
        assert np.all((np.abs(lengths - 1.0) < 1e-5) | (lengths == 0.0))

    def test_normals_point_outwards(self, earth_mesh):
        b = earth_mesh.buffers
        pos = b.positions.reshape(-1, 3)
        nrm = b.normals.reshape(-1, 3)
        assert np.all(np.einsum("ij,ij->i", pos, nrm) >= 0)

    def test_quad_triangle_order(self, earth_mesh):
        sectors = earth_mesh.sector_count
        tris = earth_mesh.buffers.triangle_indices.reshape(-1, 3)
        assert tris[0].tolist() == [0, 1, 2]
        first_quad = 3 * sectors
        assert tris[sectors].tolist() == [first_quad, first_quad + 1, first_quad + 2]
        assert tris[sectors + 1].tolist() == [first_quad + 2, first_quad + 1, first_quad + 3]

    def test_partial_wireframe(self, earth_mesh):
        sectors = earth_mesh.sector_count
        lines = earth_mesh.buffers.line_indices.reshape(-1, 2)
        # north pole: meridian edge only
        assert lines[:sectors].tolist() == [[3 * j, 3 * j + 1] for j in range(sectors)]
        first_quad = 3 * sectors
        assert lines[sectors].tolist() == [first_quad, first_quad + 1]
        assert lines[sectors + 1].tolist() == [first_quad, first_quad + 2]


class TestResolution:
    def test_counts_floored(self, earth):
        mesh = PlanetMesh(earth, 1.0, 1, 0, seed=2)
        assert mesh.sector_count == MIN_SECTOR_COUNT
        assert mesh.stack_count == MIN_STACK_COUNT
        assert mesh.buffers.triangle_count == 6

    def test_setters_rebuild(self, earth_mesh):
        before = earth_mesh.buffers
        earth_mesh.set_sector_count(8)
        assert earth_mesh.buffers is before
        earth_mesh.set_sector_count(10)
        assert earth_mesh.buffers.vertex_count == expected_vertex_count(10, 4)
        earth_mesh.set_stack_count(6)
        assert earth_mesh.buffers.vertex_count == expected_vertex_count(10, 6)
        earth_mesh.set_radius(2.0)
        assert earth_mesh.radius == 2.0
        assert earth_mesh.height_grid.rows == 7

    def test_radius_scales_shape(self, earth):
        small = PlanetMesh(earth, 1.0, 8, 4, seed=3)
        large = PlanetMesh(earth, 3.0, 8, 4, seed=3)
        assert np.abs(large.buffers.positions).max() > 2 * np.abs(small.buffers.positions).max()


class TestDeterminism:
    def test_same_seed_same_buffers(self, earth):
        a = PlanetMesh(earth, 1.0, 16, 8, seed=99).buffers
        b = PlanetMesh(earth, 1.0, 16, 8, seed=99).buffers
        for field in ("positions", "normals", "colors", "triangle_indices", "line_indices", "interleaved"):
            assert np.array_equal(getattr(a, field), getattr(b, field))

    def test_rebuild_is_idempotent(self, earth):
        mesh = PlanetMesh(earth, 1.0, 16, 8, seed=5)
        first = mesh.buffers
        second = mesh.build()
        assert np.array_equal(first.colors, second.colors)
        assert np.array_equal(first.positions, second.positions)


class TestShape:
    def test_perfect_sphere_bulges_at_equator(self, earth):
        params = dataclasses.replace(earth, roughness=0.0, day=3600.0 * 4)
        mesh = PlanetMesh(params, 1.0, 8, 4, seed=1)
        h = equatorial_bulge(params)
        north = mesh.raw_vertices[0].position
        equator = mesh.raw_vertices[2 * 9].position
        assert math.sqrt(sum(c * c for c in north)) == pytest.approx(1.0, abs=1e-9)
        assert math.sqrt(sum(c * c for c in equator)) == pytest.approx(1.0 + h)

    def test_submerged_terrain_is_damped(self, earth):
        params = dataclasses.replace(earth, roughness=0.5, day=1e12)
        mesh = PlanetMesh(params, 1.0, 16, 8, seed=8)
        grid = mesh.height_grid
        K = params.roughness
        floor = 1.0 + (grid.min_height + grid.height_range * params.water) * K
        cols = mesh.sector_count + 1
        submerged = 0
        for idx, v in enumerate(mesh.raw_vertices):
            height = grid.at(idx // cols, idx % cols)
            distance = math.sqrt(sum(c * c for c in v.position))
            assert v.adjusted_radius == pytest.approx(1.0 + height * K)
            if v.adjusted_radius < floor:
                submerged += 1
                assert distance == pytest.approx(floor + height * K ** 2, abs=1e-9)
            else:
                assert distance == pytest.approx(v.adjusted_radius, abs=1e-9)
        assert submerged > 0


class TestBiomes:
    def test_fractions_sum_to_one(self, earth_mesh):
        assert sum(earth_mesh.biome_fractions().values()) == pytest.approx(1.0)

    def test_water_fraction_monotonic(self, earth):
        fractions = []
        for water in (0.0, 0.2, 0.4, 0.6, 0.8, 1.0):
            params = dataclasses.replace(earth, water=water)
            mesh = PlanetMesh(params, 1.0, 24, 12, seed=13, noise=SimplexNoise(seed=13))
            fractions.append(mesh.water_fraction())
        assert fractions == sorted(fractions)
        assert fractions[-1] > fractions[0]

    def test_dry_planet_has_no_water_colors(self, earth):
        params = dataclasses.replace(earth, water=0.0, temperature=-40.0)
        mesh = PlanetMesh(params, 1.0, 16, 8, seed=4)
        assert not any(v.biome in WATERY for v in mesh.raw_vertices)
        colors = mesh.buffers.colors.reshape(-1, 4)
        for banned in (WATER_COLOR, ICE_COLOR):
            assert not np.any(np.all(np.isclose(colors, np.array(banned, dtype=np.float32)), axis=1))

    def test_alien_planet_uses_base_color(self, earth):
        params = dataclasses.replace(earth, water=0.0, terrestrial=False, base_color=(0.2, 0.3, 0.4))
        mesh = PlanetMesh(params, 1.0, 8, 4, seed=4, noise=ConstantNoise(value=0.0, line=0.05))
        colors = mesh.buffers.colors.reshape(-1, 4)
        assert colors == pytest.approx(np.tile([0.25, 0.35, 0.45, 1.0], (len(colors), 1)))


def test_summary(earth_mesh):
    text = earth_mesh.summary()
    assert "Triangle Count: 48" in text
    assert "Vertex Count: 112" in text


class TestSeeds:
    @pytest.mark.parametrize("seed", [-5, 2 ** 32, 2 ** 40 + 3])
    def test_out_of_range_seeds_build(self, earth, seed):
        mesh = PlanetMesh(earth, 1.0, 8, 4, seed=seed)
        assert mesh.seed == seed
        assert mesh.buffers.triangle_count == 48

    def test_wrapped_seed_is_deterministic(self, earth):
        a = PlanetMesh(earth, 1.0, 8, 4, seed=-5).buffers
        b = PlanetMesh(earth, 1.0, 8, 4, seed=-5).buffers
        assert np.array_equal(a.colors, b.colors)
