import logging
import math
import random
import threading

import numpy as np
import pygame
from opensimplex import OpenSimplex

from . import config
from .mesh import PlanetMesh

logger = logging.getLogger(__name__)

DRAW_FILL, DRAW_WIREFRAME, DRAW_FILL_LINES = 0, 1, 2
DRAW_MODE_NAMES = ("fill", "wireframe", "fill + wireframe")

AMBIENT = 0.3
DIFFUSE = 0.7
LIGHT_DIR = (0.0, 0.0, 1.0)
# mesh space is z-up, the view is y-up
Z_UP_TO_Y_UP = np.array([[1, 0, 0], [0, 0, 1], [0, -1, 0]], dtype=np.float32)


def rotation_matrix(yaw, pitch):
    cy = math.cos(yaw)
    sy = math.sin(yaw)
    cp = math.cos(pitch)
    sp = math.sin(pitch)
    Ry = np.array([[cy, 0, sy], [0, 1, 0], [-sy, 0, cy]])
    Rp = np.array([[1, 0, 0], [0, cp, -sp], [0, sp, cp]])
    return Rp @ Ry


def _to_view(points, rotation):
    return points @ Z_UP_TO_Y_UP.T @ rotation.T


def project_faces(buffers, rotation, center, scale, light_dir=LIGHT_DIR):
    """Project the triangles of a mesh onto the screen.

    Returns (polygons, shades, order): polygons is (T, 3, 2) screen points,
    shades the (T, 3) lit RGB colors in 0..255, order the indices of the
    front-facing triangles sorted back to front.
    """
    tris = buffers.triangle_indices.reshape(-1, 3).astype(np.int64)
    pos = _to_view(buffers.positions.reshape(-1, 3), rotation)
    nrm = _to_view(buffers.normals.reshape(-1, 3), rotation)
    colors = buffers.colors.reshape(-1, 4)

    face_normals = nrm[tris[:, 0]]
    visible = face_normals[:, 2] > 0.0

    ld = np.array(light_dir, dtype=np.float64)
    ld = ld / np.linalg.norm(ld)
    intensity = np.clip(face_normals @ ld, 0.0, 1.0)
    base = colors[tris, :3].mean(axis=1)
    shades = np.clip(base * (AMBIENT + DIFFUSE * intensity)[:, None], 0.0, 1.0)
    shades = (shades * 255).astype(np.uint8)

    cx, cy = center
    screen_x = cx + pos[:, 0] * scale
    screen_y = cy - pos[:, 1] * scale
    polygons = np.stack([screen_x[tris], screen_y[tris]], axis=2)

    depth = pos[tris, 2].mean(axis=1)
    front = np.nonzero(visible)[0]
    order = front[np.argsort(depth[front], kind="stable")]
    return polygons, shades, order


def project_lines(buffers, rotation, center, scale):
    """Screen segments (L, 2, 2) of the wireframe edges facing the viewer."""
    pairs = buffers.line_indices.reshape(-1, 2).astype(np.int64)
    pos = _to_view(buffers.positions.reshape(-1, 3), rotation)
    cx, cy = center
    pts = np.stack([cx + pos[:, 0] * scale, cy - pos[:, 1] * scale], axis=1)
    front = pos[pairs, 2].mean(axis=1) > 0.0
    return pts[pairs][front]


class StarField:
    """Procedural space backdrop: a faint noise nebula and random stars."""

    def __init__(self, width, height, seed=42):
        self.width = width
        self.height = height
        self.surface = pygame.Surface((width, height))
        self.noise = OpenSimplex(seed=seed)
        self.rng = random.Random(seed)
        self.generate()

    def generate(self):
        self.surface.fill(config.BG_COLOR)
        for y in range(0, self.height, 4):
            for x in range(0, self.width, 4):
                n = self.noise.noise2(x * 0.004, y * 0.004)
                if n > 0.35:
                    glow = n - 0.35
                    color = (int(30 * glow), int(15 * glow), min(int(70 * glow) + 15, 255))
                    pygame.draw.rect(self.surface, color, (x, y, 4, 4))

        for _ in range(350):
            x = self.rng.randrange(self.width)
            y = self.rng.randrange(self.height)
            b = self.rng.randint(120, 255)
            self.surface.set_at((x, y), (b, b, b))

    def draw(self, screen, yaw=0.0, pitch=0.0):
        ox = int(yaw * 20) % self.width
        oy = int(pitch * 20) % self.height
        for dx in (0, self.width):
            for dy in (0, self.height):
                screen.blit(self.surface, (dx - ox, dy - oy))


class PlanetView:
    def __init__(self, buffers, screen, scale=220):
        self.buffers = buffers
        self.screen = screen
        self.scale = scale
        self.center = (screen.get_width() // 2, screen.get_height() // 2)
        self.yaw = 0.0
        self.pitch = 0.0
        self.draw_mode = DRAW_FILL

    def render(self):
        if self.buffers is None:
            return
        rotation = rotation_matrix(self.yaw, self.pitch)
        if self.draw_mode in (DRAW_FILL, DRAW_FILL_LINES):
            polygons, shades, order = project_faces(self.buffers, rotation, self.center, self.scale)
            polygons = polygons.tolist()
            shades = shades.tolist()
            for t in order:
                pygame.draw.polygon(self.screen, shades[t], polygons[t])
        if self.draw_mode in (DRAW_WIREFRAME, DRAW_FILL_LINES):
            for a, b in project_lines(self.buffers, rotation, self.center, self.scale).tolist():
                pygame.draw.line(self.screen, config.LINE_COLOR, a, b)


def info_lines(params, mesh=None):
    lines = [
        f"Planet Radius: {params.radius / 1000.0:.3f} km",
        f"  Planet Mass: {params.mass:.4g} kg",
        f" Sidereal Day: {params.day / 3600.0:.3f} Earth hours",
        f"Smooth Factor: {params.roughness:.3f}",
        f"Average Temp.: {params.temperature:.3f} C",
    ]
    if mesh is not None:
        lines.append(f"Seed: {mesh.seed}  Water: {mesh.water_fraction() * 100:.1f}%")
    return lines


def main(params, sector_count=None, stack_count=None, seed=None, radius=None):
    sector_count = sector_count or config.DEFAULT_SECTORS
    stack_count = stack_count or config.DEFAULT_STACKS
    radius = radius or config.DEFAULT_RADIUS
    seed = seed if seed is not None else config.DEFAULT_SEED

    pygame.init()
    screen = pygame.display.set_mode((config.SCREEN_W, config.SCREEN_H))
    pygame.display.set_caption("planetgen")
    clock = pygame.time.Clock()
    font = pygame.font.SysFont("monospace", 14)
    backdrop = StarField(config.SCREEN_W, config.SCREEN_H)

    holder = {"mesh": None}
    ready = threading.Event()

    def worker(worker_seed):
        holder["mesh"] = PlanetMesh(params, radius, sector_count, stack_count, seed=worker_seed)
        ready.set()

    threading.Thread(target=worker, args=(seed,), daemon=True).start()
    view = PlanetView(None, screen)
    mesh = None

    dragging = False
    last_mouse = (0, 0)
    running = True
    while running:
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
            elif event.type == pygame.MOUSEBUTTONDOWN:
                if event.button == 1:
                    dragging = True
                    last_mouse = event.pos
                elif event.button == 4:
                    view.scale = min(600, view.scale + 10)
                elif event.button == 5:
                    view.scale = max(40, view.scale - 10)
            elif event.type == pygame.MOUSEBUTTONUP:
                if event.button == 1:
                    dragging = False
            elif event.type == pygame.MOUSEMOTION and dragging:
                mx, my = event.pos
                lx, ly = last_mouse
                view.yaw += (mx - lx) * 0.01
                view.pitch = float(np.clip(view.pitch + (my - ly) * 0.01,
                                           -math.pi / 2 + 0.01, math.pi / 2 - 0.01))
                last_mouse = (mx, my)
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    running = False
                elif event.key == pygame.K_w:
                    view.draw_mode = (view.draw_mode + 1) % len(DRAW_MODE_NAMES)
                    logger.info(f"Draw mode: {DRAW_MODE_NAMES[view.draw_mode]}")
                elif event.key == pygame.K_r and ready.is_set():
                    ready.clear()
                    mesh = None
                    view.buffers = None
                    threading.Thread(target=worker, args=(None,), daemon=True).start()

        if ready.is_set() and mesh is not holder["mesh"]:
            mesh = holder["mesh"]
            view.buffers = mesh.buffers

        backdrop.draw(screen, view.yaw, view.pitch)
        if mesh is not None:
            view.render()
            text = info_lines(params, mesh)
        else:
            text = info_lines(params) + ["Generating planet..."]
        text += ["Drag: rotate  Wheel: zoom  W: draw mode  R: regenerate"]
        for i, t in enumerate(text):
            surf = font.render(t, True, (220, 220, 220))
            screen.blit(surf, (10, 10 + i * 16))

        pygame.display.flip()
        clock.tick(30)

    pygame.quit()
