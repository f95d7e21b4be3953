"""planetgen: procedural, biome-colored planet meshes."""

from planetgen.biome import Biome, BiomeColorizer
from planetgen.heightgrid import HeightGrid
from planetgen.mesh import MeshBuffers, PlanetMesh, equatorial_bulge
from planetgen.noise import FractalNoiseSampler, SimplexNoise
from planetgen.packing import interleave
from planetgen.params import PlanetParameters
from planetgen.scene import load_scene, parse_scene
