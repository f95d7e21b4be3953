"""Click CLI commands for planetgen."""

import logging

import click

from . import config
from .mesh import PlanetMesh, equatorial_bulge
from .packing import save_npz
from .params import PlanetParameters
from .scene import SceneError, load_scene

logger = logging.getLogger(__name__)


def mesh_options(f):
    f = click.option('--seed', type=int, default=config.DEFAULT_SEED,
                     help='Seed for terrain noise and biome jitter')(f)
    f = click.option('--radius', type=float, default=config.DEFAULT_RADIUS,
                     help='Base shape radius')(f)
    f = click.option('--stacks', type=int, default=config.DEFAULT_STACKS,
                     help='Latitude rows (min 2)')(f)
    f = click.option('--sectors', type=int, default=config.DEFAULT_SECTORS,
                     help='Longitude columns (min 3)')(f)
    return f


def _load(scene):
    if scene is None:
        return PlanetParameters()
    try:
        return load_scene(scene)
    except SceneError as e:
        logger.error(f"Bad scene file {scene}: {e}")
        raise click.ClickException(str(e))


@click.group()
@click.option('--verbose', '-v', is_flag=True, help='Log debug output')
def cli(verbose):
    """Procedural planet mesh generator."""
    logging.basicConfig(level=logging.DEBUG if verbose else config.LOG_LEVEL,
                        format='%(asctime)s %(levelname)s %(name)s: %(message)s')


@cli.command()
@click.argument('scene', required=False, type=click.Path())
@mesh_options
def info(scene, sectors, stacks, radius, seed):
    """Build a planet and print its mesh statistics."""
    params = _load(scene)
    mesh = PlanetMesh(params, radius, sectors, stacks, seed=seed)
    click.echo(mesh.summary())
    click.echo(f"    Line Count: {mesh.buffers.line_count}")
    click.echo(f"Equatorial bulge: {equatorial_bulge(params):.6f}")
    click.echo(f"Height range: {mesh.height_grid.min_height:.4f} .. {mesh.height_grid.max_height:.4f}")
    for biome, share in sorted(mesh.biome_fractions().items(), key=lambda kv: kv[0].value):
        click.echo(f"  {biome.value:>6}: {share * 100:5.1f}%")


@cli.command()
@click.argument('scene', required=False, type=click.Path())
@click.option('--output', '-o', default='planet.npz', help='Output .npz file path')
@mesh_options
def export(scene, output, sectors, stacks, radius, seed):
    """Build a planet and write its buffers to a numpy archive."""
    params = _load(scene)
    mesh = PlanetMesh(params, radius, sectors, stacks, seed=seed)
    path = save_npz(mesh.buffers, output)
    click.echo(f"Wrote {path}")


@cli.command()
@click.argument('scene', required=False, type=click.Path())
@mesh_options
def view(scene, sectors, stacks, radius, seed):
    """Open an interactive viewer window."""
    from .viewer import main

    main(_load(scene), sectors, stacks, seed=seed, radius=radius)
