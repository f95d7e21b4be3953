import logging
from pathlib import Path

import numpy as np

logger = logging.getLogger(__name__)

# position(3) + normal(3) + color(4)
FLOATS_PER_VERTEX = 10
INTERLEAVED_STRIDE = FLOATS_PER_VERTEX * np.dtype(np.float32).itemsize


def interleave(positions, normals, colors):
    """Merge the vertex streams into one float32 buffer, 10 floats per vertex."""
    pos = np.asarray(positions, dtype=np.float32).reshape(-1, 3)
    nrm = np.asarray(normals, dtype=np.float32).reshape(-1, 3)
    col = np.asarray(colors, dtype=np.float32).reshape(-1, 4)
    if not (len(pos) == len(nrm) == len(col)):
        raise ValueError(f"vertex streams disagree: {len(pos)} positions, "
                         f"{len(nrm)} normals, {len(col)} colors")
    return np.concatenate([pos, nrm, col], axis=1).ravel()


def save_npz(buffers, path):
    """Write every mesh buffer to a compressed numpy archive."""
    path = Path(path)
    if path.suffix != ".npz":
        # numpy appends the suffix itself
        path = path.with_name(path.name + ".npz")
    np.savez_compressed(
        path,
        positions=buffers.positions,
        normals=buffers.normals,
        colors=buffers.colors,
        triangle_indices=buffers.triangle_indices,
        line_indices=buffers.line_indices,
        interleaved=buffers.interleaved,
        stride=np.array(INTERLEAVED_STRIDE, dtype=np.uint32),
    )
    logger.info(f"Wrote {buffers.vertex_count} vertices, "
                f"{buffers.triangle_count} triangles to {path}")
    return path
