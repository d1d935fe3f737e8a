"""
Snapshot Files

Text dumps of the macroscopic fields written by `BGKSolver.output`.

Columns are the integer site indices followed by the velocity components and
the density:

    2D:  x  y  u  v  rho
    3D:  x  y  z  u  v  w  rho

3D dumps separate x slabs with blank lines, which `read_snapshot` skips.
"""

import os

import numpy as np


def snapshot_path(out_dir, index):
    """Sequentially numbered snapshot file name, e.g. out/00000001.dat."""
    return os.path.join(out_dir, f"{index:08d}.dat")


def write_snapshot(solver, path):
    """Write the solver's current fields to `path`."""
    with open(path, "w") as fp:
        solver.output(fp)


def read_snapshot(path):
    """
    Load a snapshot file.

    Parameters
    ----------
    path : str
        File written by `write_snapshot`

    Returns
    -------
    data : ndarray
        One row per site, shape (num_sites, 5) in 2D or (num_sites, 7) in 3D
    """
    return np.loadtxt(path, ndmin=2)


def snapshot_to_fields(data, shape):
    """
    Rebuild density and velocity arrays from snapshot rows.

    Parameters
    ----------
    data : ndarray
        Rows from `read_snapshot`
    shape : tuple of int
        Lattice extents (nx, ny[, nz])

    Returns
    -------
    rho : ndarray
        Density, shape ([nz,] ny, nx)
    u : ndarray
        Velocity, shape (D, [nz,] ny, nx)
    """
    dim = len(shape)
    if data.shape[1] != 2 * dim + 1:
        raise ValueError(
            f"expected {2 * dim + 1} columns for a {dim}D snapshot, got {data.shape[1]}"
        )

    idx = tuple(data[:, k].astype(np.int64) for k in reversed(range(dim)))
    spatial = tuple(reversed(shape))

    rho = np.full(spatial, np.nan)
    u = np.full((dim,) + spatial, np.nan)
    rho[idx] = data[:, 2 * dim]
    for k in range(dim):
        u[(k,) + idx] = data[:, dim + k]

    return rho, u
