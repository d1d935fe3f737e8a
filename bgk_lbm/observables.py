"""
Macroscopic Observable Extraction

Compute density, velocity, and derived quantities from distributions.

In LBM, macroscopic quantities are moments of the distribution function:
    - Density (0th moment): rho = sum_a(f_a)
    - Momentum (1st moment): rho*u = sum_a(f_a * c_a)

Density is never clamped: a vanishing or negative density means the run
has diverged, and the resulting inf/nan values are left visible.
"""

import numpy as np
from numba import njit, prange
from .lattice import CS2


def compute_density(f):
    """
    Compute density field from distribution functions.

    rho = sum_a(f_a)

    Parameters
    ----------
    f : ndarray
        Distribution functions, shape (Q,) + S

    Returns
    -------
    rho : ndarray
        Density field, shape S
    """
    return np.sum(f, axis=0)


def compute_momentum(f, lattice):
    """
    Compute momentum density from distribution functions.

    Returns
    -------
    mom : ndarray
        rho * u, shape (D,) + S
    """
    return np.tensordot(lattice.cf.T, f, axes=1)


def compute_velocity(f, lattice, rho=None):
    """
    Compute velocity field from distribution functions.

    rho * u = sum_a(f_a * c_a)

    Parameters
    ----------
    f : ndarray
        Distribution functions, shape (Q,) + S
    lattice : VelocitySet
        Velocity set
    rho : ndarray, optional
        Density field, shape S. If None, computed from f.

    Returns
    -------
    u : ndarray
        Velocity field, shape (D,) + S
    """
    if rho is None:
        rho = compute_density(f)

    with np.errstate(divide='ignore', invalid='ignore'):
        return compute_momentum(f, lattice) / rho


def compute_macroscopic(f, lattice):
    """
    Compute all macroscopic quantities from distribution functions.

    Parameters
    ----------
    f : ndarray
        Distribution functions, shape (Q,) + S
    lattice : VelocitySet
        Velocity set

    Returns
    -------
    rho : ndarray
        Density field, shape S
    u : ndarray
        Velocity field, shape (D,) + S
    """
    rho = compute_density(f)
    u = compute_velocity(f, lattice, rho)
    return rho, u


@njit(parallel=True, cache=True, error_model="numpy")
def compute_macroscopic_numba_2d(f, rho, u, c):
    """
    Numba-accelerated moment recovery on padded 2D buffers.

    Parameters
    ----------
    f : ndarray
        Populations, shape (Q, ny+2, nx+2)
    rho : ndarray
        Output density, shape (ny+2, nx+2)
    u : ndarray
        Output velocity, shape (2, ny+2, nx+2)
    c : ndarray
        Lattice velocities as float64, shape (Q, 2)
    """
    q = f.shape[0]
    ny = f.shape[1] - 2
    nx = f.shape[2] - 2

    for j in prange(1, ny + 1):
        for i in range(1, nx + 1):
            rho_local = 0.0
            rho_ux = 0.0
            rho_uy = 0.0

            for k in range(q):
                f_k = f[k, j, i]
                rho_local += f_k
                rho_ux += f_k * c[k, 0]
                rho_uy += f_k * c[k, 1]

            rho[j, i] = rho_local
            u[0, j, i] = rho_ux / rho_local
            u[1, j, i] = rho_uy / rho_local


@njit(parallel=True, cache=True, error_model="numpy")
def compute_macroscopic_numba_3d(f, rho, u, c):
    """
    Numba-accelerated moment recovery on padded 3D buffers.
    """
    q = f.shape[0]
    nz = f.shape[1] - 2
    ny = f.shape[2] - 2
    nx = f.shape[3] - 2

    for l in prange(1, nz + 1):
        for j in range(1, ny + 1):
            for i in range(1, nx + 1):
                rho_local = 0.0
                rho_ux = 0.0
                rho_uy = 0.0
                rho_uz = 0.0

                for k in range(q):
                    f_k = f[k, l, j, i]
                    rho_local += f_k
                    rho_ux += f_k * c[k, 0]
                    rho_uy += f_k * c[k, 1]
                    rho_uz += f_k * c[k, 2]

                rho[l, j, i] = rho_local
                u[0, l, j, i] = rho_ux / rho_local
                u[1, l, j, i] = rho_uy / rho_local
                u[2, l, j, i] = rho_uz / rho_local


def compute_macroscopic_fast(f, rho, u, lattice):
    """
    Fast moment recovery using Numba, between padded fields.

    Parameters
    ----------
    f : Field
        Populations (components = Q)
    rho : Field
        Density, written in place
    u : Field
        Velocity (components = D), written in place
    lattice : VelocitySet
        Velocity set
    """
    kernel = compute_macroscopic_numba_2d if lattice.dim == 2 else compute_macroscopic_numba_3d
    kernel(f.data, rho.data, u.data, lattice.cf)


def check_divergence(rho, u):
    """
    Detect numerical divergence.

    Parameters
    ----------
    rho : ndarray
        Density field
    u : ndarray
        Velocity field

    Returns
    -------
    diverged : bool
        True if any density is non-finite or non-positive, or any
        velocity component is non-finite.
    """
    rho = np.asarray(rho)
    u = np.asarray(u)
    if not np.all(np.isfinite(rho)):
        return True
    if np.any(rho <= 0.0):
        return True
    return not np.all(np.isfinite(u))


def compute_pressure(rho, cs2=CS2):
    """
    Compute pressure field from density.

    p = rho * c_s^2
    """
    return rho * cs2


def compute_velocity_magnitude(u):
    """
    Compute velocity magnitude field.

    |u| = sqrt(sum_k u_k^2)

    Parameters
    ----------
    u : ndarray
        Velocity field, shape (D,) + S

    Returns
    -------
    velocity_mag : ndarray
        Velocity magnitude, shape S
    """
    return np.sqrt(np.sum(u * u, axis=0))


def compute_kinetic_energy(rho, u):
    """Total kinetic energy 0.5 * sum(rho |u|^2)."""
    return 0.5 * np.sum(rho * np.sum(u * u, axis=0))
