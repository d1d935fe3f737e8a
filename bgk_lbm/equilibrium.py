"""
Equilibrium Distribution Functions

Second-order Maxwell-Boltzmann equilibrium for the D2Q9 and D3Q15 lattices.

    f_a^eq = E_a * rho * [1 + (c_a . u)/c_s^2 + (c_a . u)^2/(2*c_s^4) - u^2/(2*c_s^2)]

which, with c_s^2 = 1/3, is

    f_a^eq = E_a * rho * [1 + 3 (c_a . u) + 4.5 (c_a . u)^2 - 1.5 |u|^2]

where:
    - E_a are the lattice weights
    - c_a are the lattice velocities
    - rho is the density
    - u is the macroscopic velocity (2 or 3 components)

Field arrays use the Structure of Arrays layout: velocity has shape
(D, ...) and distributions (Q, ...), with the spatial axes ordered
[z,] y, x.
"""

import numpy as np
from numba import njit, prange
from .lattice import CS2, CS4


@njit(cache=True)
def feq_site(w_a, rho, cu, u_sq, cs2, cs4):
    """Equilibrium population of one direction at one site."""
    return w_a * rho * (
        1.0
        + cu / cs2
        + (cu * cu) / (2.0 * cs4)
        - u_sq / (2.0 * cs2)
    )


def compute_equilibrium(rho, u, lattice):
    """
    Compute equilibrium distribution for all lattice sites.

    Uses vectorized NumPy operations; works for any velocity set.

    Parameters
    ----------
    rho : ndarray
        Density field, spatial shape S
    u : ndarray
        Velocity field, shape (D,) + S
    lattice : VelocitySet
        Velocity set providing C and E

    Returns
    -------
    f_eq : ndarray
        Equilibrium distribution, shape (Q,) + S
    """
    rho = np.asarray(rho, dtype=np.float64)
    u = np.asarray(u, dtype=np.float64)

    # c_a . u for every direction, shape (Q,) + S
    cu = np.tensordot(lattice.cf, u, axes=1)
    u_sq = np.sum(u * u, axis=0)
    w = lattice.w.reshape((-1,) + (1,) * rho.ndim)

    return w * rho * (
        1.0
        + cu / CS2
        + (cu * cu) / (2.0 * CS4)
        - u_sq / (2.0 * CS2)
    )


@njit(parallel=True, cache=True)
def compute_equilibrium_numba_2d(rho, u, f_eq, c, w, cs2, cs4):
    """
    Numba-accelerated equilibrium computation on a 2D lattice.

    Parameters
    ----------
    rho : ndarray
        Density field, shape (ny, nx)
    u : ndarray
        Velocity field, shape (2, ny, nx)
    f_eq : ndarray
        Output equilibrium distribution, shape (Q, ny, nx)
    c : ndarray
        Lattice velocities as float64, shape (Q, 2)
    w : ndarray
        Lattice weights
    cs2, cs4 : float
        Sound speed squared and fourth power
    """
    q, ny, nx = f_eq.shape

    for j in prange(ny):
        for i in range(nx):
            ux = u[0, j, i]
            uy = u[1, j, i]
            u_sq = ux * ux + uy * uy
            for k in range(q):
                cu = c[k, 0] * ux + c[k, 1] * uy
                f_eq[k, j, i] = feq_site(w[k], rho[j, i], cu, u_sq, cs2, cs4)


@njit(parallel=True, cache=True)
def compute_equilibrium_numba_3d(rho, u, f_eq, c, w, cs2, cs4):
    """
    Numba-accelerated equilibrium computation on a 3D lattice.

    Same as the 2D kernel with shapes (nz, ny, nx) and a third velocity
    component.
    """
    q, nz, ny, nx = f_eq.shape

    for l in prange(nz):
        for j in range(ny):
            for i in range(nx):
                ux = u[0, l, j, i]
                uy = u[1, l, j, i]
                uz = u[2, l, j, i]
                u_sq = ux * ux + uy * uy + uz * uz
                for k in range(q):
                    cu = c[k, 0] * ux + c[k, 1] * uy + c[k, 2] * uz
                    f_eq[k, l, j, i] = feq_site(
                        w[k], rho[l, j, i], cu, u_sq, cs2, cs4
                    )


def compute_equilibrium_fast(rho, u, lattice):
    """
    Fast equilibrium computation using Numba.

    Parameters
    ----------
    rho : ndarray
        Density field, spatial shape S
    u : ndarray
        Velocity field, shape (D,) + S
    lattice : VelocitySet
        Velocity set

    Returns
    -------
    f_eq : ndarray
        Equilibrium distribution, shape (Q,) + S
    """
    rho = np.ascontiguousarray(rho, dtype=np.float64)
    u = np.ascontiguousarray(u, dtype=np.float64)
    f_eq = np.zeros((lattice.q,) + rho.shape, dtype=np.float64)

    if lattice.dim == 2:
        compute_equilibrium_numba_2d(rho, u, f_eq, lattice.cf, lattice.w, CS2, CS4)
    else:
        compute_equilibrium_numba_3d(rho, u, f_eq, lattice.cf, lattice.w, CS2, CS4)

    return f_eq


def equilibrium_single_site(rho, u, lattice):
    """
    Compute equilibrium distribution for a single lattice site.

    Useful for boundary conditions and testing.

    Parameters
    ----------
    rho : float
        Density at the site
    u : sequence of float
        Velocity at the site, length D
    lattice : VelocitySet
        Velocity set

    Returns
    -------
    f_eq : ndarray
        Equilibrium distribution, shape (Q,)
    """
    u = np.asarray(u, dtype=np.float64)
    u_sq = float(np.dot(u, u))
    f_eq = np.zeros(lattice.q, dtype=np.float64)

    for a in range(lattice.q):
        cu = float(np.dot(lattice.cf[a], u))
        f_eq[a] = lattice.w[a] * rho * (
            1.0
            + cu / CS2
            + (cu * cu) / (2.0 * CS4)
            - u_sq / (2.0 * CS2)
        )

    return f_eq
