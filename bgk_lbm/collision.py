"""
Collision Operators

BGK single-relaxation-time collision for the padded population buffers.

The collision step drives the distribution toward local equilibrium with a
single time constant tau:

    f_post = (1 - 1/tau) * f + (1/tau) * f_eq

The relaxation time controls the viscosity:

    nu = c_s^2 * (tau - 0.5) * dt

where c_s^2 = 1/3 and dt = 1 in lattice units. Any tau > 0 is accepted,
but tau <= 0.5 gives a non-positive viscosity and the scheme diverges.
"""

import math
import warnings

import numpy as np
from numba import njit, prange
from .lattice import CS2, CS4
from .equilibrium import feq_site


def validate_tau(tau, name="tau"):
    """
    Validate a relaxation time.

    Parameters
    ----------
    tau : float
        Relaxation time to validate
    name : str
        Name for error messages

    Raises
    ------
    ValueError
        If tau is not a finite, strictly positive number

    Returns
    -------
    tau : float
        Validated tau value
    """
    tau = float(tau)
    if not math.isfinite(tau) or tau <= 0.0:
        raise ValueError(f"{name} must be a positive finite number, got {tau}")
    if tau <= 0.5:
        warnings.warn(
            f"{name} = {tau} gives a non-positive viscosity; "
            f"the simulation will not be stable (use tau > 0.5)."
        )
    elif tau > 2.0:
        warnings.warn(
            f"{name} = {tau} is large, which may cause slow convergence. "
            f"Consider tau in range (0.5, 2.0) for efficiency."
        )
    return tau


def tau_from_viscosity(nu, dt=1.0, cs2=CS2):
    """
    Compute relaxation time from kinematic viscosity.

    tau = nu / (c_s^2 * dt) + 0.5
    """
    return nu / (cs2 * dt) + 0.5


def viscosity_from_tau(tau, dt=1.0, cs2=CS2):
    """
    Compute kinematic viscosity from relaxation time.

    nu = c_s^2 * (tau - 0.5) * dt

    Raises
    ------
    ValueError
        If tau <= 0.5
    """
    if tau <= 0.5:
        raise ValueError(f"tau must be > 0.5 for a positive viscosity, got {tau}")
    return cs2 * (tau - 0.5) * dt


def bgk_collision(f, f_eq, tau):
    """
    BGK (Bhatnagar-Gross-Krook) collision operator.

    f_out = (1 - 1/tau) * f + (1/tau) * f_eq

    Parameters
    ----------
    f : ndarray
        Distribution functions, shape (Q,) + S
    f_eq : ndarray
        Equilibrium distribution, shape (Q,) + S
    tau : float
        Relaxation time (tau > 0)

    Returns
    -------
    f_out : ndarray
        Post-collision distribution
    """
    if tau <= 0.0:
        raise ValueError(f"tau must be positive, got {tau}")

    omega = 1.0 / tau
    return (1.0 - omega) * f + omega * f_eq


@njit(parallel=True, cache=True)
def bgk_collision_numba_2d(f, f_post, rho, u, c, w, omega, cs2, cs4):
    """
    Numba-accelerated BGK collision on padded 2D buffers.

    Reads the current populations and macroscopic fields at every interior
    site and writes the post-collision populations. Ghost cells are left
    untouched.

    Parameters
    ----------
    f : ndarray
        Current populations, shape (Q, ny+2, nx+2)
    f_post : ndarray
        Output post-collision populations, same shape
    rho : ndarray
        Density, shape (ny+2, nx+2)
    u : ndarray
        Velocity, shape (2, ny+2, nx+2)
    c : ndarray
        Lattice velocities as float64, shape (Q, 2)
    w : ndarray
        Lattice weights
    omega : float
        Relaxation frequency (1/tau)
    cs2, cs4 : float
        Sound speed constants
    """
    q = f.shape[0]
    ny = f.shape[1] - 2
    nx = f.shape[2] - 2

    for j in prange(1, ny + 1):
        for i in range(1, nx + 1):
            rho_ij = rho[j, i]
            ux = u[0, j, i]
            uy = u[1, j, i]
            u_sq = ux * ux + uy * uy

            for k in range(q):
                cu = c[k, 0] * ux + c[k, 1] * uy
                f_eq = feq_site(w[k], rho_ij, cu, u_sq, cs2, cs4)
                f_post[k, j, i] = (1.0 - omega) * f[k, j, i] + omega * f_eq


@njit(parallel=True, cache=True)
def bgk_collision_numba_3d(f, f_post, rho, u, c, w, omega, cs2, cs4):
    """
    Numba-accelerated BGK collision on padded 3D buffers.

    Shapes are (Q, nz+2, ny+2, nx+2) for populations, (nz+2, ny+2, nx+2)
    for density and (3, nz+2, ny+2, nx+2) for velocity.
    """
    q = f.shape[0]
    nz = f.shape[1] - 2
    ny = f.shape[2] - 2
    nx = f.shape[3] - 2

    for l in prange(1, nz + 1):
        for j in range(1, ny + 1):
            for i in range(1, nx + 1):
                rho_s = rho[l, j, i]
                ux = u[0, l, j, i]
                uy = u[1, l, j, i]
                uz = u[2, l, j, i]
                u_sq = ux * ux + uy * uy + uz * uz

                for k in range(q):
                    cu = c[k, 0] * ux + c[k, 1] * uy + c[k, 2] * uz
                    f_eq = feq_site(w[k], rho_s, cu, u_sq, cs2, cs4)
                    f_post[k, l, j, i] = (1.0 - omega) * f[k, l, j, i] + omega * f_eq


def bgk_collision_fast(f, f_post, rho, u, lattice, tau):
    """
    Numba-accelerated BGK collision between padded fields.

    Parameters
    ----------
    f : Field
        Current populations (components = Q)
    f_post : Field
        Post-collision populations, written in place
    rho : Field
        Density
    u : Field
        Velocity (components = D)
    lattice : VelocitySet
        Velocity set
    tau : float
        Relaxation time
    """
    if tau <= 0.0:
        raise ValueError(f"tau must be positive, got {tau}")

    omega = 1.0 / tau
    kernel = bgk_collision_numba_2d if lattice.dim == 2 else bgk_collision_numba_3d
    kernel(f.data, f_post.data, rho.data, u.data, lattice.cf, lattice.w, omega, CS2, CS4)
