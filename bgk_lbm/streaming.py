"""
Streaming Step Implementations

Propagation of post-collision populations along the lattice velocities.

The streaming step moves each population from site x to site x + c_a:
    f_a(x + c_a, t + dt) = f_a^post(x, t)

This is the push (scatter) scheme. Sites on the domain edge push into the
one-cell ghost margin; those values are overwritten or discarded by the
boundary step.

Streaming always reads the post-collision buffer and writes the current
buffer. The two must never alias: several sources write into neighbouring
destinations within one pass, and an in-place update would overwrite values
that have not been propagated yet.
"""

from numba import njit, prange


def stream(f, f_post, lattice):
    """
    Streaming step between padded fields.

    For every direction, the interior of `f_post` is copied into the
    interior of `f` displaced by c_a (a NumPy slice assignment).

    Parameters
    ----------
    f : Field
        Current populations, written in place (ghost cells included)
    f_post : Field
        Post-collision populations, read only
    lattice : VelocitySet
        Velocity set
    """
    if f.data is f_post.data:
        raise ValueError("streaming needs distinct source and destination buffers")

    source = f_post.interior
    for a in range(lattice.q):
        f.shifted(lattice.c[a])[a] = source[a]


@njit(parallel=True, cache=True)
def stream_numba_2d(f, f_post, c):
    """
    Numba-accelerated push streaming on padded 2D buffers.

    Parameters
    ----------
    f : ndarray
        Output current populations, shape (Q, ny+2, nx+2)
    f_post : ndarray
        Input post-collision populations, same shape
    c : ndarray
        Integer lattice velocities, shape (Q, 2)
    """
    q = f.shape[0]
    ny = f.shape[1] - 2
    nx = f.shape[2] - 2

    for j in prange(1, ny + 1):
        for i in range(1, nx + 1):
            for k in range(q):
                f[k, j + c[k, 1], i + c[k, 0]] = f_post[k, j, i]


@njit(parallel=True, cache=True)
def stream_numba_3d(f, f_post, c):
    """
    Numba-accelerated push streaming on padded 3D buffers.

    Shapes are (Q, nz+2, ny+2, nx+2); c has shape (Q, 3).
    """
    q = f.shape[0]
    nz = f.shape[1] - 2
    ny = f.shape[2] - 2
    nx = f.shape[3] - 2

    for l in prange(1, nz + 1):
        for j in range(1, ny + 1):
            for i in range(1, nx + 1):
                for k in range(q):
                    f[k, l + c[k, 2], j + c[k, 1], i + c[k, 0]] = f_post[k, l, j, i]


def stream_fast(f, f_post, lattice):
    """
    Fast streaming using Numba.

    Parameters
    ----------
    f : Field
        Current populations, written in place
    f_post : Field
        Post-collision populations, read only
    lattice : VelocitySet
        Velocity set
    """
    if f.data is f_post.data:
        raise ValueError("streaming needs distinct source and destination buffers")

    kernel = stream_numba_2d if lattice.dim == 2 else stream_numba_3d
    kernel(f.data, f_post.data, lattice.c)
