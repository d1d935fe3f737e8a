"""
Boundary Condition Handlers

Boundary rules applied after streaming, before macroscopic recovery:
- Periodic inlet/outlet with an imposed pressure (density) difference
- Bounce-back (no-slip flat walls)

Both rules overwrite populations of the current buffer on one boundary
plane, using post-collision values of the same step as their source.
Rules are applied in a fixed order; where two rules address the same site
(channel corners) the later rule wins.
"""

import numpy as np
from .lattice import CS2

# Default density difference between inlet and outlet planes
DEFAULT_PRESSURE_DROP = 0.01

# Wall sides
LOWER = "lower"
UPPER = "upper"


def pressure_correction(f_post, lattice, dp, axis=0):
    """
    Correction term of the pressure-driven periodic rule.

        c = dp - c_s^2 * sum_{a: c_a.axis == 0} (f_post(a, inlet) - f_post(a, outlet))

    Parameters
    ----------
    f_post : Field
        Post-collision populations
    lattice : VelocitySet
        Velocity set
    dp : float
        Imposed density difference between inlet and outlet
    axis : int
        Flow axis (0 = x)

    Returns
    -------
    c : ndarray
        Correction per transverse site, shape of one boundary plane
    """
    n = f_post.shape[axis]
    inlet = f_post.plane(axis, 0)
    outlet = f_post.plane(axis, n - 1)
    t = lattice.transverse(axis)

    return dp - CS2 * np.sum(inlet[t] - outlet[t], axis=0)


def apply_pressure_periodic(f, f_post, lattice, dp=DEFAULT_PRESSURE_DROP, axis=0):
    """
    Periodic boundary along `axis` with an imposed pressure difference.

    Populations entering the inlet plane (index 0) are the post-collision
    values leaving the outlet plane (index n-1) plus a share of the
    correction c; populations entering the outlet are the inlet values
    minus the same share. The axis-aligned direction gets the full
    correction and diagonals a share proportional to their weight.

    Parameters
    ----------
    f : Field
        Current populations, modified in place
    f_post : Field
        Post-collision populations
    lattice : VelocitySet
        Velocity set
    dp : float
        Imposed density difference
    axis : int
        Flow axis (0 = x)
    """
    n = f.shape[axis]
    corr = pressure_correction(f_post, lattice, dp, axis)

    f_in = f.plane(axis, 0)
    f_out = f.plane(axis, n - 1)
    post_in = f_post.plane(axis, 0)
    post_out = f_post.plane(axis, n - 1)

    incoming = lattice.aligned(axis, 1)
    for a, share in zip(incoming, lattice.weight_shares(incoming, axis)):
        f_in[a] = post_out[a] + share * corr

    outgoing = lattice.aligned(axis, -1)
    for a, share in zip(outgoing, lattice.weight_shares(outgoing, axis)):
        f_out[a] = post_in[a] - share * corr


def wall_directions(lattice, axis, side):
    """
    Directions whose populations at a wall plane must be supplied by the wall.

    At the upper wall these are the directions moving down the axis
    (c_a.axis == -1), at the lower wall the ones moving up (+1).
    """
    sign = -1 if side == UPPER else 1
    return lattice.aligned(axis, sign)


def apply_bounce_back_wall(f, f_post, lattice, axis, side):
    """
    Apply bounce-back on a flat wall plane (no-slip).

    Every population the wall must supply is replaced by the post-collision
    value of its opposite direction at the same site:

        f_a(x_wall) = f_post_{a*}(x_wall)

    where a* is the opposite direction of a.

    Parameters
    ----------
    f : Field
        Current populations, modified in place
    f_post : Field
        Post-collision populations
    lattice : VelocitySet
        Velocity set
    axis : int
        Axis normal to the wall (1 = y, 2 = z)
    side : str
        LOWER (index 0) or UPPER (index n-1)
    """
    if side not in (LOWER, UPPER):
        raise ValueError(f"side must be {LOWER!r} or {UPPER!r}, got {side!r}")

    index = 0 if side == LOWER else f.shape[axis] - 1
    wall = f.plane(axis, index)
    post = f_post.plane(axis, index)

    directions = wall_directions(lattice, axis, side)
    wall[directions] = post[lattice.opposite[directions]]


class BoundaryConditions:
    """
    Manager class for boundary conditions.

    Holds an ordered list of rules and applies them in insertion order.
    """

    def __init__(self, lattice):
        self.lattice = lattice
        self.boundaries = []

    def add_pressure_periodic(self, dp=DEFAULT_PRESSURE_DROP, axis=0):
        """Add a pressure-driven periodic pair along `axis`."""
        self.boundaries.append(('pressure_periodic', dp, axis))

    def add_bounce_back(self, axis, side):
        """Add a bounce-back wall."""
        self.boundaries.append(('bounce_back', axis, side))

    def apply(self, f, f_post):
        """
        Apply all boundary conditions.

        Parameters
        ----------
        f : Field
            Current populations, modified in place
        f_post : Field
            Post-collision populations of the same step
        """
        for bc in self.boundaries:
            bc_type = bc[0]

            if bc_type == 'pressure_periodic':
                dp, axis = bc[1], bc[2]
                apply_pressure_periodic(f, f_post, self.lattice, dp, axis)

            elif bc_type == 'bounce_back':
                axis, side = bc[1], bc[2]
                apply_bounce_back_wall(f, f_post, self.lattice, axis, side)


def create_channel_boundaries(lattice, dp=DEFAULT_PRESSURE_DROP):
    """
    Boundaries of a pressure-driven channel along x.

    Periodic inlet/outlet along x first, then bounce-back walls on every
    other axis, upper wall before lower wall (y, then z in 3D).

    Parameters
    ----------
    lattice : VelocitySet
        Velocity set
    dp : float
        Density difference between inlet and outlet

    Returns
    -------
    bcs : BoundaryConditions
        Configured boundary manager
    """
    bcs = BoundaryConditions(lattice)
    bcs.add_pressure_periodic(dp, axis=0)
    for axis in range(1, lattice.dim):
        bcs.add_bounce_back(axis, UPPER)
        bcs.add_bounce_back(axis, LOWER)
    return bcs
