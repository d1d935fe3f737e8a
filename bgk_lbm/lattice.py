"""
Lattice Velocity Sets

Defines the D2Q9 and D3Q15 velocity sets used by the BGK solvers.

Each set is a fixed table of discrete velocities C[a], quadrature weights
E[a] and the index of the geometrically opposite direction BACK[a]
(used by bounce-back walls).
"""
import numpy as np

# Lattice sound speed squared
CS2 = 1.0 / 3.0
CS4 = CS2 * CS2


# D2Q9 lattice velocities
#     6   2   5
#       \ | /
#     3 - 0 - 1
#       / | \
#     7   4   8

D2Q9_C = (
    (0, 0), (1, 0), (0, 1), (-1, 0), (0, -1),
    (1, 1), (-1, 1), (-1, -1), (1, -1),
)
D2Q9_W = (4/9, 1/9, 1/9, 1/9, 1/9, 1/36, 1/36, 1/36, 1/36)
D2Q9_OPPOSITE = (0, 3, 4, 1, 2, 7, 8, 5, 6)


# D3Q15 lattice velocities
# 0: rest, 1-6: nearest neighbours, 7-14: cube corners

D3Q15_C = (
    (0, 0, 0),
    (1, 0, 0), (0, 1, 0), (-1, 0, 0), (0, -1, 0), (0, 0, 1), (0, 0, -1),
    (1, 1, 1), (-1, 1, 1), (-1, -1, 1), (1, -1, 1),
    (1, 1, -1), (-1, 1, -1), (-1, -1, -1), (1, -1, -1),
)
D3Q15_W = (
    2/9,
    1/9, 1/9, 1/9, 1/9, 1/9, 1/9,
    1/72, 1/72, 1/72, 1/72, 1/72, 1/72, 1/72, 1/72,
)
D3Q15_OPPOSITE = (0, 3, 4, 1, 2, 6, 5, 13, 14, 11, 12, 9, 10, 7, 8)


class VelocitySet:
    """
    Immutable discrete velocity set.

    Parameters
    ----------
    name : str
        Conventional DdQq name
    c : sequence of tuples
        Integer lattice velocities, shape (Q, D)
    w : sequence of float
        Quadrature weights, shape (Q,)
    opposite : sequence of int
        Index of the opposite direction, shape (Q,)

    Attributes
    ----------
    c : ndarray
        Integer velocities, shape (Q, D)
    cf : ndarray
        Same velocities as float64, for kernels doing arithmetic with them
    w : ndarray
        Weights, shape (Q,)
    opposite : ndarray
        Opposite direction indices, shape (Q,)
    """

    def __init__(self, name, c, w, opposite):
        self.name = name
        self.c = np.array(c, dtype=np.int64)
        self.cf = self.c.astype(np.float64)
        self.w = np.array(w, dtype=np.float64)
        self.opposite = np.array(opposite, dtype=np.int64)
        self.q, self.dim = self.c.shape

        for arr in (self.c, self.cf, self.w, self.opposite):
            arr.setflags(write=False)

    def __repr__(self):
        return f"VelocitySet({self.name!r}, q={self.q}, dim={self.dim})"

    def aligned(self, axis, sign):
        """Directions whose velocity component along `axis` equals `sign`."""
        return np.flatnonzero(self.c[:, axis] == sign)

    def transverse(self, axis):
        """Directions with no component along `axis` (including rest)."""
        return self.aligned(axis, 0)

    def axis_direction(self, axis, sign=1):
        """Index of the nearest-neighbour direction along +/- `axis`."""
        target = np.zeros(self.dim, dtype=np.int64)
        target[axis] = sign
        return int(np.flatnonzero(np.all(self.c == target, axis=1))[0])

    def weight_shares(self, directions, axis):
        """
        Weight of each direction relative to the axis-aligned one.

        The axis-aligned direction gets 1; diagonals get their weight ratio
        (1/4 for D2Q9, 1/8 for D3Q15).
        """
        reference = self.w[self.axis_direction(axis)]
        return self.w[directions] / reference


D2Q9 = VelocitySet("D2Q9", D2Q9_C, D2Q9_W, D2Q9_OPPOSITE)
D3Q15 = VelocitySet("D3Q15", D3Q15_C, D3Q15_W, D3Q15_OPPOSITE)
