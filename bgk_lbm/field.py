"""
Padded Grid Storage

A scalar (or multi-component) field over an nx x ny (x nz) lattice with a
one-cell ghost margin on every face.

Storage is a contiguous NumPy array with x as the fastest-varying axis:

    data.shape == (ny + 2, nx + 2)            # 2D
    data.shape == (nz + 2, ny + 2, nx + 2)    # 3D

with an optional leading component axis (e.g. one slice per lattice
direction). Site (x, y, z) lives at flat offset

    (x + 1) + (y + 1) * (nx + 2) + (z + 1) * (nx + 2) * (ny + 2)

so every coordinate in [-1, n] along each axis is addressable without
branching. Ghost cells receive transient values during streaming and are
never read as physical data.
"""

import numpy as np

# Width of the ghost margin on every face
GHOST = 1


class Field:
    """
    Padded lattice field.

    Parameters
    ----------
    shape : tuple of int
        Lattice extents (nx, ny) or (nx, ny, nz)
    components : int, optional
        Number of stacked values per site. None for a plain scalar field.
    dtype : numpy dtype
        Element type (default float64)

    Attributes
    ----------
    data : ndarray
        Padded storage, shape ([components,] [nz+2,] ny+2, nx+2)
    """

    def __init__(self, shape, components=None, dtype=np.float64):
        shape = tuple(int(n) for n in shape)
        if len(shape) not in (2, 3):
            raise ValueError(f"Field must be 2D or 3D, got shape {shape}")
        if any(n < 1 for n in shape):
            raise ValueError(f"Lattice extents must be positive, got {shape}")

        self.shape = shape
        self.ndim = len(shape)
        self.components = components

        padded = tuple(n + 2 * GHOST for n in reversed(shape))
        lead = () if components is None else (int(components),)
        self.data = np.zeros(lead + padded, dtype=dtype)

        # Element strides of x, y, z inside one padded slab
        strides = []
        step = 1
        for n in shape:
            strides.append(step)
            step *= n + 2 * GHOST
        self._site_strides = tuple(strides)
        self._flat = self.data.reshape(lead + (-1,))

    def __repr__(self):
        return f"Field(shape={self.shape}, components={self.components})"

    def offset(self, *coords):
        """Flat position of site `coords` inside one padded slab."""
        return sum((c + GHOST) * s for c, s in zip(coords, self._site_strides))

    def _split_key(self, key):
        if not isinstance(key, tuple):
            key = (key,)
        if self.components is None:
            lead, coords = (), key
        else:
            lead, coords = key[:1], key[1:]
        if len(coords) != self.ndim:
            raise IndexError(
                f"expected {self.ndim} coordinates, got {len(coords)}"
            )
        return lead + (self.offset(*coords),)

    def __getitem__(self, key):
        return self._flat[self._split_key(key)]

    def __setitem__(self, key, value):
        self._flat[self._split_key(key)] = value

    def _interior_slices(self):
        return [slice(GHOST, GHOST + n) for n in reversed(self.shape)]

    @property
    def interior(self):
        """View of the physical domain without the ghost margin."""
        return self.data[(Ellipsis,) + tuple(self._interior_slices())]

    def plane(self, axis, index):
        """
        View of the interior plane at coordinate `index` along `axis`.

        `axis` counts lattice axes (0 = x, 1 = y, 2 = z). `index` may be
        -1 or n to reach the ghost layer.
        """
        slices = self._interior_slices()
        slices[self.ndim - 1 - axis] = index + GHOST
        return self.data[(Ellipsis,) + tuple(slices)]

    def shifted(self, displacement):
        """
        View of the interior displaced by `displacement` = (dx, dy[, dz]).

        Each displacement component must lie in [-1, 1]; the view then
        covers the interior plus at most one layer of ghost cells.
        """
        slices = [
            slice(GHOST + d, GHOST + d + n)
            for n, d in zip(reversed(self.shape), reversed(tuple(displacement)))
        ]
        return self.data[(Ellipsis,) + tuple(slices)]

    def fill(self, value):
        """Set every element, ghost cells included."""
        self.data[...] = value
