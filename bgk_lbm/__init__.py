"""
BGK lattice Boltzmann solvers for pressure-driven channel flow (D2Q9, D3Q15).
"""

from .field import Field, GHOST
from .lattice import VelocitySet, D2Q9, D3Q15, CS2
from .solver import BGKSolver, BGK2D9V, BGK3D15V

__all__ = [
    "Field", "GHOST",
    "VelocitySet", "D2Q9", "D3Q15", "CS2",
    "BGKSolver", "BGK2D9V", "BGK3D15V",
]

__version__ = "0.1.0"
