"""
Setup script for bgk_lbm package.
"""

from setuptools import setup, find_packages

setup(
    name="bgk_lbm",
    version="0.1.0",
    description="BGK lattice Boltzmann solvers for pressure-driven channel flow (D2Q9, D3Q15)",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.9",
    install_requires=[
        "numpy>=1.20",
        "numba>=0.56",
        "matplotlib>=3.5",
    ],
    extras_require={
        "dev": ["pytest>=7.0", "black", "flake8"],
    },
)
