"""
Benchmark Suite

Performance comparison of the NumPy reference path and the Numba parallel
path of the BGK solvers, in Million Lattice Updates Per Second (MLUPS).
"""

import time
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from bgk_lbm.solver import BGK2D9V, BGK3D15V


def benchmark_solver(shape, tau, num_steps, use_fast=True, warmup_steps=10):
    """
    Benchmark one solver configuration.

    Parameters
    ----------
    shape : tuple of int
        (nx, ny) for D2Q9 or (nx, ny, nz) for D3Q15
    tau : float
        Relaxation time
    num_steps : int
        Number of timed steps (after warmup)
    use_fast : bool
        Numba path if True, NumPy path otherwise
    warmup_steps : int
        Untimed steps (JIT compilation)

    Returns
    -------
    mlups : float
        Million Lattice Updates Per Second
    """
    if len(shape) == 2:
        solver = BGK2D9V(*shape, tau, use_fast=use_fast)
    else:
        solver = BGK3D15V(*shape, tau, use_fast=use_fast)

    # Warmup
    solver.evolution(warmup_steps)

    # Timed run
    start = time.perf_counter()
    solver.evolution(num_steps)
    elapsed = time.perf_counter() - start

    return num_steps * solver.num_sites / elapsed / 1e6


def run_full_benchmark(grid_sizes=None, tau=1.3, num_steps=200):
    """
    Run the benchmark over a list of grid sizes for both execution paths.

    Returns
    -------
    results : dict
        {'numpy': {shape: mlups}, 'numba': {shape: mlups}}
    """
    if grid_sizes is None:
        grid_sizes = [
            (64, 64),
            (128, 128),
            (256, 256),
            (512, 512),
            (32, 32, 32),
            (64, 64, 64),
        ]

    print("=" * 60)
    print("BGK LBM Performance Benchmark")
    print("=" * 60)
    print(f"Tau: {tau}")
    print(f"Steps: {num_steps}")
    print()

    results = {'numpy': {}, 'numba': {}}

    for label, use_fast in (('numpy', False), ('numba', True)):
        print(f"Benchmarking {label} path...")
        print("-" * 40)
        for shape in grid_sizes:
            mlups = benchmark_solver(shape, tau, num_steps, use_fast=use_fast)
            results[label][shape] = mlups
            grid = "x".join(str(n) for n in shape)
            print(f"  {grid:>12}: {mlups:8.2f} MLUPS")
        print()

    # Summary Table
    print("=" * 60)
    print("SUMMARY: Performance Comparison (MLUPS)")
    print("=" * 60)
    print(f"{'Grid':<14} {'NumPy':>10} {'Numba':>10} {'Speedup':>10}")
    print("-" * 60)

    for shape in grid_sizes:
        ref = results['numpy'][shape]
        fast = results['numba'][shape]
        speedup = f"{fast / ref:.1f}x" if ref > 0 else "N/A"
        grid = "x".join(str(n) for n in shape)
        print(f"{grid:<14} {ref:>10.2f} {fast:>10.2f} {speedup:>10}")

    print("=" * 60)

    return results


def compute_memory_bandwidth(mlups, q=9, bytes_per_value=8):
    """
    Effective memory bandwidth in GB/s.

    Each site update reads and writes Q populations in both collision and
    streaming.
    """
    bytes_per_site = q * bytes_per_value * 4
    return mlups * bytes_per_site / 1000


if __name__ == "__main__":
    run_full_benchmark()
