"""
BGK Lattice Boltzmann Solvers

Pressure-driven channel flow with the BGK collision model on the D2Q9 and
D3Q15 lattices.

The flow is periodic along x with a fixed density difference between the
inlet (x=0) and outlet (x=nx-1) planes; every other axis is bounded by flat
bounce-back walls. Each step runs

    collision -> streaming -> boundary -> macroscopic recovery

with a full barrier between phases. Collision writes the post-collision
buffer from the current one, streaming writes the current buffer from the
post-collision one.
"""

import time

import numpy as np

from .field import Field
from .lattice import D2Q9, D3Q15
from .equilibrium import compute_equilibrium
from .collision import (
    validate_tau, viscosity_from_tau,
    bgk_collision, bgk_collision_fast,
)
from .streaming import stream, stream_fast
from .boundary import create_channel_boundaries, DEFAULT_PRESSURE_DROP
from .observables import (
    compute_macroscopic, compute_macroscopic_fast, check_divergence,
    compute_velocity_magnitude, compute_kinetic_energy, compute_pressure,
)


class BGKSolver:
    """
    Lattice-independent BGK channel solver.

    Concrete solvers fix the velocity set through the `lattice` class
    attribute (see BGK2D9V and BGK3D15V).

    Parameters
    ----------
    shape : tuple of int
        Lattice extents (nx, ny[, nz]); length must match the lattice
    tau : float
        Relaxation time (> 0; > 0.5 for a stable run)
    dp : float
        Density difference imposed between inlet and outlet
    use_fast : bool
        Use Numba-accelerated kernels (default True)

    Attributes
    ----------
    f : Field
        Current populations, one component per direction
    f_post : Field
        Post-collision populations (scratch between collision and streaming)
    rho : Field
        Density
    u : Field
        Velocity, one component per axis
    omega : float
        Relaxation frequency 1/tau
    step_count : int
        Number of completed steps
    """

    lattice = None

    def __init__(self, shape, tau, dp=DEFAULT_PRESSURE_DROP, use_fast=True):
        shape = tuple(int(n) for n in shape)
        if len(shape) != self.lattice.dim:
            raise ValueError(
                f"{self.lattice.name} needs {self.lattice.dim} extents, got {shape}"
            )

        self.tau = validate_tau(tau)
        self.omega = 1.0 / self.tau
        self.dp = float(dp)
        self.use_fast = use_fast
        self.shape = shape

        # Fields
        self.rho = Field(shape)
        self.u = Field(shape, components=self.lattice.dim)
        self.f = Field(shape, components=self.lattice.q)
        self.f_post = Field(shape, components=self.lattice.q)

        self.boundaries = create_channel_boundaries(self.lattice, self.dp)

        # Statistics
        self.step_count = 0
        self.total_time = 0.0

        self.initial()

    @property
    def viscosity(self):
        """Kinematic viscosity in lattice units."""
        return viscosity_from_tau(self.tau)

    @property
    def num_sites(self):
        return int(np.prod(self.shape))

    @property
    def density(self):
        """Density on the interior, shape ([nz,] ny, nx)."""
        return self.rho.interior

    @property
    def velocity(self):
        """Velocity on the interior, shape (D, [nz,] ny, nx)."""
        return self.u.interior

    @property
    def ux(self):
        return self.u.interior[0]

    @property
    def uy(self):
        return self.u.interior[1]

    def initial(self):
        """
        Initial condition.

        Every population is 1/Q so the density is 1 everywhere, then the
        macroscopic fields are recovered from the populations.
        """
        self.f.fill(0.0)
        self.f_post.fill(0.0)
        self.f.interior[...] = 1.0 / self.lattice.q
        self.macros()

        self.step_count = 0
        self.total_time = 0.0

    def collision(self):
        """BGK relaxation of every interior site into the post-collision buffer."""
        if self.use_fast:
            bgk_collision_fast(self.f, self.f_post, self.rho, self.u, self.lattice, self.tau)
        else:
            f_eq = compute_equilibrium(self.rho.interior, self.u.interior, self.lattice)
            self.f_post.interior[...] = bgk_collision(self.f.interior, f_eq, self.tau)

    def streaming(self):
        """Push post-collision populations one site along their velocity."""
        if self.use_fast:
            stream_fast(self.f, self.f_post, self.lattice)
        else:
            stream(self.f, self.f_post, self.lattice)

    def boundary(self):
        """Periodic pressure rule, then bounce-back walls."""
        self.boundaries.apply(self.f, self.f_post)

    def macros(self):
        """Recover density and velocity from the current populations."""
        if self.use_fast:
            compute_macroscopic_fast(self.f, self.rho, self.u, self.lattice)
        else:
            rho, u = compute_macroscopic(self.f.interior, self.lattice)
            self.rho.interior[...] = rho
            self.u.interior[...] = u

    def step(self):
        """
        Perform one complete timestep.

        Returns
        -------
        dt : float
            Time taken for this step (seconds)
        """
        start = time.perf_counter()

        self.collision()
        self.streaming()
        self.boundary()
        self.macros()

        dt = time.perf_counter() - start
        self.step_count += 1
        self.total_time += dt

        return dt

    def evolution(self, n):
        """
        Advance exactly `n` steps.

        Parameters
        ----------
        n : int
            Number of steps (>= 0; 0 is a no-op)
        """
        if not isinstance(n, (int, np.integer)):
            raise ValueError(f"step count must be an integer, got {n!r}")
        n = int(n)
        if n < 0:
            raise ValueError(f"step count must be non-negative, got {n}")

        for _ in range(n):
            self.step()

    def run(self, num_steps, verbose=True, report_interval=100):
        """
        Run simulation for specified number of steps.

        Stops early if the fields diverge.

        Parameters
        ----------
        num_steps : int
            Number of timesteps to run
        verbose : bool
            Print progress information
        report_interval : int
            Steps between progress reports and divergence checks

        Returns
        -------
        mlups : float
            Performance in Million Lattice Updates Per Second
        """
        start = time.perf_counter()
        done = 0

        for step in range(num_steps):
            self.step()
            done += 1

            if (step + 1) % report_interval == 0:
                if self.is_diverged():
                    if verbose:
                        print(f"Step {self.step_count}: divergence detected! Stopping.")
                    break

                if verbose:
                    elapsed = time.perf_counter() - start
                    mlups = done * self.num_sites / elapsed / 1e6
                    print(f"Step {step + 1}/{num_steps}, "
                          f"max(ux) = {np.max(self.ux):.6f}, MLUPS: {mlups:.2f}")

        total = time.perf_counter() - start
        mlups = done * self.num_sites / total / 1e6 if total > 0 else 0.0

        if verbose:
            print(f"Completed {done} steps in {total:.2f}s")
            print(f"Performance: {mlups:.2f} MLUPS")

        return mlups

    def output(self, fp):
        """Write the macroscopic fields to the text stream `fp`."""
        raise NotImplementedError

    def is_diverged(self):
        """True if density or velocity went non-finite or non-positive."""
        return check_divergence(self.rho.interior, self.u.interior)

    def get_total_mass(self):
        """Return total mass held by the interior populations."""
        return float(np.sum(self.f.interior))

    def get_total_momentum(self):
        """Return total momentum, one value per axis."""
        f = self.f.interior
        return tuple(
            float(np.sum(np.tensordot(self.lattice.cf[:, k], f, axes=1)))
            for k in range(self.lattice.dim)
        )

    def get_velocity_magnitude(self):
        """Return velocity magnitude field."""
        return compute_velocity_magnitude(self.u.interior)

    def get_kinetic_energy(self):
        """Return total kinetic energy."""
        return compute_kinetic_energy(self.rho.interior, self.u.interior)

    def get_mean_pressure(self):
        """Return mean pressure rho * c_s^2 over the interior."""
        return float(np.mean(compute_pressure(self.rho.interior)))


class BGK2D9V(BGKSolver):
    """
    BGK solver on the D2Q9 lattice.

    Channel along x, walls at y=0 and y=ny-1.

    Parameters
    ----------
    nx, ny : int
        Lattice extents
    tau : float
        Relaxation time
    dp : float
        Density difference between inlet and outlet
    use_fast : bool
        Use Numba-accelerated kernels
    """

    lattice = D2Q9

    def __init__(self, nx, ny, tau, dp=DEFAULT_PRESSURE_DROP, use_fast=True):
        super().__init__((nx, ny), tau, dp=dp, use_fast=use_fast)

    @property
    def nx(self):
        return self.shape[0]

    @property
    def ny(self):
        return self.shape[1]

    def output(self, fp):
        """
        Write one line per site: x y u v rho (tab separated).

        x is the outer loop, y the inner one.
        """
        rho = self.rho.interior
        u = self.u.interior

        for x in range(self.nx):
            for y in range(self.ny):
                fp.write(f"{x}\t{y}\t{u[0, y, x]:e}\t{u[1, y, x]:e}\t{rho[y, x]:e}\n")


class BGK3D15V(BGKSolver):
    """
    BGK solver on the D3Q15 lattice.

    Square duct along x, walls at y=0, y=ny-1, z=0 and z=nz-1.
    """

    lattice = D3Q15

    def __init__(self, nx, ny, nz, tau, dp=DEFAULT_PRESSURE_DROP, use_fast=True):
        super().__init__((nx, ny, nz), tau, dp=dp, use_fast=use_fast)

    @property
    def nx(self):
        return self.shape[0]

    @property
    def ny(self):
        return self.shape[1]

    @property
    def nz(self):
        return self.shape[2]

    @property
    def uz(self):
        return self.u.interior[2]

    def output(self, fp):
        """
        Write one line per site: x y z u v w rho (tab separated).

        Loops run x, y, z from outer to inner; every x slab is followed by
        two newlines so plotting tools see separate data blocks.
        """
        rho = self.rho.interior
        u = self.u.interior

        for x in range(self.nx):
            for y in range(self.ny):
                for z in range(self.nz):
                    fp.write(
                        f"{x}\t{y}\t{z}\t"
                        f"{u[0, z, y, x]:e}\t{u[1, z, y, x]:e}\t{u[2, z, y, x]:e}\t"
                        f"{rho[z, y, x]:e}\n"
                    )
            fp.write("\n\n")
