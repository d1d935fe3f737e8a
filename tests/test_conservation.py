"""
Tests for conservation laws.

Validates that BGK collision preserves mass and momentum at every site and
that streaming only relabels populations. These are fundamental
requirements for any correct LBM implementation.
"""

import pytest
import numpy as np
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from bgk_lbm.field import Field
from bgk_lbm.lattice import D2Q9, D3Q15, CS2
from bgk_lbm.equilibrium import compute_equilibrium
from bgk_lbm.observables import (
    compute_density, compute_momentum, compute_macroscopic, compute_macroscopic_fast,
)
from bgk_lbm.collision import (
    bgk_collision, bgk_collision_fast,
    tau_from_viscosity, viscosity_from_tau, validate_tau,
)
from bgk_lbm.streaming import stream, stream_fast


SHAPES = {2: (7, 5), 3: (5, 4, 3)}


@pytest.fixture(params=[D2Q9, D3Q15], ids=lambda lat: lat.name)
def lattice(request):
    return request.param


def random_populations(lattice, seed=0):
    """Padded population field with positive random interior values."""
    rng = np.random.default_rng(seed)
    f = Field(SHAPES[lattice.dim], components=lattice.q)
    f.interior[...] = lattice.w.reshape((-1,) + (1,) * lattice.dim) * (
        1.0 + 0.2 * rng.random(f.interior.shape)
    )
    return f


class TestCollisionConservation:
    """BGK collision conserves the zeroth and first moments at every site."""

    @pytest.mark.parametrize("tau", [0.6, 1.0, 1.3, 1.9])
    def test_mass_and_momentum(self, lattice, tau):
        f = random_populations(lattice).interior

        rho, u = compute_macroscopic(f, lattice)
        f_eq = compute_equilibrium(rho, u, lattice)
        f_post = bgk_collision(f, f_eq, tau)

        np.testing.assert_allclose(compute_density(f_post), compute_density(f), rtol=1e-13)
        np.testing.assert_allclose(
            compute_momentum(f_post, lattice), compute_momentum(f, lattice),
            rtol=1e-11, atol=1e-14,
        )

    def test_equilibrium_is_fixed_point(self, lattice):
        """BGK collision should leave equilibrium unchanged."""
        shape = tuple(reversed(SHAPES[lattice.dim]))
        rho = np.ones(shape)
        u = np.zeros((lattice.dim,) + shape)
        u[0] = 0.05
        u[1] = -0.02

        f_eq = compute_equilibrium(rho, u, lattice)
        f_post = bgk_collision(f_eq, f_eq, 1.3)

        np.testing.assert_allclose(f_post, f_eq, rtol=1e-14)

    def test_tau_one_gives_equilibrium(self, lattice):
        """With tau = 1 the post-collision state is the local equilibrium."""
        f = random_populations(lattice).interior
        rho, u = compute_macroscopic(f, lattice)
        f_eq = compute_equilibrium(rho, u, lattice)

        np.testing.assert_allclose(bgk_collision(f, f_eq, 1.0), f_eq, rtol=1e-14)

    def test_fast_equals_standard(self, lattice):
        """Verify fused Numba collision matches the NumPy operator."""
        tau = 0.8
        f = random_populations(lattice, seed=3)
        rho = Field(f.shape)
        u = Field(f.shape, components=lattice.dim)
        compute_macroscopic_fast(f, rho, u, lattice)

        f_eq = compute_equilibrium(rho.interior, u.interior, lattice)
        expected = bgk_collision(f.interior, f_eq, tau)

        f_post = Field(f.shape, components=lattice.q)
        bgk_collision_fast(f, f_post, rho, u, lattice, tau)

        np.testing.assert_allclose(f_post.interior, expected, rtol=1e-13)
        # Ghost cells of the scratch buffer are never written
        assert np.sum(f_post.data) == pytest.approx(np.sum(f_post.interior))

    def test_non_positive_tau_rejected(self):
        f = np.ones((9, 2, 2))
        with pytest.raises(ValueError):
            bgk_collision(f, f, 0.0)


class TestStreaming:
    """Streaming is a pure shift of every direction."""

    @pytest.mark.parametrize("stream_func", [stream, stream_fast])
    def test_streaming_is_a_shift(self, lattice, stream_func):
        f_post = random_populations(lattice, seed=1)
        f = Field(f_post.shape, components=lattice.q)

        stream_func(f, f_post, lattice)

        for a in range(lattice.q):
            np.testing.assert_array_equal(
                f.shifted(lattice.c[a])[a], f_post.interior[a]
            )

    @pytest.mark.parametrize("stream_func", [stream, stream_fast])
    def test_no_mass_created_or_destroyed(self, lattice, stream_func):
        """Mass leaving the interior lands in the ghost margin."""
        f_post = random_populations(lattice, seed=2)
        f = Field(f_post.shape, components=lattice.q)

        stream_func(f, f_post, lattice)

        for a in range(lattice.q):
            assert np.isclose(np.sum(f.data[a]), np.sum(f_post.interior[a]), rtol=1e-14)

    def test_rest_population_stays(self, lattice):
        f_post = random_populations(lattice, seed=4)
        f = Field(f_post.shape, components=lattice.q)

        stream(f, f_post, lattice)

        np.testing.assert_array_equal(f.interior[0], f_post.interior[0])

    def test_single_site_displacement_2d(self):
        """A population at (2, 1) moving along (1, 1) arrives at (3, 2)."""
        f_post = Field((5, 4), components=9)
        f = Field((5, 4), components=9)
        f_post[5, 2, 1] = 1.0

        stream(f, f_post, D2Q9)

        assert f[5, 3, 2] == 1.0
        assert np.sum(f.data) == 1.0

    def test_edge_population_reaches_ghost_3d(self):
        """Streaming off the domain writes the ghost margin."""
        f_post = Field((3, 3, 3), components=15)
        f = Field((3, 3, 3), components=15)
        f_post[13, 0, 0, 0] = 2.0  # (-1, -1, -1)

        stream_fast(f, f_post, D3Q15)

        assert f[13, -1, -1, -1] == 2.0
        assert np.sum(f.interior) == 0.0

    def test_fast_equals_standard(self, lattice):
        f_post = random_populations(lattice, seed=5)
        f_std = Field(f_post.shape, components=lattice.q)
        f_fast = Field(f_post.shape, components=lattice.q)

        stream(f_std, f_post, lattice)
        stream_fast(f_fast, f_post, lattice)

        np.testing.assert_array_equal(f_fast.data, f_std.data)

    @pytest.mark.parametrize("stream_func", [stream, stream_fast])
    def test_aliased_buffers_rejected(self, stream_func):
        f = Field((3, 3), components=9)
        with pytest.raises(ValueError):
            stream_func(f, f, D2Q9)


class TestViscosityTauRelation:
    """Test viscosity-tau relationship."""

    def test_tau_from_viscosity(self):
        """Verify tau calculation from viscosity."""
        nu = 0.1
        tau = tau_from_viscosity(nu)

        # nu = cs2 * (tau - 0.5) => tau = nu/cs2 + 0.5
        assert np.isclose(tau, nu / CS2 + 0.5)

    def test_viscosity_from_tau(self):
        """Verify viscosity calculation from tau."""
        tau = 1.3
        assert np.isclose(viscosity_from_tau(tau), CS2 * (tau - 0.5))

    def test_roundtrip(self):
        """Verify tau -> nu -> tau roundtrip."""
        tau_original = 0.75
        nu = viscosity_from_tau(tau_original)
        assert np.isclose(tau_from_viscosity(nu), tau_original)

    def test_viscosity_requires_tau_above_half(self):
        with pytest.raises(ValueError):
            viscosity_from_tau(0.4)


class TestValidateTau:

    def test_valid_tau(self):
        assert validate_tau(1.3) == 1.3

    @pytest.mark.parametrize("tau", [0.0, -1.0, float("nan"), float("inf")])
    def test_invalid_tau(self, tau):
        with pytest.raises(ValueError):
            validate_tau(tau)

    def test_unstable_tau_warns(self):
        with pytest.warns(UserWarning):
            validate_tau(0.4)

    def test_large_tau_warns(self):
        with pytest.warns(UserWarning):
            validate_tau(3.0)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
