"""
Tests for boundary conditions.

Covers the pressure-driven periodic inlet/outlet, bounce-back walls, and
the order in which the channel rules are applied.
"""

import pytest
import numpy as np
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from bgk_lbm.field import Field
from bgk_lbm.lattice import D2Q9, D3Q15
from bgk_lbm.boundary import (
    pressure_correction,
    apply_pressure_periodic,
    apply_bounce_back_wall,
    wall_directions,
    BoundaryConditions,
    create_channel_boundaries,
    LOWER, UPPER,
)


def random_pair(shape, q, seed=0):
    """Current and post-collision fields with distinct random values."""
    rng = np.random.default_rng(seed)
    f = Field(shape, components=q)
    f_post = Field(shape, components=q)
    f.data[...] = rng.random(f.data.shape)
    f_post.data[...] = rng.random(f_post.data.shape)
    return f, f_post


class TestPressureCorrection:

    def test_uniform_planes_give_dp(self):
        """Identical inlet and outlet populations leave c = dp."""
        f_post = Field((6, 4), components=9)
        f_post.fill(1.0 / 9.0)

        corr = pressure_correction(f_post, D2Q9, dp=0.01)

        np.testing.assert_allclose(corr, 0.01)
        assert corr.shape == (4,)

    def test_correction_formula_2d(self):
        _, f_post = random_pair((5, 3), 9, seed=1)
        dp = 0.02

        corr = pressure_correction(f_post, D2Q9, dp)

        for y in range(3):
            diff = sum(f_post[a, 0, y] - f_post[a, 4, y] for a in (0, 2, 4))
            assert np.isclose(corr[y], dp - diff / 3.0, rtol=1e-14)

    def test_correction_formula_3d(self):
        _, f_post = random_pair((4, 3, 2), 15, seed=2)
        dp = 0.01

        corr = pressure_correction(f_post, D3Q15, dp)

        # Plane arrays are ordered (z, y)
        for y in range(3):
            for z in range(2):
                diff = sum(f_post[a, 0, y, z] - f_post[a, 3, y, z] for a in (0, 2, 4, 5, 6))
                assert np.isclose(corr[z, y], dp - diff / 3.0, rtol=1e-14)


class TestPressurePeriodic:

    def test_inlet_and_outlet_2d(self):
        nx, ny = 5, 3
        dp = 0.01
        f, f_post = random_pair((nx, ny), 9, seed=3)
        before = f.data.copy()
        corr = pressure_correction(f_post, D2Q9, dp)

        apply_pressure_periodic(f, f_post, D2Q9, dp)

        for y in range(ny):
            c = corr[y]
            assert np.isclose(f[1, 0, y], f_post[1, nx - 1, y] + c)
            assert np.isclose(f[5, 0, y], f_post[5, nx - 1, y] + c / 4)
            assert np.isclose(f[8, 0, y], f_post[8, nx - 1, y] + c / 4)

            assert np.isclose(f[3, nx - 1, y], f_post[3, 0, y] - c)
            assert np.isclose(f[6, nx - 1, y], f_post[6, 0, y] - c / 4)
            assert np.isclose(f[7, nx - 1, y], f_post[7, 0, y] - c / 4)

        # Directions leaving through the plane are untouched
        for a in (0, 2, 3, 4, 6, 7):
            np.testing.assert_array_equal(f.plane(0, 0)[a], before[a, 1:-1, 1])
        # So is the bulk
        np.testing.assert_array_equal(f.data[:, :, 2:-2], before[:, :, 2:-2])

    def test_inlet_and_outlet_3d(self):
        nx, ny, nz = 4, 3, 3
        dp = 0.01
        f, f_post = random_pair((nx, ny, nz), 15, seed=4)
        corr = pressure_correction(f_post, D3Q15, dp)

        apply_pressure_periodic(f, f_post, D3Q15, dp)

        for y in range(ny):
            for z in range(nz):
                c = corr[z, y]
                assert np.isclose(f[1, 0, y, z], f_post[1, nx - 1, y, z] + c)
                for a in (7, 10, 11, 14):
                    assert np.isclose(f[a, 0, y, z], f_post[a, nx - 1, y, z] + c / 8)

                assert np.isclose(f[3, nx - 1, y, z], f_post[3, 0, y, z] - c)
                for a in (8, 9, 12, 13):
                    assert np.isclose(f[a, nx - 1, y, z], f_post[a, 0, y, z] - c / 8)

    def test_net_mass_injection_cancels(self):
        """What the inlet gains from c the outlet loses."""
        nx, ny = 6, 4
        f_post = Field((nx, ny), components=9)
        f_post.interior[...] = D2Q9.w.reshape(-1, 1, 1)
        f = Field((nx, ny), components=9)

        apply_pressure_periodic(f, f_post, D2Q9, dp=0.05)

        inlet_gain = np.sum(f.plane(0, 0)[[1, 5, 8]] - f_post.plane(0, nx - 1)[[1, 5, 8]])
        outlet_loss = np.sum(f_post.plane(0, 0)[[3, 6, 7]] - f.plane(0, nx - 1)[[3, 6, 7]])

        assert inlet_gain > 0
        assert np.isclose(inlet_gain, outlet_loss, rtol=1e-12)


class TestBounceBack:

    def test_wall_directions_d2q9(self):
        np.testing.assert_array_equal(wall_directions(D2Q9, 1, UPPER), [4, 7, 8])
        np.testing.assert_array_equal(wall_directions(D2Q9, 1, LOWER), [2, 5, 6])

    def test_wall_directions_d3q15(self):
        np.testing.assert_array_equal(wall_directions(D3Q15, 1, UPPER), [4, 9, 10, 13, 14])
        np.testing.assert_array_equal(wall_directions(D3Q15, 1, LOWER), [2, 7, 8, 11, 12])
        np.testing.assert_array_equal(wall_directions(D3Q15, 2, UPPER), [6, 11, 12, 13, 14])
        np.testing.assert_array_equal(wall_directions(D3Q15, 2, LOWER), [5, 7, 8, 9, 10])

    @pytest.mark.parametrize("side", [LOWER, UPPER])
    def test_reflects_opposite_2d(self, side):
        nx, ny = 4, 5
        f, f_post = random_pair((nx, ny), 9, seed=5)
        before = f.data.copy()
        y = 0 if side == LOWER else ny - 1

        apply_bounce_back_wall(f, f_post, D2Q9, 1, side)

        replaced = wall_directions(D2Q9, 1, side)
        for x in range(nx):
            for a in range(9):
                if a in replaced:
                    assert f[a, x, y] == f_post[D2Q9.opposite[a], x, y]
                else:
                    assert f[a, x, y] == before[a, y + 1, x + 1]

        # Only the wall row changes
        changed = np.argwhere(f.data != before)
        assert np.all(changed[:, 1] == y + 1)

    def test_reflects_opposite_3d_z_wall(self):
        nx, ny, nz = 3, 3, 4
        f, f_post = random_pair((nx, ny, nz), 15, seed=6)

        apply_bounce_back_wall(f, f_post, D3Q15, 2, UPPER)

        for x in range(nx):
            for y in range(ny):
                for a in (6, 11, 12, 13, 14):
                    assert f[a, x, y, nz - 1] == f_post[D3Q15.opposite[a], x, y, nz - 1]

    def test_invalid_side(self):
        f, f_post = random_pair((3, 3), 9)
        with pytest.raises(ValueError):
            apply_bounce_back_wall(f, f_post, D2Q9, 1, "middle")


class TestChannelBoundaries:

    def test_rule_order_2d(self):
        bcs = create_channel_boundaries(D2Q9, dp=0.02)
        assert bcs.boundaries == [
            ('pressure_periodic', 0.02, 0),
            ('bounce_back', 1, UPPER),
            ('bounce_back', 1, LOWER),
        ]

    def test_rule_order_3d(self):
        bcs = create_channel_boundaries(D3Q15)
        assert [bc[0] for bc in bcs.boundaries] == [
            'pressure_periodic', 'bounce_back', 'bounce_back', 'bounce_back', 'bounce_back',
        ]
        assert [bc[1:] for bc in bcs.boundaries[1:]] == [
            (1, UPPER), (1, LOWER), (2, UPPER), (2, LOWER),
        ]

    def test_wall_wins_at_corner(self):
        """At the inlet corner the wall rule overwrites the periodic rule."""
        nx, ny = 5, 4
        f, f_post = random_pair((nx, ny), 9, seed=7)

        create_channel_boundaries(D2Q9).apply(f, f_post)

        # (0, 0): direction 5 is set by both rules, the lower wall is last
        assert f[5, 0, 0] == f_post[7, 0, 0]
        # (0, ny-1): direction 8 is set by both rules, the upper wall is last
        assert f[8, 0, ny - 1] == f_post[6, 0, ny - 1]
        # Direction 1 is only touched by the periodic rule
        corr = pressure_correction(f_post, D2Q9, 0.01)
        assert np.isclose(f[1, 0, 0], f_post[1, nx - 1, 0] + corr[0])

    def test_manager_matches_direct_calls(self):
        f1, f_post = random_pair((4, 4, 3), 15, seed=8)
        f2 = Field(f1.shape, components=15)
        f2.data[...] = f1.data

        bcs = BoundaryConditions(D3Q15)
        bcs.add_pressure_periodic(0.03)
        bcs.add_bounce_back(2, LOWER)
        bcs.apply(f1, f_post)

        apply_pressure_periodic(f2, f_post, D3Q15, 0.03)
        apply_bounce_back_wall(f2, f_post, D3Q15, 2, LOWER)

        np.testing.assert_array_equal(f1.data, f2.data)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
