import random
import unittest

import numpy as np

from soroban.digit import SorobanDigit, BeadPositions, lerp
from soroban.geometry import compute_geometry

EPS = 1e-9


def decode(rod: SorobanDigit) -> int:
    """Read a settled rod with soroban rules: heaven x5 + active earth beads."""
    g = rod.geometry
    heaven = 5 if rod.heaven_y == g.heaven_active_y else 0
    active = sum(1 for i, y in enumerate(rod.earth_y) if y == g.earth_active_y(i))
    return heaven + active


class InvariantMixin:
    """Assertions shared by the rod tests"""

    def assert_earth_invariants(self, rod: SorobanDigit):
        g = rod.geometry
        ys = rod.earth_y
        for i in range(1, 4):
            # Order never inverts and neighbours keep the minimum gap
            self.assertLessEqual(ys[i - 1], ys[i])
            self.assertGreaterEqual(ys[i] - ys[i - 1], rod.min_gap - EPS)
        for i, y in enumerate(ys):
            self.assertGreaterEqual(y, g.rest_limit_top + i * rod.min_gap - EPS)
            self.assertLessEqual(y, g.rest_limit_bottom - (3 - i) * rod.min_gap + EPS)

    def assert_heaven_in_range(self, rod: SorobanDigit):
        g = rod.geometry
        self.assertGreaterEqual(rod.heaven_y, g.heaven_rest_y - EPS)
        self.assertLessEqual(rod.heaven_y, g.heaven_active_y + EPS)


class TestSorobanDigit(InvariantMixin, unittest.TestCase):

    def setUp(self):
        """
        Rod on the reference 1100x700 canvas with six columns.

        Bead radius is 19.6px, so min_gap is 39.2px and earth_gap 47.04px.
        """
        self.geometry = compute_geometry(1100, 700, 6)
        self.rod = SorobanDigit(self.geometry, self.geometry.rod_x(0))

    def settle(self, frames: int = 50):
        for _ in range(frames):
            self.rod.advance()

    def test_init_at_rest(self):
        """New rods start uninitialized with every bead at rest."""
        g = self.geometry
        self.assertEqual(self.rod.get_digit(), -1)
        self.assertEqual(self.rod.heaven_y, g.heaven_rest_y)
        self.assertEqual(self.rod.heaven_target_y, g.heaven_rest_y)
        np.testing.assert_array_almost_equal(
            self.rod.earth_y, [g.earth_rest_y(i) for i in range(4)], decimal=9)
        self.assertEqual(self.rod.earth_y, self.rod.earth_target_y)
        self.assertAlmostEqual(self.rod.min_gap, 39.2)
        self.assertFalse(self.rod.is_animation_active())

    def test_targets_for_every_digit(self):
        """Heaven is active from 5 up; the top d % 5 earth beads sit under the beam."""
        g = self.geometry
        for digit in range(10):
            rod = SorobanDigit(g, 0.0)
            self.assertTrue(rod.set_digit(digit))

            expected_heaven = g.heaven_active_y if digit >= 5 else g.heaven_rest_y
            self.assertEqual(rod.heaven_target_y, expected_heaven)

            k = digit % 5
            for i in range(4):
                if i < k:
                    expected = g.earth_active_top_y + i * g.earth_gap
                else:
                    expected = g.earth_rest_top_y + i * g.earth_gap
                self.assertAlmostEqual(rod.earth_target_y[i], expected, places=9)

    def test_digit_clamped(self):
        """Out-of-range digits are clamped rather than rejected."""
        self.rod.set_digit(12)
        self.assertEqual(self.rod.get_digit(), 9)
        self.rod.set_digit(-3)
        self.assertEqual(self.rod.get_digit(), 0)

    def test_same_digit_is_noop(self):
        """Setting the held digit again leaves targets untouched."""
        self.assertTrue(self.rod.set_digit(7))
        heaven_target = self.rod.heaven_target_y
        earth_targets = list(self.rod.earth_target_y)

        self.settle(3)
        self.assertFalse(self.rod.set_digit(7))
        self.assertEqual(self.rod.heaven_target_y, heaven_target)
        self.assertEqual(self.rod.earth_target_y, earth_targets)

    def test_first_set_digit_zero_computes_targets(self):
        """The uninitialized value forces target computation even for 0."""
        self.assertTrue(self.rod.set_digit(0))
        self.assertEqual(self.rod.get_digit(), 0)

    def test_convergence_and_decoding(self):
        """Every digit-to-digit move settles exactly within 50 frames and decodes back."""
        for start in range(10):
            for digit in range(10):
                rod = SorobanDigit(self.geometry, 0.0)
                rod.set_digit(start)
                for _ in range(50):
                    rod.advance()
                rod.set_digit(digit)
                for _ in range(50):
                    rod.advance()

                self.assertEqual(rod.heaven_y, rod.heaven_target_y)
                self.assertEqual(rod.earth_y, rod.earth_target_y)
                self.assertFalse(rod.is_animation_active())
                self.assertEqual(decode(rod), digit)

    def test_invariants_hold_every_frame(self):
        """Random digit changes, including mid-animation, never break the constraints."""
        rng = random.Random(1234)
        for _ in range(400):
            self.rod.set_digit(rng.randint(0, 9))
            for _ in range(rng.randint(1, 12)):
                self.rod.advance()
                self.assert_earth_invariants(self.rod)
                self.assert_heaven_in_range(self.rod)

    def test_invariants_on_small_canvas(self):
        """The same guarantees hold on a cramped canvas."""
        g = compute_geometry(160, 120, 4)
        rod = SorobanDigit(g, g.rod_x(1))
        rng = random.Random(99)
        for _ in range(200):
            rod.set_digit(rng.randint(0, 9))
            for _ in range(rng.randint(1, 8)):
                rod.advance()
                self.assert_earth_invariants(rod)

    def test_scenario_zero_seven_three(self):
        """0 -> 7 -> 3, 50 frames each, with the gap checked on every frame."""
        g = self.geometry

        self.rod.set_digit(0)
        for _ in range(50):
            self.rod.advance()
            self.assert_earth_invariants(self.rod)

        self.rod.set_digit(7)
        for _ in range(50):
            self.rod.advance()
            self.assert_earth_invariants(self.rod)
        self.assertEqual(self.rod.heaven_y, g.heaven_active_y)
        active = [i for i in range(4) if self.rod.earth_y[i] == g.earth_active_y(i)]
        self.assertEqual(active, [0, 1])

        self.rod.set_digit(3)
        for _ in range(50):
            self.rod.advance()
            self.assert_earth_invariants(self.rod)
        self.assertEqual(self.rod.heaven_y, g.heaven_rest_y)
        active = [i for i in range(4) if self.rod.earth_y[i] == g.earth_active_y(i)]
        self.assertEqual(active, [0, 1, 2])

    def test_hard_constraints_repair_crossed_beads(self):
        """Hard passes alone restore order, gap and bounds from a scrambled state."""
        g = self.geometry
        self.rod.earth_y = [g.rest_limit_bottom + 50, g.rest_limit_top - 10, 300.0, 299.0]
        self.rod.apply_hard_constraints()
        self.assert_earth_invariants(self.rod)

    def test_hard_constraints_push_down(self):
        """A bead closer than min_gap to the one above is pushed down to exactly min_gap."""
        self.rod.earth_y = [320.0, 330.0, 400.0, 500.0]
        self.rod.apply_hard_constraints()
        self.assertAlmostEqual(self.rod.earth_y[1], 320.0 + self.rod.min_gap)
        self.assertAlmostEqual(self.rod.earth_y[2], 400.0)

    def test_hard_constraints_clamp_reserves_room(self):
        """Bead i is kept at least (3 - i) gaps above the bottom limit."""
        g = self.geometry
        self.rod.earth_y = [g.rest_limit_bottom] * 4
        self.rod.apply_hard_constraints()
        for i in range(4):
            self.assertAlmostEqual(self.rod.earth_y[i], g.rest_limit_bottom - (3 - i) * self.rod.min_gap)

    def test_target_bias(self):
        """The soft pass moves 6% toward target and leaves settled beads alone."""
        g = self.geometry
        self.rod.set_digit(4)
        self.rod.earth_y = [g.earth_rest_y(0), g.earth_active_y(1), g.earth_rest_y(2), g.earth_rest_y(3)]
        self.rod.earth_target_y = [g.earth_active_y(0), g.earth_active_y(1), g.earth_rest_y(2), g.earth_rest_y(3)]
        before = list(self.rod.earth_y)

        self.rod.apply_target_bias()

        expected = before[0] + (self.rod.earth_target_y[0] - before[0]) * 0.06
        self.assertAlmostEqual(self.rod.earth_y[0], expected)
        self.assertEqual(self.rod.earth_y[1:], before[1:])

    def test_advance_returns_positions(self):
        """advance() returns a read-only snapshot of the rod."""
        self.rod.set_digit(6)
        positions = self.rod.advance()
        self.assertIsInstance(positions, BeadPositions)
        self.assertEqual(positions.x, self.geometry.rod_x(0))
        self.assertEqual(positions.rod_top, self.geometry.rod_top)
        self.assertEqual(positions.heaven_y, self.rod.heaven_y)
        self.assertEqual(list(positions.earth_y), self.rod.earth_y)
        with self.assertRaises(Exception):
            positions.heaven_y = 0.0

    def test_easing_step(self):
        """The first frame closes a quarter of the heaven distance."""
        g = self.geometry
        self.rod.set_digit(5)
        self.rod.advance()
        expected = g.heaven_rest_y + (g.heaven_active_y - g.heaven_rest_y) * 0.25
        self.assertAlmostEqual(self.rod.heaven_y, expected)

    def test_state_snapshot(self):
        self.rod.set_digit(2)
        state = self.rod.get_state()
        self.assertEqual(state["digit"], 2)
        self.assertEqual(len(state["earth_y"]), 4)
        self.assertTrue(state["animating"])

    def test_lerp_identity(self):
        self.assertEqual(lerp(3.25, 3.25, 0.06), 3.25)
        self.assertAlmostEqual(lerp(0.0, 10.0, 0.25), 2.5)


if __name__ == '__main__':
    unittest.main()
