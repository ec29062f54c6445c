import unittest
import math
import numpy as np
from scipy.spatial.transform import Rotation

from decomposed.geometry import (
    quaternion_to_rotation,
    rotation_to_quaternion,
    rotation_to_euler,
    euler_to_rotation,
    euler_to_quaternion,
    quaternion_to_euler,
)
from decomposed.linalg import det3, det4, inv4


class TestRotationConversions(unittest.TestCase):
    def setUp(self):
        self.angles = [
            (0.0, 0.0, 0.0),
            (0.3, -0.4, 1.2),
            (-2.5, 1.1, 0.7),
            (math.pi / 2, 0.2, -math.pi / 3),
            (3.0, -1.4, -3.0),
        ]

    def test_euler_to_rotation_matches_scipy(self):
        for x, y, z in self.angles:
            expected = Rotation.from_euler("xyz", [x, y, z]).as_matrix()
            np.testing.assert_allclose(euler_to_rotation(x, y, z), expected, atol=1e-12)

    def test_euler_round_trip(self):
        for x, y, z in self.angles:
            np.testing.assert_allclose(rotation_to_euler(euler_to_rotation(x, y, z)), [x, y, z], atol=1e-12)

    def test_quaternion_round_trip(self):
        for x, y, z in self.angles:
            R = euler_to_rotation(x, y, z)
            q = rotation_to_quaternion(R)
            self.assertAlmostEqual(np.linalg.norm(q), 1.0, places=12)
            np.testing.assert_allclose(quaternion_to_rotation(q), R, atol=1e-12)

    def test_quaternion_matches_scipy(self):
        for x, y, z in self.angles:
            q = euler_to_quaternion(x, y, z)
            expected = Rotation.from_euler("xyz", [x, y, z]).as_quat()
            if np.dot(q, expected) < 0:
                expected = -expected
            np.testing.assert_allclose(q, expected, atol=1e-12)

    def test_w_first_ordering(self):
        R = euler_to_rotation(0.1, 0.2, 0.3)
        q_last = rotation_to_quaternion(R, True)
        q_first = rotation_to_quaternion(R, False)
        np.testing.assert_allclose(q_first, np.roll(q_last, 1))
        np.testing.assert_allclose(quaternion_to_rotation(q_first, False), R, atol=1e-12)

    def test_quaternion_to_euler(self):
        q = euler_to_quaternion(0.3, -0.4, 1.2)
        np.testing.assert_allclose(quaternion_to_euler(q), [0.3, -0.4, 1.2], atol=1e-12)

    def test_large_rotation_branches(self):
        # negative trace exercises each largest-diagonal branch
        for axis in np.eye(3):
            R = Rotation.from_rotvec(axis * 3.0).as_matrix()
            np.testing.assert_allclose(quaternion_to_rotation(rotation_to_quaternion(R)), R, atol=1e-12)


class TestGimbalLockExtraction(unittest.TestCase):
    def test_z_pinned_to_zero(self):
        euler = rotation_to_euler(euler_to_rotation(0.4, math.pi / 2, 0.0))
        self.assertAlmostEqual(euler[1], math.pi / 2, places=12)
        self.assertEqual(euler[2], 0.0)

    def test_out_of_domain_is_clamped(self):
        R = np.eye(3)
        R[2, 0] = -1.0 - 1e-12
        euler = rotation_to_euler(R)
        self.assertAlmostEqual(euler[1], math.pi / 2, places=15)
        self.assertTrue(np.all(np.isfinite(euler)))


class TestLinalg(unittest.TestCase):
    def setUp(self):
        rng = np.random.default_rng(3)
        self.m = rng.uniform(-2, 2, (4, 4))

    def test_det3(self):
        np.testing.assert_allclose(det3(self.m[:3, :3].copy()), np.linalg.det(self.m[:3, :3]), atol=1e-12)

    def test_det3_propagates_nan(self):
        m = np.eye(3)
        m[1] = [np.nan, np.inf, np.nan]
        self.assertTrue(math.isnan(det3(m)))

    def test_det4(self):
        np.testing.assert_allclose(det4(self.m), np.linalg.det(self.m), atol=1e-12)
        self.assertEqual(det4(np.diag([1.0, 0.0, 1.0, 1.0])), 0.0)

    def test_inv4(self):
        np.testing.assert_allclose(inv4(self.m) @ self.m, np.eye(4), atol=1e-9)
        np.testing.assert_allclose(inv4(self.m), np.linalg.inv(self.m), atol=1e-9)

    def test_inv4_singular_raises(self):
        with self.assertRaises(ZeroDivisionError):
            inv4(np.zeros((4, 4)))


if __name__ == "__main__":
    unittest.main()
