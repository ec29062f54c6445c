import unittest
import math
import copy
import numpy as np

from decomposed import TransformationMatrix, Skew, Perspective, recompose, DecomposedTransform


class TestCreation(unittest.TestCase):
    def test_default_is_identity(self):
        np.testing.assert_array_equal(TransformationMatrix().matrix, np.eye(4))
        np.testing.assert_array_equal(TransformationMatrix.identity().matrix, np.eye(4))

    def test_zero(self):
        np.testing.assert_array_equal(TransformationMatrix.zero().matrix, np.zeros((4, 4)))

    def test_input_is_copied(self):
        m = np.eye(4)
        t = TransformationMatrix(m)
        m[0, 3] = 5.0
        self.assertEqual(t.matrix[0, 3], 0.0)

    def test_invalid_shape(self):
        with self.assertRaises(ValueError):
            TransformationMatrix(np.eye(3))

    def test_from_fields_translation(self):
        t = TransformationMatrix.from_fields(
            1, 0, 0, 0,
            0, 1, 0, 0,
            0, 0, 1, 0,
            7, 8, 9, 1,
        )
        np.testing.assert_array_equal(t.matrix[:3, 3], [7, 8, 9])
        np.testing.assert_allclose(t.translation, [7, 8, 9])

    def test_from_fields_perspective(self):
        t = TransformationMatrix.from_fields(
            1, 0, 0, 0,
            0, 1, 0, 0,
            0, 0, 1, -0.002,
            0, 0, 0, 1,
        )
        np.testing.assert_array_equal(t.matrix[3], [0, 0, -0.002, 1])
        np.testing.assert_allclose(t.perspective, [0, 0, -0.002, 1])

    def test_fields_round_trip(self):
        values = tuple(float(v) for v in range(1, 17))
        self.assertEqual(TransformationMatrix.from_fields(*values).fields(), values)


class TestComponents(unittest.TestCase):
    def setUp(self):
        self.q = np.array([0.0, math.sin(0.35), 0.0, math.cos(0.35)])
        self.t = TransformationMatrix(recompose(DecomposedTransform.from_components(
            translation=[1, -2, 3],
            scale=[2, 0.5, 1.5],
            quaternion=self.q,
            skew=[0.2, 0.0, -0.1],
        )))

    def test_properties(self):
        np.testing.assert_allclose(self.t.translation, [1, -2, 3], atol=1e-12)
        np.testing.assert_allclose(self.t.scale, [2, 0.5, 1.5], atol=1e-12)
        np.testing.assert_allclose(self.t.rotation, self.q, atol=1e-12)
        np.testing.assert_allclose(self.t.euler_angles, [0, 0.7, 0], atol=1e-12)
        self.assertIsInstance(self.t.skew, Skew)
        np.testing.assert_allclose(self.t.skew, [0.2, 0.0, -0.1], atol=1e-12)
        self.assertIsInstance(self.t.perspective, Perspective)
        np.testing.assert_array_equal(self.t.perspective, [0, 0, 0, 1])

    def test_decomposed(self):
        d = self.t.decomposed()
        np.testing.assert_allclose(d.recomposed(), self.t.matrix, atol=1e-12)

    def test_zero_is_degenerate(self):
        self.assertTrue(TransformationMatrix.zero().decomposed().is_degenerate)
        np.testing.assert_array_equal(TransformationMatrix.zero().scale, [0, 0, 0])


class TestBuilders(unittest.TestCase):
    def test_builders_return_new_instances(self):
        t = TransformationMatrix()
        moved = t.translated([1, 2, 3])
        self.assertIsNot(moved, t)
        np.testing.assert_array_equal(t.matrix, np.eye(4))
        np.testing.assert_array_equal(moved.matrix[:3, 3], [1, 2, 3])

    def test_chain(self):
        q = [0.0, 0.0, math.sin(math.pi / 8), math.cos(math.pi / 8)]
        t = (TransformationMatrix()
             .applying_perspective([0, 0, -0.01, 1])
             .translated([4, 5, 6])
             .rotated(q)
             .skewed([0.1, 0.2, 0.3])
             .scaled([1, 2, 3]))
        expected = recompose(DecomposedTransform.from_components(
            translation=[4, 5, 6], scale=[1, 2, 3], quaternion=q,
            skew=[0.1, 0.2, 0.3], perspective=[0, 0, -0.01, 1]))
        np.testing.assert_allclose(t.matrix, expected, atol=1e-12)

    def test_rotated_w_first(self):
        q_last = [math.sin(0.2), 0.0, 0.0, math.cos(0.2)]
        q_first = [math.cos(0.2), math.sin(0.2), 0.0, 0.0]
        self.assertEqual(TransformationMatrix().rotated(q_last), TransformationMatrix().rotated(q_first, w_last=False))

    def test_lerp(self):
        a = TransformationMatrix()
        b = TransformationMatrix().translated([10, 0, 0]).scaled([3, 3, 3])
        self.assertEqual(a.lerp(b, 0.0), a)
        self.assertEqual(a.lerp(b, 1.0), b)
        mid = a.lerp(b.matrix, 0.5)
        np.testing.assert_allclose(mid.translation, [5, 0, 0], atol=1e-12)
        np.testing.assert_allclose(mid.scale, [2, 2, 2], atol=1e-12)


class TestDunders(unittest.TestCase):
    def test_eq(self):
        a = TransformationMatrix().translated([1, 2, 3])
        b = TransformationMatrix().translated([1, 2, 3 + 1e-12])
        self.assertEqual(a, b)
        self.assertNotEqual(a, TransformationMatrix())
        self.assertNotEqual(a, a.matrix)

    def test_unhashable(self):
        with self.assertRaises(TypeError):
            hash(TransformationMatrix())

    def test_matmul(self):
        a = TransformationMatrix().translated([1, 0, 0])
        b = TransformationMatrix().scaled([2, 2, 2])
        composed = a @ b
        self.assertIsInstance(composed, TransformationMatrix)
        np.testing.assert_allclose(composed.matrix, a.matrix @ b.matrix)
        np.testing.assert_allclose(a @ np.array([0, 0, 0, 1.0]), [1, 0, 0, 1])

    def test_copy_is_independent(self):
        a = TransformationMatrix().translated([1, 2, 3])
        for b in (a.copy(), copy.copy(a), copy.deepcopy(a)):
            self.assertEqual(a, b)
            b.matrix[0, 3] = 100.0
            self.assertEqual(a.matrix[0, 3], 1.0)

    def test_repr(self):
        self.assertTrue(repr(TransformationMatrix()).startswith("TransformationMatrix(matrix="))


if __name__ == "__main__":
    unittest.main()
