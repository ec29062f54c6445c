# decomposition.py

import logging
import math
from dataclasses import dataclass, field
from typing import Optional

import numpy as np
from numpy import allclose as np_allclose
from numpy import float64 as np_float64
from numba import njit
from numba.core.errors import NumbaPerformanceWarning
import warnings

from decomposed.accessors import Skew, Perspective
from decomposed.geometry import rotation_to_euler, rotation_to_quaternion, euler_to_quaternion, quaternion_to_euler
from decomposed.linalg import det3, det4, inv4
from decomposed.operators import ArrayLike, as_matrix, as_vector, compose

warnings.filterwarnings("ignore", category=NumbaPerformanceWarning)

logger = logging.getLogger(__name__)

# status codes returned by decompose_kernel
DECOMPOSED = 0
ZERO_HOMOGENEOUS = 1
SINGULAR_PERSPECTIVE = 2

_REASONS = {
    ZERO_HOMOGENEOUS: "matrix[3, 3] is zero",
    SINGULAR_PERSPECTIVE: "perspective block is singular",
}


@njit(inline='always', cache=True)
def _dot3(a: np.ndarray, b: np.ndarray) -> float:
    return a[0]*b[0] + a[1]*b[1] + a[2]*b[2]


@njit(cache=True, error_model="numpy")
def _normalized(v: np.ndarray) -> np.ndarray:
    return v / math.sqrt(_dot3(v, v))


@njit(cache=True, error_model="numpy")
def decompose_kernel(matrix: np.ndarray):
    """
    Split a 4x4 matrix into perspective, translation, rotation, skew and scale.

    Divisions follow IEEE semantics: an axis whose length underflows to zero
    yields inf or NaN components instead of raising.

    Args:
        matrix: C-contiguous (4, 4) float64 array, column-vector convention.

    Returns:
        (status, translation, scale, euler, quaternion, skew, perspective).
        When status is not DECOMPOSED every array is zero-filled.
    """
    translation = np.zeros(3, dtype=np.float64)
    scale = np.zeros(3, dtype=np.float64)
    euler = np.zeros(3, dtype=np.float64)
    quaternion = np.zeros(4, dtype=np.float64)
    skew = np.zeros(3, dtype=np.float64)
    perspective = np.zeros(4, dtype=np.float64)

    if matrix[3, 3] == 0.0:
        return ZERO_HOMOGENEOUS, translation, scale, euler, quaternion, skew, perspective

    local = matrix / matrix[3, 3]

    # perspective block: local with its bottom row reset to (0, 0, 0, 1)
    block = local.copy()
    block[3, 0] = 0.0
    block[3, 1] = 0.0
    block[3, 2] = 0.0
    block[3, 3] = 1.0
    if det4(block) == 0.0:
        return SINGULAR_PERSPECTIVE, translation, scale, euler, quaternion, skew, perspective

    if local[3, 0] != 0.0 or local[3, 1] != 0.0 or local[3, 2] != 0.0:
        # solve block.T @ perspective = bottom row
        inv = inv4(block)
        for i in range(4):
            acc = 0.0
            for j in range(4):
                acc += inv[j, i] * local[3, j]
            perspective[i] = acc
        local[3, 0] = 0.0
        local[3, 1] = 0.0
        local[3, 2] = 0.0
        local[3, 3] = 1.0
    else:
        perspective[3] = 1.0

    translation[0] = local[0, 3]
    translation[1] = local[1, 3]
    translation[2] = local[2, 3]
    local[0, 3] = 0.0
    local[1, 3] = 0.0
    local[2, 3] = 0.0

    # basis vectors are the columns of the upper-left 3x3; Gram-Schmidt in x, y, z order
    basis = local[:3, :3].T.copy()

    scale[0] = math.sqrt(_dot3(basis[0], basis[0]))
    basis[0] = _normalized(basis[0])

    skew[0] = _dot3(basis[0], basis[1])
    basis[1] = basis[1] - skew[0] * basis[0]
    scale[1] = math.sqrt(_dot3(basis[1], basis[1]))
    basis[1] = _normalized(basis[1])
    skew[0] /= scale[1]

    skew[1] = _dot3(basis[0], basis[2])
    basis[2] = basis[2] - skew[1] * basis[0]
    skew[2] = _dot3(basis[1], basis[2])
    basis[2] = basis[2] - skew[2] * basis[1]
    scale[2] = math.sqrt(_dot3(basis[2], basis[2]))
    basis[2] = _normalized(basis[2])
    skew[1] /= scale[2]
    skew[2] /= scale[2]

    # a reflection is carried by the sign of the scale
    if det3(basis) < 0.0:
        scale *= -1.0
        basis *= -1.0

    rotation = basis.T.copy()
    euler[:] = rotation_to_euler(rotation)
    quaternion[:] = rotation_to_quaternion(rotation, True)

    return DECOMPOSED, translation, scale, euler, quaternion, skew, perspective


@dataclass(slots=True, eq=False)
class DecomposedTransform:
    """
    The independent components of a 4x4 transform.

    Attributes:
        translation (np.ndarray): length-3 translation.
        scale (np.ndarray): length-3 per-axis scale; a negative sign absorbs a reflection.
        rotation (np.ndarray): XYZ Euler angles in radians. Kept for consumers that want
            angles; recomposition and interpolation use `quaternion` only, and the two are
            not kept in sync if one of them is edited afterwards.
        quaternion (np.ndarray): [x, y, z, w] rotation.
        skew (Skew): XY, XZ and YZ shear factors.
        perspective (Perspective): m31..m34 perspective row.

    Instances are values: library functions never mutate one they are given.
    """

    translation: np.ndarray = field(default_factory=lambda: np.zeros(3, dtype=np_float64))
    scale: np.ndarray = field(default_factory=lambda: np.zeros(3, dtype=np_float64))
    rotation: np.ndarray = field(default_factory=lambda: np.zeros(3, dtype=np_float64))
    quaternion: np.ndarray = field(default_factory=lambda: np.zeros(4, dtype=np_float64))
    skew: Skew = field(default_factory=Skew)
    perspective: Perspective = field(default_factory=lambda: Perspective(0.0, 0.0, 0.0, 0.0))

    @classmethod
    def from_matrix(cls, matrix: ArrayLike) -> "DecomposedTransform":
        """Decompose a 4x4 matrix. See `decompose`."""
        return decompose(matrix)

    @classmethod
    def from_components(
        cls,
        translation: Optional[ArrayLike] = None,
        scale: Optional[ArrayLike] = None,
        rotation: Optional[ArrayLike] = None,
        quaternion: Optional[ArrayLike] = None,
        skew: Optional[ArrayLike] = None,
        perspective: Optional[ArrayLike] = None,
    ) -> "DecomposedTransform":
        """
        Assemble a DecomposedTransform from individual components.

        Missing components take their neutral value: zero translation, unit
        scale, no rotation, no skew and the (0, 0, 0, 1) perspective. When only
        one of `rotation` (Euler angles) and `quaternion` is given the other is
        derived from it; when both are given they are stored as-is.

        Raises:
            ValueError: if any component has the wrong shape.
        """
        if quaternion is None and rotation is None:
            quaternion = np.array([0.0, 0.0, 0.0, 1.0])
            rotation = np.zeros(3)
        elif quaternion is None:
            rotation = as_vector(rotation, 3, "Rotation")
            quaternion = euler_to_quaternion(rotation[0], rotation[1], rotation[2], True)
        elif rotation is None:
            quaternion = as_vector(quaternion, 4, "Quaternion")
            rotation = quaternion_to_euler(quaternion, True)

        return cls(
            translation=as_vector(np.zeros(3) if translation is None else translation, 3, "Translation").copy(),
            scale=as_vector(np.ones(3) if scale is None else scale, 3, "Scale").copy(),
            rotation=as_vector(rotation, 3, "Rotation").copy(),
            quaternion=as_vector(quaternion, 4, "Quaternion").copy(),
            skew=Skew() if skew is None else Skew.from_array(skew),
            perspective=Perspective() if perspective is None else Perspective.from_array(perspective),
        )

    @property
    def is_degenerate(self) -> bool:
        """True for the all-zero value returned when a matrix cannot be decomposed."""
        return self.allclose(DEFAULT_DECOMPOSED, rtol=0.0, atol=0.0)

    def recomposed(self) -> np.ndarray:
        """Merge the components back into a 4x4 matrix. See `recompose`."""
        return recompose(self)

    def lerp(self, to: "DecomposedTransform", fraction: float) -> "DecomposedTransform":
        """Interpolate towards `to`. See `decomposed.interpolation.lerp_decomposed`."""
        from decomposed.interpolation import lerp_decomposed
        return lerp_decomposed(self, to, fraction)

    def copy(self) -> "DecomposedTransform":
        """
        Return a deep copy of this DecomposedTransform.

        Returns:
            A new DecomposedTransform whose arrays are independent of this one.
        """
        return self.__class__(
            translation=self.translation.copy(),
            scale=self.scale.copy(),
            rotation=self.rotation.copy(),
            quaternion=self.quaternion.copy(),
            skew=self.skew.copy(),
            perspective=self.perspective.copy(),
        )

    def allclose(self, other: "DecomposedTransform", rtol: float = 1e-05, atol: float = 1e-08) -> bool:
        """True if every component of `other` matches this one within tolerance."""
        return all(
            np_allclose(np.asarray(a), np.asarray(b), rtol=rtol, atol=atol)
            for a, b in (
                (self.translation, other.translation),
                (self.scale, other.scale),
                (self.rotation, other.rotation),
                (self.quaternion, other.quaternion),
                (self.skew, other.skew),
                (self.perspective, other.perspective),
            )
        )


# returned (as a copy) whenever a matrix cannot be decomposed; read-only
DEFAULT_DECOMPOSED = DecomposedTransform()
for _values in (
    DEFAULT_DECOMPOSED.translation,
    DEFAULT_DECOMPOSED.scale,
    DEFAULT_DECOMPOSED.rotation,
    DEFAULT_DECOMPOSED.quaternion,
    DEFAULT_DECOMPOSED.skew.values,
    DEFAULT_DECOMPOSED.perspective.values,
):
    _values.setflags(write=False)
del _values


def decompose(matrix: ArrayLike) -> DecomposedTransform:
    """
    Break a 4x4 transform into translation, scale, rotation, skew and perspective.

    The components are extracted in a fixed order (perspective, translation,
    then Gram-Schmidt over the upper-left 3x3 for scale, skew and rotation), so
    `recompose(decompose(m))` reproduces `m` for any matrix built in the
    perspective -> translate -> rotate -> skew -> scale order.

    A matrix whose [3, 3] element is zero, or whose perspective block is
    singular, has no meaningful decomposition. No exception is raised for it:
    a copy of `DEFAULT_DECOMPOSED` is returned instead.

    Args:
        matrix: 4x4 matrix in column-vector convention (translation in the last column).

    Returns:
        A new DecomposedTransform.

    Raises:
        ValueError: if `matrix` is not 4x4.
    """
    status, translation, scale, euler, quaternion, skew, perspective = decompose_kernel(as_matrix(matrix))
    if status != DECOMPOSED:
        logger.debug("Matrix cannot be decomposed (%s); returning the default decomposition", _REASONS[status])
        return DEFAULT_DECOMPOSED.copy()

    return DecomposedTransform(
        translation=translation,
        scale=scale,
        rotation=euler,
        quaternion=quaternion,
        skew=Skew.from_array(skew),
        perspective=Perspective.from_array(perspective),
    )


def recompose(transform: DecomposedTransform) -> np.ndarray:
    """
    Merge a DecomposedTransform back into a 4x4 matrix.

    Only `quaternion` carries the rotation here; `rotation` (Euler angles) is
    never read.

    Returns:
        A new 4x4 float64 matrix.
    """
    return compose(
        as_vector(transform.translation, 3, "Translation"),
        as_vector(transform.scale, 3, "Scale"),
        as_vector(transform.quaternion, 4, "Quaternion"),
        as_vector(transform.skew, 3, "Skew"),
        as_vector(transform.perspective, 4, "Perspective"),
    )
