from numpy import allclose as np_allclose
from numpy import array as np_array
from numpy import array2string as np_array2string
from numpy import float64 as np_float64
from numpy import ndarray
from typing import Optional, Tuple, Union

from decomposed.accessors import Skew, Perspective
from decomposed.decomposition import DecomposedTransform, decompose
from decomposed.interpolation import lerp_matrix
from decomposed.operators import (
    ArrayLike,
    as_matrix,
    identity,
    zero,
    translated,
    scaled,
    rotated,
    skewed,
    applying_perspective,
)


class TransformationMatrix:
    """
    A 4x4 homogeneous transformation with decomposition helpers.

    Every builder returns a new TransformationMatrix; `matrix` is never
    modified in place by this class.

    Attributes:
        matrix (ndarray): 4x4 float64 matrix in column-vector convention.
    """
    __slots__ = ("matrix",)

    def __init__(self, matrix: Optional[ArrayLike] = None):
        if matrix is None:
            self.matrix = identity()
        else:
            self.matrix = as_matrix(matrix).copy()

    @classmethod
    def identity(cls) -> "TransformationMatrix":
        """
        Create an identity TransformationMatrix.

        Returns:
            A new TransformationMatrix whose `matrix` is the identity matrix.
        """
        return cls(identity())

    @classmethod
    def zero(cls) -> "TransformationMatrix":
        """
        Create a TransformationMatrix of all zeros.

        Returns:
            A new TransformationMatrix whose `matrix` is all zeros.
        """
        return cls(zero())

    @classmethod
    def from_fields(
        cls,
        m11: float, m12: float, m13: float, m14: float,
        m21: float, m22: float, m23: float, m24: float,
        m31: float, m32: float, m33: float, m34: float,
        m41: float, m42: float, m43: float, m44: float,
    ) -> "TransformationMatrix":
        """
        Create a TransformationMatrix from the sixteen fields of a row-vector
        transform (the CoreAnimation / CSS `matrix3d` layout).

        Row-vector fields are the transpose of the column-vector matrix:
        `mRC` lands in `matrix[C - 1, R - 1]`. The translation is therefore
        m41, m42, m43 and the perspective terms are m14, m24, m34, m44.
        """
        rows = np_array([
            [m11, m12, m13, m14],
            [m21, m22, m23, m24],
            [m31, m32, m33, m34],
            [m41, m42, m43, m44],
        ], dtype=np_float64)
        return cls(rows.T)

    def fields(self) -> Tuple[float, ...]:
        """
        The sixteen row-vector fields (m11, m12, ..., m44), the inverse of
        `from_fields`.
        """
        return tuple(float(v) for v in self.matrix.T.flatten())

    #########
    # Decomposition
    #

    def decomposed(self) -> DecomposedTransform:
        """
        Decompose this matrix into translation, scale, rotation, skew and perspective.

        Returns the all-zero default decomposition when the matrix cannot be
        decomposed; see `decomposed.decomposition.decompose`.
        """
        return decompose(self.matrix)

    @property
    def translation(self) -> ndarray:
        """The decomposed translation."""
        return self.decomposed().translation

    @property
    def scale(self) -> ndarray:
        """The decomposed per-axis scale."""
        return self.decomposed().scale

    @property
    def rotation(self) -> ndarray:
        """The decomposed rotation as an [x, y, z, w] quaternion."""
        return self.decomposed().quaternion

    @property
    def euler_angles(self) -> ndarray:
        """The decomposed rotation as XYZ Euler angles in radians."""
        return self.decomposed().rotation

    @property
    def skew(self) -> Skew:
        """The decomposed XY, XZ and YZ shear."""
        return self.decomposed().skew

    @property
    def perspective(self) -> Perspective:
        """The decomposed perspective row."""
        return self.decomposed().perspective

    #########
    # Builders
    #

    def translated(self, translation: ArrayLike) -> "TransformationMatrix":
        """
        Apply a translation on the right of this transform.

        Args:
            translation: length-3 translation.

        Returns:
            A new TransformationMatrix.
        """
        return self.__class__(translated(self.matrix, translation))

    def scaled(self, scale: ArrayLike) -> "TransformationMatrix":
        """
        Scale the first three columns of this transform.

        Args:
            scale: length-3 per-axis factors.

        Returns:
            A new TransformationMatrix.
        """
        return self.__class__(scaled(self.matrix, scale))

    def rotated(self, quaternion: ArrayLike, w_last: bool = True) -> "TransformationMatrix":
        """
        Apply a quaternion rotation on the right of this transform.

        Args:
            quaternion: unit quaternion, [x, y, z, w] when `w_last` is True.

        Returns:
            A new TransformationMatrix.
        """
        return self.__class__(rotated(self.matrix, quaternion, w_last))

    def skewed(self, skew: ArrayLike) -> "TransformationMatrix":
        """
        Apply the shear factors [XY, XZ, YZ] on the right of this transform.

        Returns:
            A new TransformationMatrix.
        """
        return self.__class__(skewed(self.matrix, skew))

    def applying_perspective(self, perspective: ArrayLike) -> "TransformationMatrix":
        """
        Replace the perspective row of this transform.

        Returns:
            A new TransformationMatrix.
        """
        return self.__class__(applying_perspective(self.matrix, perspective))

    def lerp(self, to: Union["TransformationMatrix", ArrayLike], fraction: float) -> "TransformationMatrix":
        """
        Interpolate towards `to` through the decomposed components.

        Args:
            to: the end transform.
            fraction: 0 gives this transform, 1 gives `to`. Not clamped.

        Returns:
            A new TransformationMatrix.
        """
        if isinstance(to, TransformationMatrix):
            to = to.matrix
        return self.__class__(lerp_matrix(self.matrix, to, fraction))

    def copy(self) -> "TransformationMatrix":
        """
        Return a copy of this TransformationMatrix.

        Returns:
            A new TransformationMatrix with the same matrix.
        """
        return self.__class__(self.matrix)

    #########
    # Dunder methods
    #

    def __matmul__(self, other: Union["TransformationMatrix", ndarray]) -> Union["TransformationMatrix", ndarray]:
        """
        Compose with another transform (`other` is applied first), or apply
        this matrix to an ndarray.
        """
        if isinstance(other, ndarray):
            return self.matrix @ other
        if not isinstance(other, TransformationMatrix):
            return NotImplemented
        return self.__class__(self.matrix @ other.matrix)

    def __eq__(self, other: object) -> bool:
        """
        True if `other` is a TransformationMatrix whose matrix is equal within a small tolerance.
        """
        if not isinstance(other, TransformationMatrix):
            return False
        return bool(np_allclose(self.matrix, other.matrix))

    __hash__ = None

    def __repr__(self) -> str:
        cls = self.__class__.__name__
        mat = np_array2string(self.matrix, precision=6, separator=', ')
        return f"{cls}(matrix=\n{mat}\n)"

    def __copy__(self) -> "TransformationMatrix":
        return self.copy()

    def __deepcopy__(self, memo) -> "TransformationMatrix":
        return self.copy()
