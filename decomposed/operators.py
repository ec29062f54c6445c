# operators.py

import numpy as np
from numpy import asarray as np_asarray
from numpy import ascontiguousarray as np_ascontiguousarray
from numpy import float64 as np_float64
from typing import Iterable, Union
from numba import njit
from numba.core.errors import NumbaPerformanceWarning
import warnings

from decomposed.geometry import quaternion_to_rotation

warnings.filterwarnings("ignore", category=NumbaPerformanceWarning)

ArrayLike = Union[np.ndarray, Iterable[float]]

_EYE4 = np.eye(4, dtype=np_float64)


def identity() -> np.ndarray:
    """A fresh 4x4 identity matrix."""
    return _EYE4.copy()


def zero() -> np.ndarray:
    """A fresh 4x4 matrix of zeros."""
    return np.zeros((4, 4), dtype=np_float64)


def as_matrix(matrix: ArrayLike) -> np.ndarray:
    """
    Coerce `matrix` to a C-contiguous float64 4x4 array.

    Raises:
        ValueError: if the input is not 4x4.
    """
    matrix = np_asarray(matrix, dtype=np_float64)
    if matrix.shape != (4, 4):
        raise ValueError(f"Invalid matrix shape: {matrix.shape}")
    return np_ascontiguousarray(matrix)


def as_vector(values: ArrayLike, size: int, name: str) -> np.ndarray:
    """
    Coerce `values` to a C-contiguous float64 vector of length `size`.

    Raises:
        ValueError: if the input does not have shape (size,).
    """
    values = np_asarray(values, dtype=np_float64)
    if values.shape != (size,):
        raise ValueError(f"{name} must be a {size}D vector, got {values.shape}")
    return np_ascontiguousarray(values)


#########
# Compiled kernels
#

@njit(cache=True)
def translate_kernel(m: np.ndarray, t: np.ndarray) -> np.ndarray:
    T = np.eye(4, dtype=np.float64)
    T[0, 3] = t[0]
    T[1, 3] = t[1]
    T[2, 3] = t[2]
    return m @ T


@njit(cache=True)
def scale_kernel(m: np.ndarray, s: np.ndarray) -> np.ndarray:
    out = m.copy()
    for col in range(3):
        for row in range(4):
            out[row, col] *= s[col]
    return out


@njit(cache=True)
def rotate_kernel(m: np.ndarray, q: np.ndarray, w_last: bool = True) -> np.ndarray:
    R = np.eye(4, dtype=np.float64)
    R[:3, :3] = quaternion_to_rotation(q, w_last)
    return m @ R


@njit(cache=True)
def skew_kernel(m: np.ndarray, s: np.ndarray) -> np.ndarray:
    # YZ, then XZ, then XY; zero factors are skipped rather than multiplied in
    out = m.copy()
    if s[2] != 0.0:
        K = np.eye(4, dtype=np.float64)
        K[1, 2] = s[2]
        out = out @ K
    if s[1] != 0.0:
        K = np.eye(4, dtype=np.float64)
        K[0, 2] = s[1]
        out = out @ K
    if s[0] != 0.0:
        K = np.eye(4, dtype=np.float64)
        K[0, 1] = s[0]
        out = out @ K
    return out


@njit(cache=True)
def perspective_kernel(m: np.ndarray, p: np.ndarray) -> np.ndarray:
    out = m.copy()
    out[3, 0] = p[0]
    out[3, 1] = p[1]
    out[3, 2] = p[2]
    out[3, 3] = p[3]
    return out


@njit(cache=True)
def compose(translation: np.ndarray, scale: np.ndarray, quaternion: np.ndarray,
            skew: np.ndarray, perspective: np.ndarray) -> np.ndarray:
    """
    Build a 4x4 matrix from its components.

    Starting from identity: perspective, then translate, rotate, skew and
    finally scale, each applied on the right. This is the exact reverse of the
    order in which `decompose_kernel` peels the components off.
    """
    m = np.eye(4, dtype=np.float64)
    m = perspective_kernel(m, perspective)
    m = translate_kernel(m, translation)
    m = rotate_kernel(m, quaternion, True)
    m = skew_kernel(m, skew)
    m = scale_kernel(m, scale)
    return m


#########
# Public builders
#

def translated(matrix: ArrayLike, translation: ArrayLike) -> np.ndarray:
    """
    Return `matrix @ T`, where T translates by `translation`.

    Args:
        matrix: 4x4 matrix.
        translation: length-3 translation.

    Returns:
        A new 4x4 matrix; the input is untouched.
    """
    return translate_kernel(as_matrix(matrix), as_vector(translation, 3, "Translation"))


def scaled(matrix: ArrayLike, scale: ArrayLike) -> np.ndarray:
    """
    Return a copy of `matrix` with its first three columns multiplied by
    `scale[0]`, `scale[1]` and `scale[2]`.
    """
    return scale_kernel(as_matrix(matrix), as_vector(scale, 3, "Scale"))


def rotated(matrix: ArrayLike, quaternion: ArrayLike, w_last: bool = True) -> np.ndarray:
    """
    Return `matrix @ R`, where R is the rotation of the unit quaternion `quaternion`.

    Args:
        matrix: 4x4 matrix.
        quaternion: [x, y, z, w] when `w_last` is True, else [w, x, y, z].
    """
    return rotate_kernel(as_matrix(matrix), as_vector(quaternion, 4, "Quaternion"), w_last)


def skewed(matrix: ArrayLike, skew: ArrayLike) -> np.ndarray:
    """
    Return `matrix` right-multiplied by one shear matrix per non-zero component
    of `skew` ([XY, XZ, YZ]), applied in YZ, XZ, XY order.
    """
    return skew_kernel(as_matrix(matrix), as_vector(skew, 3, "Skew"))


def applying_perspective(matrix: ArrayLike, perspective: ArrayLike) -> np.ndarray:
    """
    Return a copy of `matrix` whose bottom row is overwritten with `perspective`.

    This is an assignment, not a multiplication.
    """
    return perspective_kernel(as_matrix(matrix), as_vector(perspective, 4, "Perspective"))
