# linalg.py
from numba import njit
import numpy as np
from numba.core.errors import NumbaPerformanceWarning
import warnings
warnings.filterwarnings("ignore", category=NumbaPerformanceWarning)


@njit(inline='always', cache=True)
def det3(M):
    """
    Determinant of a 3 x 3 as the scalar triple product rows[0] . (rows[1] x rows[2]).

    Not compiled with fastmath so NaN rows propagate instead of being assumed away.
    """
    b0, b1, b2 = M[1, 0], M[1, 1], M[1, 2]
    c0, c1, c2 = M[2, 0], M[2, 1], M[2, 2]
    return (
        M[0, 0] * (b1 * c2 - b2 * c1)
        + M[0, 1] * (b2 * c0 - b0 * c2)
        + M[0, 2] * (b0 * c1 - b1 * c0)
    )


@njit(inline='always', cache=True)
def _subfactors(m):
    """
    2x2 minors of the top two rows (s) and the bottom two rows (c) of a 4x4.

    det(m) = s0*c5 - s1*c4 + s2*c3 + s3*c2 - s4*c1 + s5*c0
    """
    s = np.empty(6, dtype=np.float64)
    c = np.empty(6, dtype=np.float64)
    s[0] = m[0, 0] * m[1, 1] - m[1, 0] * m[0, 1]
    s[1] = m[0, 0] * m[1, 2] - m[1, 0] * m[0, 2]
    s[2] = m[0, 0] * m[1, 3] - m[1, 0] * m[0, 3]
    s[3] = m[0, 1] * m[1, 2] - m[1, 1] * m[0, 2]
    s[4] = m[0, 1] * m[1, 3] - m[1, 1] * m[0, 3]
    s[5] = m[0, 2] * m[1, 3] - m[1, 2] * m[0, 3]

    c[0] = m[2, 0] * m[3, 1] - m[3, 0] * m[2, 1]
    c[1] = m[2, 0] * m[3, 2] - m[3, 0] * m[2, 2]
    c[2] = m[2, 0] * m[3, 3] - m[3, 0] * m[2, 3]
    c[3] = m[2, 1] * m[3, 2] - m[3, 1] * m[2, 2]
    c[4] = m[2, 1] * m[3, 3] - m[3, 1] * m[2, 3]
    c[5] = m[2, 2] * m[3, 3] - m[3, 2] * m[2, 3]
    return s, c


@njit(cache=True)
def det4(m):
    """
    Determinant of a 4x4 matrix using the 12-subfactor scheme.

    Not compiled with fastmath: the decomposer compares the result against
    an exact zero to detect a singular perspective block.

    Parameters
    ----------
    m : (4,4) float64 array

    Returns
    -------
    float64
        det(m)
    """
    s, c = _subfactors(m)
    return (
        s[0] * c[5] - s[1] * c[4] + s[2] * c[3]
        + s[3] * c[2] - s[4] * c[1] + s[5] * c[0]
    )


@njit(inline='always', cache=True)
def _minor(m, skip_row, skip_col):
    """The 3x3 left after deleting one row and one column of a 4x4."""
    out = np.empty((3, 3), dtype=np.float64)
    r = 0
    for row in range(4):
        if row == skip_row:
            continue
        k = 0
        for col in range(4):
            if col == skip_col:
                continue
            out[r, k] = m[row, col]
            k += 1
        r += 1
    return out


@njit(cache=True)
def inv4(m):
    """
    Inverse of a 4x4 matrix as its adjugate over its determinant.

    The adjugate is the transposed cofactor matrix, each cofactor being a
    signed 3x3 minor.

    Raises ZeroDivisionError if the matrix is singular.
    """
    det = det4(m)
    if det == 0.0:
        raise ZeroDivisionError("Matrix is singular and cannot be inverted")
    inv_det = 1.0 / det

    out = np.empty((4, 4), dtype=np.float64)
    for i in range(4):
        for j in range(4):
            sign = 1.0 if (i + j) % 2 == 0 else -1.0
            out[j, i] = sign * det3(_minor(m, i, j)) * inv_det
    return out
