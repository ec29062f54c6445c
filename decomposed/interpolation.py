# interpolation.py

import math
import numpy as np
from numpy import asarray as np_asarray
from numpy import float64 as np_float64
from numpy import ndarray
from numba import njit

from decomposed.accessors import Skew, Perspective
from decomposed.decomposition import DecomposedTransform, decompose, recompose
from decomposed.operators import ArrayLike, as_vector

# above this |dot| the two quaternions are treated as parallel and blended linearly
SLERP_DOT_THRESHOLD = 0.9995


def lerp(start: ArrayLike, end: ArrayLike, fraction: float) -> ndarray:
    """
    Linear blend `start + (end - start) * fraction`.

    `fraction` is not clamped; values outside [0, 1] extrapolate.
    """
    start = np_asarray(start, dtype=np_float64)
    end = np_asarray(end, dtype=np_float64)
    return start + (end - start) * fraction


@njit(cache=True)
def quaternion_slerp(q0: ndarray, q1: ndarray, fraction: float) -> ndarray:
    """
    Spherical linear interpolation between two quaternions along the shortest arc.

    Non-zero inputs are normalized first, so the result is a unit quaternion.
    Nearly parallel inputs (|dot| > SLERP_DOT_THRESHOLD) fall back to a
    normalized linear blend. A zero quaternion (the degenerate decomposition)
    is accepted and yields a scaled, non-unit blend rather than an error.

    Parameters:
        q0 (ndarray): start quaternion, any component order as long as q1 matches.
        q1 (ndarray): end quaternion.
        fraction (float): 0 gives q0, 1 gives q1 (or -q1, the same rotation). Not clamped.

    Returns:
        ndarray: the interpolated quaternion.
    """
    a = q0.copy()
    b = q1.copy()
    na = math.sqrt(a[0]*a[0] + a[1]*a[1] + a[2]*a[2] + a[3]*a[3])
    nb = math.sqrt(b[0]*b[0] + b[1]*b[1] + b[2]*b[2] + b[3]*b[3])
    if na > 0.0:
        a /= na
    if nb > 0.0:
        b /= nb

    dot = a[0]*b[0] + a[1]*b[1] + a[2]*b[2] + a[3]*b[3]
    if dot < 0.0:
        b = -b
        dot = -dot

    if dot > SLERP_DOT_THRESHOLD:
        out = a + (b - a) * fraction
        n = math.sqrt(out[0]*out[0] + out[1]*out[1] + out[2]*out[2] + out[3]*out[3])
        if n > 0.0:
            out /= n
        return out

    theta = math.acos(dot)
    sin_theta = math.sin(theta)
    wa = math.sin((1.0 - fraction) * theta) / sin_theta
    wb = math.sin(fraction * theta) / sin_theta
    return wa * a + wb * b


def lerp_decomposed(start: DecomposedTransform, end: DecomposedTransform, fraction: float) -> DecomposedTransform:
    """
    Interpolate two decomposed transforms component by component.

    translation, scale, rotation (Euler), skew and perspective blend linearly;
    quaternion is slerped so it stays a valid rotation. `fraction` is not
    clamped.

    Returns:
        A new DecomposedTransform; neither input is modified.
    """
    quaternion = quaternion_slerp(
        as_vector(start.quaternion, 4, "Quaternion"),
        as_vector(end.quaternion, 4, "Quaternion"),
        float(fraction),
    )
    return DecomposedTransform(
        translation=lerp(start.translation, end.translation, fraction),
        scale=lerp(start.scale, end.scale, fraction),
        rotation=lerp(start.rotation, end.rotation, fraction),
        quaternion=quaternion,
        skew=Skew.from_array(lerp(start.skew, end.skew, fraction)),
        perspective=Perspective.from_array(lerp(start.perspective, end.perspective, fraction)),
    )


def lerp_matrix(start: ArrayLike, end: ArrayLike, fraction: float) -> ndarray:
    """
    Interpolate between two 4x4 matrices by decomposing both, blending the
    components and recomposing the result.

    Only meaningful when both matrices decompose. A matrix that cannot be
    decomposed contributes the all-zero default decomposition; callers that
    need something else must check for that case first.
    """
    return recompose(lerp_decomposed(decompose(start), decompose(end), fraction))
