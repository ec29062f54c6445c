# geometry.py
import math
from numpy import float64 as np_float64
from numpy import ndarray
import numpy as np
from numba import njit

from numba.core.errors import NumbaPerformanceWarning
import warnings
warnings.filterwarnings("ignore", category=NumbaPerformanceWarning)

# |cos(pitch)| at or below this is treated as gimbal lock. asin(±1) lands on
# ±pi/2 whose cosine is ~6e-17 rather than an exact zero.
GIMBAL_LOCK_EPSILON = 4.0 * np.finfo(np.float64).eps


@njit(cache=True)
def quaternion_to_rotation(quaternion: ndarray, w_last: bool = True) -> ndarray:
    """
    Convert a quaternion to a 3x3 rotation matrix.

    The quaternion can be provided in two formats:
    - If w_last is True (default), the quaternion is expected to be in the form [x, y, z, w].
    - If w_last is False, the quaternion should be in the form [w, x, y, z].

    The quaternion is assumed to be unit length. An all-zero quaternion maps
    to the identity matrix.

    Parameters:
        quaternion (ndarray): A 4-element array representing the quaternion.
        w_last (bool, optional): Determines the order of the quaternion components.

    Returns:
        ndarray: A 3x3 rotation matrix corresponding to the input quaternion.
    """
    if w_last:
        x, y, z, w = quaternion[0], quaternion[1], quaternion[2], quaternion[3]
    else:
        w, x, y, z = quaternion[0], quaternion[1], quaternion[2], quaternion[3]

    xx = x*x
    yy = y*y
    zz = z*z
    xy = x*y
    xz = x*z
    yz = y*z
    wx = w*x
    wy = w*y
    wz = w*z

    R = np.empty((3, 3), dtype=np_float64)
    R[0, 0] = 1 - 2*(yy + zz)
    R[0, 1] = 2*(xy - wz)
    R[0, 2] = 2*(xz + wy)

    R[1, 0] = 2*(xy + wz)
    R[1, 1] = 1 - 2*(xx + zz)
    R[1, 2] = 2*(yz - wx)

    R[2, 0] = 2*(xz - wy)
    R[2, 1] = 2*(yz + wx)
    R[2, 2] = 1 - 2*(xx + yy)
    return R


@njit(cache=True, error_model="numpy")
def rotation_to_quaternion(rotation: ndarray, w_last: bool = True) -> ndarray:
    """
    Converts a 3x3 rotation matrix to a normalized quaternion.

    Depending on the value of the trace of the rotation matrix, the algorithm selects an appropriate
    computation method to extract the quaternion components, ensuring numerical stability by normalizing
    the result.

    Parameters:
        rotation (array_like): A 3x3 orthonormal rotation matrix (det = +1).
        w_last (bool, optional): If True, the quaternion is returned as [x, y, z, w];
                                 otherwise as [w, x, y, z]. Default is True.

    Returns:
        numpy.ndarray: A 1D array of 4 floats representing the normalized quaternion.

    Example:
        >>> import numpy as np
        >>> q = rotation_to_quaternion(np.eye(3))
        >>> print(q)  # [0.0, 0.0, 0.0, 1.0]
    """
    a00, a01, a02 = rotation[0, 0], rotation[0, 1], rotation[0, 2]
    a10, a11, a12 = rotation[1, 0], rotation[1, 1], rotation[1, 2]
    a20, a21, a22 = rotation[2, 0], rotation[2, 1], rotation[2, 2]

    tr = a00 + a11 + a22

    if tr > 0.0:
        S = math.sqrt(tr + 1.0) * 2.0
        qw = 0.25 * S
        qx = (a21 - a12) / S
        qy = (a02 - a20) / S
        qz = (a10 - a01) / S
    elif a00 > a11 and a00 > a22:
        S = math.sqrt(1.0 + a00 - a11 - a22) * 2.0
        qw = (a21 - a12) / S
        qx = 0.25 * S
        qy = (a01 + a10) / S
        qz = (a02 + a20) / S
    elif a11 > a22:
        S = math.sqrt(1.0 + a11 - a00 - a22) * 2.0
        qw = (a02 - a20) / S
        qx = (a01 + a10) / S
        qy = 0.25 * S
        qz = (a12 + a21) / S
    else:
        S = math.sqrt(1.0 + a22 - a00 - a11) * 2.0
        qw = (a10 - a01) / S
        qx = (a02 + a20) / S
        qy = (a12 + a21) / S
        qz = 0.25 * S

    # normalize (guards against numerical drift)
    norm = math.sqrt(qx*qx + qy*qy + qz*qz + qw*qw)
    qx /= norm
    qy /= norm
    qz /= norm
    qw /= norm

    out = np.empty(4, dtype=np_float64)
    if w_last:
        out[0], out[1], out[2], out[3] = qx, qy, qz, qw
    else:
        out[0], out[1], out[2], out[3] = qw, qx, qy, qz
    return out


@njit(cache=True)
def rotation_to_euler(rotation: ndarray) -> ndarray:
    """
    Extract XYZ Euler angles (radians) from a 3x3 rotation matrix R = Rz @ Ry @ Rx.

    - y = asin(-R[2, 0]), with the argument clamped to [-1, 1].
    - x = atan2(R[2, 1], R[2, 2]) and z = atan2(R[1, 0], R[0, 0]) while cos(y) is non-zero.
    - At gimbal lock (cos(y) == 0, see GIMBAL_LOCK_EPSILON) x = atan2(-R[0, 2], R[1, 1])
      and z is pinned to 0.

    Returns:
        ndarray: [x, y, z]
    """
    sp = -rotation[2, 0]
    if sp > 1.0:
        sp = 1.0
    elif sp < -1.0:
        sp = -1.0

    out = np.empty(3, dtype=np_float64)
    out[1] = math.asin(sp)
    if abs(math.cos(out[1])) > GIMBAL_LOCK_EPSILON:
        out[0] = math.atan2(rotation[2, 1], rotation[2, 2])
        out[2] = math.atan2(rotation[1, 0], rotation[0, 0])
    else:
        out[0] = math.atan2(-rotation[0, 2], rotation[1, 1])
        out[2] = 0.0
    return out


@njit(cache=True)
def euler_to_rotation(x: float, y: float, z: float) -> ndarray:
    """
    Compute a rotation matrix from XYZ Euler angles in radians.

    The rotation is constructed as R = Rz(z) @ Ry(y) @ Rx(x), the inverse of
    `rotation_to_euler` away from gimbal lock.
    """
    sr, cr = math.sin(x), math.cos(x)
    sp, cp = math.sin(y), math.cos(y)
    sy, cy = math.sin(z), math.cos(z)

    R = np.empty((3, 3), dtype=np_float64)
    R[0, 0] = cy*cp
    R[0, 1] = cy*sp*sr - sy*cr
    R[0, 2] = cy*sp*cr + sy*sr

    R[1, 0] = sy*cp
    R[1, 1] = sy*sp*sr + cy*cr
    R[1, 2] = sy*sp*cr - cy*sr

    R[2, 0] = -sp
    R[2, 1] = cp*sr
    R[2, 2] = cp*cr
    return R


@njit(cache=True)
def euler_to_quaternion(x: float, y: float, z: float, w_last: bool = True) -> ndarray:
    """
    Converts XYZ Euler angles (radians) to the quaternion of Rz(z) @ Ry(y) @ Rx(x).

    Returns:
        ndarray: [qx, qy, qz, qw] when w_last is True, else [qw, qx, qy, qz].
    """
    sr, cr = math.sin(x*0.5), math.cos(x*0.5)
    sp, cp = math.sin(y*0.5), math.cos(y*0.5)
    sy, cy = math.sin(z*0.5), math.cos(z*0.5)

    # q = qz * qy * qx
    qw = cr*cp*cy + sr*sp*sy
    qx = sr*cp*cy - cr*sp*sy
    qy = cr*sp*cy + sr*cp*sy
    qz = cr*cp*sy - sr*sp*cy

    out = np.empty(4, dtype=np_float64)
    if w_last:
        out[0], out[1], out[2], out[3] = qx, qy, qz, qw
    else:
        out[0], out[1], out[2], out[3] = qw, qx, qy, qz
    return out


@njit(cache=True)
def quaternion_to_euler(quaternion: ndarray, w_last: bool = True) -> ndarray:
    """XYZ Euler angles (radians) of a unit quaternion."""
    return rotation_to_euler(quaternion_to_rotation(quaternion, w_last))
