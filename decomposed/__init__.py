"""
Decomposed: break 4x4 homogeneous transforms into translation, scale, rotation, skew and perspective,
recompose them, and interpolate between transforms through those components.
"""

import logging

__version__ = version = "0.1.0"

# exposing the public API of the package
from decomposed.accessors import Skew, Perspective
from decomposed.decomposition import (
    DecomposedTransform,
    DEFAULT_DECOMPOSED,
    decompose,
    recompose,
)
from decomposed.interpolation import (
    lerp,
    lerp_decomposed,
    lerp_matrix,
    quaternion_slerp,
)
from decomposed.operators import (
    identity,
    zero,
    translated,
    scaled,
    rotated,
    skewed,
    applying_perspective,
)
from decomposed.transformation_matrix import TransformationMatrix

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "Skew",
    "Perspective",
    "DecomposedTransform",
    "DEFAULT_DECOMPOSED",
    "decompose",
    "recompose",
    "lerp",
    "lerp_decomposed",
    "lerp_matrix",
    "quaternion_slerp",
    "identity",
    "zero",
    "translated",
    "scaled",
    "rotated",
    "skewed",
    "applying_perspective",
    "TransformationMatrix",
]
