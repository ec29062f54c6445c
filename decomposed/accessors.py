import numpy as np
from numpy import asarray as np_asarray
from numpy import float64 as np_float64
from numpy import array2string as np_array2string
from typing import Iterable, Iterator, Union


class _NamedVector:
    """
    Fixed-size float64 vector whose components are also reachable by name.

    Subclasses declare `_SIZE` and expose one property per named component.
    """
    __slots__ = ("values",)
    _SIZE: int

    def __init__(self, *components: float):
        self.values = np.array(components, dtype=np_float64)

    @classmethod
    def from_array(cls, values: Union[np.ndarray, Iterable[float]]):
        """
        Create an instance from any array-like of the right length.

        The values are copied; later edits to the source do not leak in.

        Raises:
            ValueError: if `values` does not have shape (_SIZE,).
        """
        values = np_asarray(values, dtype=np_float64)
        if values.shape != (cls._SIZE,):
            raise ValueError(
                f"{cls.__name__} must be a {cls._SIZE}D vector, got {values.shape}")
        instance = object.__new__(cls)
        instance.values = values.copy()
        return instance

    def copy(self):
        return self.__class__.from_array(self.values)

    def __array__(self, dtype=None, copy=None):
        if dtype is None:
            return self.values
        return self.values.astype(dtype)

    def __len__(self) -> int:
        return self._SIZE

    def __iter__(self) -> Iterator[float]:
        return iter(self.values.tolist())

    def __getitem__(self, index):
        return self.values[index]

    def __setitem__(self, index, value) -> None:
        self.values[index] = value

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, self.__class__):
            return NotImplemented
        return bool(np.array_equal(self.values, other.values))

    __hash__ = None

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({np_array2string(self.values, precision=6, separator=', ')})"


class Skew(_NamedVector):
    """
    Shear factors of a transform, one per axis pair.

    Index 0 is XY, 1 is XZ and 2 is YZ.
    """
    __slots__ = ()
    _SIZE = 3

    def __init__(self, XY: float = 0.0, XZ: float = 0.0, YZ: float = 0.0):
        super().__init__(XY, XZ, YZ)

    @property
    def XY(self) -> float:
        """Shear of the Y axis along X."""
        return float(self.values[0])

    @XY.setter
    def XY(self, value: float) -> None:
        self.values[0] = value

    @property
    def XZ(self) -> float:
        """Shear of the Z axis along X."""
        return float(self.values[1])

    @XZ.setter
    def XZ(self, value: float) -> None:
        self.values[1] = value

    @property
    def YZ(self) -> float:
        """Shear of the Z axis along Y."""
        return float(self.values[2])

    @YZ.setter
    def YZ(self, value: float) -> None:
        self.values[2] = value


class Perspective(_NamedVector):
    """
    The perspective row of a transform (bottom row of the column-vector matrix).

    m31..m34 address the four entries of row index 3: m31 = matrix[3, 0],
    m32 = matrix[3, 1], m33 = matrix[3, 2] and m34 = matrix[3, 3]. In
    row-vector field names (see `TransformationMatrix.from_fields`) these are
    m14, m24, m34 and m44. `x`, `y`, `z` and `w` alias the same slots.
    """
    __slots__ = ()
    _SIZE = 4

    def __init__(self, m31: float = 0.0, m32: float = 0.0, m33: float = 0.0, m34: float = 1.0):
        super().__init__(m31, m32, m33, m34)

    @property
    def m31(self) -> float:
        return float(self.values[0])

    @m31.setter
    def m31(self, value: float) -> None:
        self.values[0] = value

    @property
    def m32(self) -> float:
        return float(self.values[1])

    @m32.setter
    def m32(self, value: float) -> None:
        self.values[1] = value

    @property
    def m33(self) -> float:
        return float(self.values[2])

    @m33.setter
    def m33(self, value: float) -> None:
        self.values[2] = value

    @property
    def m34(self) -> float:
        """The homogeneous divisor; 1 for a perspective-free transform."""
        return float(self.values[3])

    @m34.setter
    def m34(self, value: float) -> None:
        self.values[3] = value

    x = m31
    y = m32
    z = m33
    w = m34
