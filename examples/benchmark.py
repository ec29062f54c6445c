from decomposed import TransformationMatrix, decompose, recompose, lerp_matrix
import timeit
import numpy as np
from scipy.spatial.transform import Rotation as R

if __name__ == "__main__":
    N = 100_000

    rotation = R.from_euler('xyz', [0.1, 0.2, 0.3]).as_quat()
    t = (TransformationMatrix()
         .applying_perspective([0, 0, -0.002, 1])
         .translated([1, 2, 3])
         .rotated(rotation)
         .skewed([0.1, 0.0, 0.2])
         .scaled([2, 1, 0.5]))
    other = TransformationMatrix().translated([-3, 0, 1])

    # warmup, compiles the kernels
    d = decompose(t.matrix)
    recompose(d)
    lerp_matrix(t.matrix, other.matrix, 0.5)

    print("creation: ", timeit.timeit(lambda: TransformationMatrix(), number=N))
    print("decompose: ", timeit.timeit(lambda: decompose(t.matrix), number=N))
    print("recompose: ", timeit.timeit(lambda: recompose(d), number=N))
    print("lerp matrix: ", timeit.timeit(
        lambda: lerp_matrix(t.matrix, other.matrix, 0.5), number=N))

    # getters decompose on every access
    print("translation getter: ", timeit.timeit(lambda: t.translation, number=N))
    print("rotation getter: ", timeit.timeit(lambda: t.rotation, number=N))

    # builders
    translation = np.array([1, 2, 3], dtype=np.float64)
    print("translated float64: ", timeit.timeit(lambda: t.translated(translation), number=N))
    translation = np.array([1, 2, 3])
    print("translated int: ", timeit.timeit(lambda: t.translated(translation), number=N))
    print("rotated: ", timeit.timeit(lambda: t.rotated(rotation), number=N))
    print("scaled: ", timeit.timeit(lambda: t.scaled([2, 2, 2]), number=N))
