"""Dense Matrix and Vector value types (immutable/functional style).

Both types wrap a flat, row-major float64 JAX buffer plus shape metadata.
JAX arrays cannot be written in place, so every operation here returns a new
value and never touches its inputs.
"""

from __future__ import annotations
from typing import NamedTuple, Sequence

import jax.numpy as jnp
from jax import Array

from ..errors import InvalidParameterError


class Vector(NamedTuple):
    """1-D numeric buffer."""
    length: int
    data: Array  # (length,) float64

    @classmethod
    def from_values(cls, values) -> Vector:
        """Build a Vector from any 1-D sequence or array."""
        data = jnp.asarray(values, dtype=jnp.float64)
        if data.ndim != 1:
            raise InvalidParameterError(f"Vector data must be 1-D, got shape {data.shape}")
        return cls(int(data.shape[0]), data)

    @classmethod
    def zeros(cls, length: int) -> Vector:
        return cls(length, jnp.zeros(length, dtype=jnp.float64))

    def to_list(self) -> list[float]:
        return [float(x) for x in self.data]


class Matrix(NamedTuple):
    """
    2-D numeric buffer stored flat in row-major order.

    Invariant: data.shape == (rows * cols,)

    Build with the classmethods rather than the raw constructor:
        A = Matrix.from_rows([[2.0, 1.0], [4.0, 3.0]])
        I = Matrix.identity(3)
    """
    rows: int
    cols: int
    data: Array  # (rows * cols,) float64

    @classmethod
    def from_array(cls, array) -> Matrix:
        """Build a Matrix from a 2-D array-like."""
        arr = jnp.asarray(array, dtype=jnp.float64)
        if arr.ndim != 2:
            raise InvalidParameterError(f"Matrix data must be 2-D, got shape {arr.shape}")
        rows, cols = arr.shape
        return cls(int(rows), int(cols), arr.reshape(-1))

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[float]]) -> Matrix:
        """Build a Matrix from a list of equal-length rows."""
        widths = {len(r) for r in rows}
        if len(widths) > 1:
            raise InvalidParameterError("All matrix rows must have the same length")
        if not rows:
            return cls.zeros(0, 0)
        return cls.from_array(rows)

    @classmethod
    def zeros(cls, rows: int, cols: int) -> Matrix:
        return cls(rows, cols, jnp.zeros(rows * cols, dtype=jnp.float64))

    @classmethod
    def identity(cls, n: int) -> Matrix:
        return cls(n, n, jnp.eye(n, dtype=jnp.float64).reshape(-1))

    def as_array(self) -> Array:
        """2-D (rows, cols) view of the buffer."""
        return self.data.reshape(self.rows, self.cols)

    def get(self, i: int, j: int) -> float:
        return float(self.data[i * self.cols + j])

    def row(self, i: int) -> Vector:
        return Vector(self.cols, self.as_array()[i])

    def column(self, j: int) -> Vector:
        return Vector(self.rows, self.as_array()[:, j])

    def to_list(self) -> list[list[float]]:
        return [[float(x) for x in r] for r in self.as_array()]


# ---------------------------------------------------------------------------
# Input checks
# ---------------------------------------------------------------------------

def check_consistent(x: Matrix | Vector):
    """Raise InvalidParameterError unless the buffer matches the declared shape."""
    if isinstance(x, Matrix):
        expected = (x.rows * x.cols,)
        declared = f"{x.rows}x{x.cols}"
    else:
        expected = (x.length,)
        declared = f"length {x.length}"
    if jnp.shape(x.data) != expected:
        raise InvalidParameterError(
            f"Data shape {jnp.shape(x.data)} does not match declared {declared}"
        )


def _require(value, what: str):
    if value is None:
        raise InvalidParameterError(f"{what} cannot be None")
    if isinstance(value, (Matrix, Vector)):
        check_consistent(value)


def _require_same_length(v1: Vector, v2: Vector):
    _require(v1, "Vector")
    _require(v2, "Vector")
    if v1.length != v2.length:
        raise InvalidParameterError(
            f"Vector dimensions must match: {v1.length} vs {v2.length}"
        )


def _require_same_shape(A: Matrix, B: Matrix):
    _require(A, "Matrix")
    _require(B, "Matrix")
    if A.rows != B.rows or A.cols != B.cols:
        raise InvalidParameterError(
            f"Matrix dimensions must match: {A.rows}x{A.cols} vs {B.rows}x{B.cols}"
        )


def _require_finite_scalar(scalar: float):
    if not jnp.isfinite(scalar):
        raise InvalidParameterError(f"Scalar must be finite, got {scalar}")


# ---------------------------------------------------------------------------
# Vector operations
# ---------------------------------------------------------------------------

def add_vectors(v1: Vector, v2: Vector) -> Vector:
    _require_same_length(v1, v2)
    return Vector(v1.length, v1.data + v2.data)


def subtract_vectors(v1: Vector, v2: Vector) -> Vector:
    _require_same_length(v1, v2)
    return Vector(v1.length, v1.data - v2.data)


def scale_vector(v: Vector, scalar: float) -> Vector:
    _require(v, "Vector")
    _require_finite_scalar(scalar)
    return Vector(v.length, v.data * scalar)


def negate_vector(v: Vector) -> Vector:
    _require(v, "Vector")
    return Vector(v.length, -v.data)


def dot(v1: Vector, v2: Vector) -> float:
    _require_same_length(v1, v2)
    return float(jnp.dot(v1.data, v2.data))


def norm_l1(v: Vector) -> float:
    _require(v, "Vector")
    return float(jnp.sum(jnp.abs(v.data)))


def norm_l2(v: Vector) -> float:
    """
    Euclidean norm, scaled by the largest magnitude.

    Dividing through by max|v_i| before squaring keeps the sum of squares
    from overflowing for entries near the float64 limit.
    """
    _require(v, "Vector")
    if v.length == 0:
        return 0.0
    max_abs = jnp.max(jnp.abs(v.data))
    if max_abs == 0:
        return 0.0
    scaled = v.data / max_abs
    return float(max_abs * jnp.sqrt(jnp.sum(scaled * scaled)))


def norm_inf(v: Vector) -> float:
    """Maximum absolute element (0 for an empty vector)."""
    _require(v, "Vector")
    if v.length == 0:
        return 0.0
    return float(jnp.max(jnp.abs(v.data)))


# ---------------------------------------------------------------------------
# Matrix operations
# ---------------------------------------------------------------------------

def add_matrices(A: Matrix, B: Matrix) -> Matrix:
    _require_same_shape(A, B)
    return Matrix(A.rows, A.cols, A.data + B.data)


def subtract_matrices(A: Matrix, B: Matrix) -> Matrix:
    _require_same_shape(A, B)
    return Matrix(A.rows, A.cols, A.data - B.data)


def scale_matrix(A: Matrix, scalar: float) -> Matrix:
    _require(A, "Matrix")
    _require_finite_scalar(scalar)
    return Matrix(A.rows, A.cols, A.data * scalar)


def negate_matrix(A: Matrix) -> Matrix:
    _require(A, "Matrix")
    return Matrix(A.rows, A.cols, -A.data)


def multiply_matrices(A: Matrix, B: Matrix) -> Matrix:
    """Matrix product A @ B."""
    _require(A, "Matrix")
    _require(B, "Matrix")
    if A.cols != B.rows:
        raise InvalidParameterError(
            f"Cannot multiply {A.rows}x{A.cols} by {B.rows}x{B.cols}"
        )
    product = A.as_array() @ B.as_array()
    return Matrix(A.rows, B.cols, product.reshape(-1))


def matvec(A: Matrix, v: Vector) -> Vector:
    """Matrix-vector product A @ v."""
    _require(A, "Matrix")
    _require(v, "Vector")
    if A.cols != v.length:
        raise InvalidParameterError(
            f"Cannot multiply {A.rows}x{A.cols} matrix by vector of length {v.length}"
        )
    return Vector(A.rows, A.as_array() @ v.data)


def transpose(A: Matrix) -> Matrix:
    _require(A, "Matrix")
    return Matrix(A.cols, A.rows, A.as_array().T.reshape(-1))


def trace(A: Matrix) -> float:
    _require(A, "Matrix")
    if A.rows != A.cols:
        raise InvalidParameterError(f"Trace requires a square matrix, got {A.rows}x{A.cols}")
    return float(jnp.trace(A.as_array()))


def frobenius_norm(A: Matrix) -> float:
    """Frobenius norm, scaled like norm_l2."""
    _require(A, "Matrix")
    return norm_l2(Vector(A.rows * A.cols, A.data))


def is_symmetric(A: Matrix, tolerance: float = 0.0) -> bool:
    _require(A, "Matrix")
    if A.rows != A.cols:
        return False
    M = A.as_array()
    return bool(jnp.all(jnp.abs(M - M.T) <= tolerance))


def rank(A: Matrix) -> int:
    """Numerical rank from the singular values (jnp.linalg.matrix_rank default cutoff)."""
    _require(A, "Matrix")
    if A.rows == 0 or A.cols == 0:
        return 0
    return int(jnp.linalg.matrix_rank(A.as_array()))


def condition_number(A: Matrix) -> float:
    """
    2-norm condition number sigma_max / sigma_min.

    inf for a singular square matrix.
    """
    _require(A, "Matrix")
    if A.rows != A.cols or A.rows == 0:
        raise InvalidParameterError(
            f"Condition number requires a non-empty square matrix, got {A.rows}x{A.cols}"
        )
    s = jnp.linalg.svd(A.as_array(), compute_uv=False)
    if s[-1] == 0:
        return float("inf")
    return float(s[0] / s[-1])


def has_non_finite(x: Matrix | Vector) -> bool:
    """True if any entry is NaN or +/-inf."""
    return bool(jnp.any(~jnp.isfinite(x.data)))


def allclose(x: Matrix | Vector, y: Matrix | Vector, tolerance: float = 0.0) -> bool:
    """Element-wise |x - y| <= tolerance for values of identical shape."""
    if type(x) is not type(y) or x.data.shape != y.data.shape:
        return False
    if isinstance(x, Matrix) and (x.rows, x.cols) != (y.rows, y.cols):
        return False
    return bool(jnp.all(jnp.abs(x.data - y.data) <= tolerance))
