"""
LU factorization with partial pivoting and the solves built on it.

A square matrix is decomposed as P*A = L*U where:
    P is a row permutation (stored as a permutation vector)
    L is unit lower triangular (diagonal of ones is implicit)
    U is upper triangular

Both factors are packed into one matrix: the strict lower triangle holds the
elimination multipliers (L), the diagonal and above hold U.

Usage:
    lu = factorize(A)
    x = solve(lu, b)
    X = solve_multiple(lu, B)   # reuse one factorization for many RHS
"""

from __future__ import annotations
from typing import NamedTuple

import jax
import jax.numpy as jnp
from jax import Array, lax
from jax.scipy.linalg import solve_triangular

from ..errors import InvalidParameterError, SingularMatrixError
from ..logging import logger
from ..options import SolverOptions
from .dense import Matrix, Vector, check_consistent, has_non_finite

DEFAULT_PIVOT_TOLERANCE = SolverOptions().pivot_tolerance


class LUResult(NamedTuple):
    """
    Immutable snapshot of a factorization.

    Attributes:
        lu: Packed L (strictly lower) and U (diagonal and above)
        permutation: permutation[i] is the original row now at pivoted row i
        swap_count: Number of row transpositions (sign of the determinant)
        size: System dimension n
        singular: True if some pivot column fell below the pivot tolerance;
            the contents of lu are then not a usable factorization
    """
    lu: Matrix
    permutation: Array  # (size,) int
    swap_count: int
    size: int
    singular: bool


@jax.jit
def _eliminate(a: Array, pivot_tolerance: Array):
    """
    Gaussian elimination with partial pivoting over all columns.

    Columns whose largest candidate pivot is below pivot_tolerance (or is
    exactly zero) are flagged and left un-eliminated: no swap, no multipliers.

    Returns (packed_lu, permutation, swap_count, singular, singular_columns).
    """
    n = a.shape[0]
    rows = jnp.arange(n)

    def body(k, state):
        lu, perm, swaps, singular, bad_cols = state

        # argmax returns the first maximal index, so ties keep the lowest row
        candidates = jnp.where(rows >= k, jnp.abs(lu[:, k]), -1.0)
        pivot_row = jnp.argmax(candidates)
        max_val = candidates[pivot_row]
        skip = (max_val < pivot_tolerance) | (max_val == 0.0)

        pivot_row = jnp.where(skip, k, pivot_row)
        swaps = swaps + (pivot_row != k).astype(swaps.dtype)
        order = rows.at[k].set(pivot_row).at[pivot_row].set(k)
        lu = lu[order]
        perm = perm[order]

        pivot = jnp.where(skip, 1.0, lu[k, k])
        eliminate = (rows > k) & ~skip
        multipliers = jnp.where(eliminate, lu[:, k] / pivot, 0.0)

        trailing = (rows > k).astype(lu.dtype)
        lu = lu - jnp.outer(multipliers, lu[k] * trailing)
        lu = lu.at[:, k].set(jnp.where(eliminate, multipliers, lu[:, k]))

        return lu, perm, swaps, singular | skip, bad_cols.at[k].set(skip)

    init = (
        a,
        rows,
        jnp.array(0, dtype=jnp.int32),
        jnp.array(False),
        jnp.zeros(n, dtype=bool),
    )
    return lax.fori_loop(0, n, body, init)


def factorize(A: Matrix, pivot_tolerance: float = DEFAULT_PIVOT_TOLERANCE) -> LUResult:
    """
    Factorize a square matrix with partial pivoting.

    Does not raise on singularity; the result carries a singular flag that
    every consumer checks.

    Args:
        A: Square, non-empty matrix with finite entries (never modified)
        pivot_tolerance: Pivot magnitude below which a column is singular

    Returns:
        LUResult
    """
    if A is None:
        raise InvalidParameterError("Matrix cannot be None")
    check_consistent(A)
    if A.rows != A.cols:
        raise InvalidParameterError(f"Matrix must be square: got {A.rows}x{A.cols}")
    if A.rows == 0:
        raise InvalidParameterError("Matrix cannot be empty (0x0)")
    if has_non_finite(A):
        raise InvalidParameterError("Matrix contains NaN or Infinity")
    if not pivot_tolerance >= 0 or not jnp.isfinite(pivot_tolerance):
        raise InvalidParameterError(
            f"Pivot tolerance must be finite and non-negative, got {pivot_tolerance}"
        )

    n = A.rows
    packed, perm, swaps, singular, bad_cols = _eliminate(
        A.as_array(), jnp.asarray(pivot_tolerance, dtype=jnp.float64)
    )
    singular = bool(singular)
    if singular:
        logger.debug(
            f"factorize: {n}x{n} matrix singular at pivot columns "
            f"{jnp.nonzero(bad_cols)[0].tolist()} (tolerance {pivot_tolerance:g})"
        )

    return LUResult(
        lu=Matrix(n, n, packed.reshape(-1)),
        permutation=perm,
        swap_count=int(swaps),
        size=n,
        singular=singular,
    )


def extract_l(lu: LUResult) -> Matrix:
    """Unit lower triangular factor L."""
    if lu is None:
        raise InvalidParameterError("LU result cannot be None")
    n = lu.size
    L = jnp.tril(lu.lu.as_array(), -1) + jnp.eye(n, dtype=jnp.float64)
    return Matrix(n, n, L.reshape(-1))


def extract_u(lu: LUResult) -> Matrix:
    """Upper triangular factor U."""
    if lu is None:
        raise InvalidParameterError("LU result cannot be None")
    n = lu.size
    return Matrix(n, n, jnp.triu(lu.lu.as_array()).reshape(-1))


def permutation_matrix(lu: LUResult) -> Matrix:
    """Explicit P such that P @ A == L @ U."""
    n = lu.size
    P = jnp.eye(n, dtype=jnp.float64)[lu.permutation]
    return Matrix(n, n, P.reshape(-1))


def determinant(lu: LUResult) -> float:
    """det(A) = (-1)^swap_count * prod(diag(U)); exactly 0.0 when singular."""
    if lu is None:
        raise InvalidParameterError("LU result cannot be None")
    if lu.singular:
        return 0.0
    sign = 1.0 if lu.swap_count % 2 == 0 else -1.0
    return sign * float(jnp.prod(jnp.diagonal(lu.lu.as_array())))


@jax.jit
def _substitute(packed: Array, permutation: Array, b: Array) -> Array:
    """Apply P, then forward substitution with unit L, then back substitution with U."""
    pb = b[permutation]
    y = solve_triangular(jnp.tril(packed, -1), pb, lower=True, unit_diagonal=True)
    return solve_triangular(jnp.triu(packed), y, lower=False)


def _require_usable(lu: LUResult, what: str):
    if lu.singular:
        raise SingularMatrixError(
            f"Matrix is singular or near-singular, cannot {what}"
        )


def solve(lu: LUResult, b: Vector) -> Vector:
    """
    Solve A x = b for the matrix A that produced lu.

    Raises:
        InvalidParameterError: lu or b missing, or len(b) != lu.size
        SingularMatrixError: lu is flagged singular
    """
    if lu is None or b is None:
        raise InvalidParameterError("LU result and vector cannot be None")
    check_consistent(b)
    _require_usable(lu, "solve linear system (no unique solution)")
    if b.length != lu.size:
        raise InvalidParameterError(
            f"Vector length must match matrix size: {b.length} vs {lu.size}"
        )
    x = _substitute(lu.lu.as_array(), lu.permutation, b.data)
    return Vector(lu.size, x)


def solve_multiple(lu: LUResult, B: Matrix) -> Matrix:
    """
    Solve A X = B column by column with one factorization.

    Each column of B is an independent right-hand side; column j of the
    result solves against column j of B.
    """
    if lu is None or B is None:
        raise InvalidParameterError("LU result and matrix cannot be None")
    check_consistent(B)
    _require_usable(lu, "solve linear system (no unique solution)")
    if B.rows != lu.size:
        raise InvalidParameterError(
            f"Matrix rows must match system size: {B.rows} vs {lu.size}"
        )
    packed = lu.lu.as_array()
    X = jax.vmap(
        lambda col: _substitute(packed, lu.permutation, col),
        in_axes=1,
        out_axes=1,
    )(B.as_array())
    return Matrix(lu.size, B.cols, X.reshape(-1))


def inverse(lu: LUResult) -> Matrix:
    """A^-1 by solving against each column of the identity."""
    if lu is None:
        raise InvalidParameterError("LU result cannot be None")
    _require_usable(lu, "compute inverse")
    return solve_multiple(lu, Matrix.identity(lu.size))


def solve_linear_system(A: Matrix, b: Vector, options: SolverOptions | None = None) -> Vector:
    """
    Factorize and solve in one call.

    For repeated solves against the same A, call factorize once and reuse
    the LUResult instead.
    """
    if options is None:
        options = SolverOptions()
    lu = factorize(A, options.pivot_tolerance)
    return solve(lu, b)
