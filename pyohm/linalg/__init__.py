"""pyohm dense linear algebra.

This module provides immutable Matrix/Vector value types over float64 JAX
buffers, LU factorization with partial pivoting, and a damped
Newton-Raphson driver built on the LU solver.

Building blocks:
    - Matrix, Vector: flat row-major value types
    - factorize, solve, solve_multiple, inverse, determinant: LU engine
    - solve_newton_raphson: nonlinear driver
"""

from .dense import (
    Matrix,
    Vector,
    add_vectors,
    subtract_vectors,
    scale_vector,
    negate_vector,
    dot,
    norm_l1,
    norm_l2,
    norm_inf,
    add_matrices,
    subtract_matrices,
    scale_matrix,
    negate_matrix,
    multiply_matrices,
    matvec,
    transpose,
    trace,
    frobenius_norm,
    is_symmetric,
    rank,
    condition_number,
    check_consistent,
    has_non_finite,
    allclose,
)
from .lu import (
    LUResult,
    factorize,
    extract_l,
    extract_u,
    permutation_matrix,
    determinant,
    solve,
    solve_multiple,
    inverse,
    solve_linear_system,
)
from .newton import NonlinearSystem, NewtonResult, NewtonState, solve_newton_raphson

__all__ = [
    # Value types
    "Matrix",
    "Vector",
    # Vector operations
    "add_vectors",
    "subtract_vectors",
    "scale_vector",
    "negate_vector",
    "dot",
    "norm_l1",
    "norm_l2",
    "norm_inf",
    # Matrix operations
    "add_matrices",
    "subtract_matrices",
    "scale_matrix",
    "negate_matrix",
    "multiply_matrices",
    "matvec",
    "transpose",
    "trace",
    "frobenius_norm",
    "is_symmetric",
    "rank",
    "condition_number",
    "check_consistent",
    "has_non_finite",
    "allclose",
    # LU
    "LUResult",
    "factorize",
    "extract_l",
    "extract_u",
    "permutation_matrix",
    "determinant",
    "solve",
    "solve_multiple",
    "inverse",
    "solve_linear_system",
    # Newton-Raphson
    "NonlinearSystem",
    "NewtonResult",
    "NewtonState",
    "solve_newton_raphson",
]
