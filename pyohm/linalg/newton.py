"""Damped Newton-Raphson driver for nonlinear systems F(x) = 0.

Each iteration linearizes the system and solves
    J(x_k) * delta = -F(x_k)
    x_{k+1} = x_k + damping_factor * delta
with the LU solver.

The loop is plain Python: every iteration depends on the previous solution
and the user's residual/Jacobian callables are arbitrary Python code.
"""

from __future__ import annotations
from enum import Enum
from typing import Callable, NamedTuple

import jax.numpy as jnp

from ..errors import ConvergenceError, InvalidParameterError, SingularMatrixError
from ..logging import logger
from ..options import NewtonOptions, SolverOptions
from .dense import Matrix, Vector, check_consistent, negate_vector, norm_inf
from .lu import solve_linear_system


class NewtonState(Enum):
    """Lifecycle of one solve_newton_raphson call."""
    INITIALIZED = "initialized"
    ITERATING = "iterating"
    CONVERGED = "converged"
    FAILED_SINGULAR = "failed_singular"
    FAILED_MAX_ITERATIONS = "failed_max_iterations"


class NonlinearSystem(NamedTuple):
    """
    A nonlinear system F(x) = 0 of dimension size.

    Example (f(x) = x^2 - 2):
        system = NonlinearSystem(
            residual=lambda x: Vector(1, x.data ** 2 - 2.0),
            jacobian=lambda x: Matrix(1, 1, 2.0 * x.data),
            size=1,
        )
    """
    residual: Callable[[Vector], Vector]
    jacobian: Callable[[Vector], Matrix]
    size: int


class NewtonResult(NamedTuple):
    """Result of a converged Newton-Raphson solve."""
    solution: Vector
    converged: bool
    iterations: int
    final_residual_norm: float
    final_update_norm: float


def _validate(system, initial_guess, opts: NewtonOptions):
    if system is None:
        raise InvalidParameterError("System cannot be None")
    if initial_guess is None:
        raise InvalidParameterError("Initial guess cannot be None")
    check_consistent(initial_guess)
    if initial_guess.length != system.size:
        raise InvalidParameterError(
            f"Initial guess dimension ({initial_guess.length}) must match "
            f"system size ({system.size})"
        )
    if not 0.0 < opts.damping_factor <= 1.0:
        raise InvalidParameterError(
            f"Damping factor must be in range (0, 1], got {opts.damping_factor}"
        )
    if (isinstance(opts.max_iterations, bool) or not isinstance(opts.max_iterations, int)
            or opts.max_iterations <= 0):
        raise InvalidParameterError(
            f"max_iterations must be a positive integer, got {opts.max_iterations!r}"
        )
    for name in ("absolute_tolerance", "relative_tolerance", "pivot_tolerance"):
        value = getattr(opts, name)
        if not jnp.isfinite(value) or value < 0:
            raise InvalidParameterError(f"{name} must be finite and non-negative, got {value}")


def _check_residual(F, size: int) -> Vector:
    if not isinstance(F, Vector):
        raise InvalidParameterError(f"Residual must return a Vector, got {type(F).__name__}")
    check_consistent(F)
    if F.length != size:
        raise InvalidParameterError(
            f"Residual length ({F.length}) must match system size ({size})"
        )
    return F


def _check_jacobian(J, size: int) -> Matrix:
    if not isinstance(J, Matrix):
        raise InvalidParameterError(f"Jacobian must return a Matrix, got {type(J).__name__}")
    check_consistent(J)
    if (J.rows, J.cols) != (size, size):
        raise InvalidParameterError(
            f"Jacobian shape ({J.rows}x{J.cols}) must be {size}x{size}"
        )
    return J


def solve_newton_raphson(
    system: NonlinearSystem,
    initial_guess: Vector,
    options: NewtonOptions | None = None,
) -> NewtonResult:
    """
    Solve F(x) = 0 from initial_guess.

    Convergence requires both the largest absolute step and the infinity norm
    of the residual to fall below absolute_tolerance. relative_tolerance is
    not consulted.

    Args:
        system: Residual/Jacobian pair
        initial_guess: Starting point x0 (never modified)
        options: NewtonOptions (defaults if None)

    Returns:
        NewtonResult with converged=True

    Raises:
        InvalidParameterError: bad system, guess, or options
        ConvergenceError: singular Jacobian or max_iterations exhausted
    """
    opts = NewtonOptions() if options is None else options
    _validate(system, initial_guess, opts)
    linear_opts = SolverOptions(pivot_tolerance=opts.pivot_tolerance)

    x = Vector(initial_guess.length, jnp.asarray(initial_guess.data, dtype=jnp.float64))

    F = _check_residual(system.residual(x), system.size)
    residual_norm = norm_inf(F)

    # Already at a solution: no Jacobian evaluation needed
    if residual_norm < opts.absolute_tolerance:
        logger.debug(f"newton: initial guess already converged (|F|={residual_norm:.3e})")
        return NewtonResult(x, True, 0, residual_norm, 0.0)

    update_norm = 0.0

    for iteration in range(1, opts.max_iterations + 1):
        J = _check_jacobian(system.jacobian(x), system.size)
        try:
            delta = solve_linear_system(J, negate_vector(F), linear_opts)
        except SingularMatrixError as err:
            raise ConvergenceError(
                f"Newton-Raphson failed: singular Jacobian at iteration {iteration}",
                state=NewtonState.FAILED_SINGULAR,
                iteration=iteration,
                residual_norm=residual_norm,
                update_norm=update_norm,
            ) from err

        step = opts.damping_factor * delta.data
        x = Vector(x.length, x.data + step)
        update_norm = float(jnp.max(jnp.abs(step))) if x.length else 0.0

        F = _check_residual(system.residual(x), system.size)
        residual_norm = norm_inf(F)
        logger.debug(
            f"newton: iter {iteration}: |F|={residual_norm:.3e} |dx|={update_norm:.3e}"
        )

        if update_norm < opts.absolute_tolerance and residual_norm < opts.absolute_tolerance:
            return NewtonResult(x, True, iteration, residual_norm, update_norm)

    raise ConvergenceError(
        f"Newton-Raphson did not converge after {opts.max_iterations} iterations "
        f"(residual: {residual_norm:.3e}, update: {update_norm:.3e})",
        state=NewtonState.FAILED_MAX_ITERATIONS,
        iteration=opts.max_iterations,
        residual_norm=residual_norm,
        update_norm=update_norm,
    )
