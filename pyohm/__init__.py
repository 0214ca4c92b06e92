"""pyohm - JAX-based DC circuit solver.

This package provides two layers:
    - linalg: Dense LU factorization, linear solves and Newton-Raphson
    - dc: Modified Nodal Analysis assembly and DC operating-point analysis

Importing pyohm enables 64-bit floats in JAX; every buffer is float64.

Usage:
    from pyohm.dc import Network, R, VSource, ISource, analyze_dc
    from pyohm.linalg import Matrix, Vector, factorize, solve, solve_newton_raphson
"""

import jax

jax.config.update("jax_enable_x64", True)

from .errors import (  # noqa: E402
    ErrorCode,
    CircuitError,
    InvalidComponentError,
    InvalidCircuitError,
    NoGroundError,
    FloatingNodeError,
    UnsupportedAnalysisError,
    InvalidParameterError,
    SingularMatrixError,
    ConvergenceError,
)
from .options import SolverOptions, NewtonOptions  # noqa: E402
from . import linalg, dc  # noqa: E402

__version__ = "0.1.0"
__all__ = [
    "linalg",
    "dc",
    "ErrorCode",
    "CircuitError",
    "InvalidComponentError",
    "InvalidCircuitError",
    "NoGroundError",
    "FloatingNodeError",
    "UnsupportedAnalysisError",
    "InvalidParameterError",
    "SingularMatrixError",
    "ConvergenceError",
    "SolverOptions",
    "NewtonOptions",
    "__version__",
]
