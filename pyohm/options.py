"""Solver configuration records.

Both records are immutable NamedTuples. Override individual fields by
keyword construction, e.g. ``SolverOptions(pivot_tolerance=1e-15)``, or with
``options._replace(...)``.
"""

from __future__ import annotations
from typing import NamedTuple


class NewtonOptions(NamedTuple):
    """Configuration for the Newton-Raphson driver.

    Attributes:
        max_iterations: Hard cutoff on the number of iterations
        absolute_tolerance: Threshold for both the residual and update norms
        relative_tolerance: Accepted for API compatibility, not consulted
            by the convergence check
        damping_factor: Step scale in (0, 1]; 1.0 is an undamped Newton step
        pivot_tolerance: Pivot threshold for the inner linear solves
    """
    max_iterations: int = 100
    absolute_tolerance: float = 1e-12
    relative_tolerance: float = 1e-3
    damping_factor: float = 1.0
    pivot_tolerance: float = 1e-13


class SolverOptions(NamedTuple):
    """Configuration for linear and DC solves.

    Attributes:
        max_iterations: Iteration cap for iterative solves
        absolute_tolerance: Absolute convergence tolerance
        relative_tolerance: Relative convergence tolerance (currently unused)
        pivot_tolerance: Pivot magnitude below which a column is singular
    """
    max_iterations: int = 100
    absolute_tolerance: float = 1e-12
    relative_tolerance: float = 1e-3
    pivot_tolerance: float = 1e-13

    def newton(self, damping_factor: float = 1.0) -> NewtonOptions:
        """Derive Newton-Raphson options sharing these tolerances."""
        return NewtonOptions(
            max_iterations=self.max_iterations,
            absolute_tolerance=self.absolute_tolerance,
            relative_tolerance=self.relative_tolerance,
            damping_factor=damping_factor,
            pivot_tolerance=self.pivot_tolerance,
        )


DEFAULT_SOLVER_OPTIONS = SolverOptions()
DEFAULT_NEWTON_OPTIONS = NewtonOptions()
