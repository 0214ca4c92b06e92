"""Error kinds raised by the solver stack and the DC analysis front end."""

from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    """Machine-readable error kinds."""
    INVALID_COMPONENT = "INVALID_COMPONENT"
    INVALID_CIRCUIT = "INVALID_CIRCUIT"
    NO_GROUND = "NO_GROUND"
    FLOATING_NODE = "FLOATING_NODE"
    SINGULAR_MATRIX = "SINGULAR_MATRIX"
    CONVERGENCE_FAILED = "CONVERGENCE_FAILED"
    INVALID_PARAMETER = "INVALID_PARAMETER"
    UNSUPPORTED_ANALYSIS = "UNSUPPORTED_ANALYSIS"


class CircuitError(Exception):
    """Base exception for pyohm errors.

    Args:
        message: Human-readable description
        component_id: Name of the offending component, if any
        node_id: Name of the offending node, if any
    """
    code: ErrorCode

    def __init__(self, message: str, *, component_id: str | None = None,
                 node_id: str | None = None):
        super().__init__(message)
        self.message = message
        self.component_id = component_id
        self.node_id = node_id


class InvalidComponentError(CircuitError):
    """Raised by component factories for malformed component definitions."""
    code = ErrorCode.INVALID_COMPONENT


class InvalidCircuitError(CircuitError):
    """Raised for a missing network or one without components."""
    code = ErrorCode.INVALID_CIRCUIT


class NoGroundError(CircuitError):
    """Raised when the declared ground node is not part of the topology."""
    code = ErrorCode.NO_GROUND


class FloatingNodeError(CircuitError):
    """Raised when a non-ground node has fewer than two attachments."""
    code = ErrorCode.FLOATING_NODE


class UnsupportedAnalysisError(CircuitError):
    """Raised when a component kind cannot take part in DC analysis."""
    code = ErrorCode.UNSUPPORTED_ANALYSIS


class InvalidParameterError(CircuitError):
    """Raised for malformed numeric input or invalid solver configuration."""
    code = ErrorCode.INVALID_PARAMETER


class SingularMatrixError(CircuitError):
    """Raised when solving against a singular or near-singular system."""
    code = ErrorCode.SINGULAR_MATRIX


class ConvergenceError(CircuitError):
    """Raised when Newton-Raphson stops without converging.

    Attributes:
        state: Terminal NewtonState (FAILED_SINGULAR or FAILED_MAX_ITERATIONS)
        iteration: 1-based iteration at which the failure happened
        residual_norm: Infinity norm of the last residual
        update_norm: Largest absolute step of the last update
    """
    code = ErrorCode.CONVERGENCE_FAILED

    def __init__(self, message: str, *, state=None, iteration: int | None = None,
                 residual_norm: float | None = None, update_norm: float | None = None):
        super().__init__(message)
        self.state = state
        self.iteration = iteration
        self.residual_norm = residual_norm
        self.update_norm = update_norm
