"""DC operating-point analysis.

Solves the MNA system of a network once (linear DC is a single exact solve,
not an iteration) and turns the solution vector into per-node voltages and
per-component currents and powers.

Sign conventions:
    - Resistor current flows from its first to its second terminal
    - Voltage-source current is positive when it flows out of the positive
      terminal into the external circuit (the source delivers power)
    - Component power is positive when the component absorbs power, so the
      powers of a valid circuit sum to zero
"""

from __future__ import annotations
from contextlib import contextmanager
from typing import Callable, Mapping, NamedTuple, Sequence

import jax.numpy as jnp

from ..errors import InvalidCircuitError, InvalidParameterError, SingularMatrixError
from ..linalg import Matrix, factorize, rank, solve_linear_system, solve_multiple
from ..logging import logger
from ..options import SolverOptions
from .assembler import (
    NodeIndexMap,
    build_node_index_map,
    resolve_values,
    stamp_matrix,
    stamp_rhs,
    validate_network,
)
from .network import Network, Node, ComponentRef, ComponentSpec

SINGULAR_CIRCUIT_MESSAGE = (
    "Circuit produces a singular matrix. Check for parallel voltage sources, "
    "loops with only voltage sources, or disconnected subcircuits."
)


class OperatingPoint(NamedTuple):
    """DC solution: plain {name: float} mappings."""
    node_voltages: dict[str, float]
    branch_currents: dict[str, float]
    component_powers: dict[str, float]


class ConvergenceInfo(NamedTuple):
    converged: bool
    iterations: int
    max_iterations: int
    tolerance: float
    final_error: float


# A linear DC solve is one exact factorization, reported as one iteration
LINEAR_CONVERGENCE = ConvergenceInfo(
    converged=True, iterations=1, max_iterations=1, tolerance=0.0, final_error=0.0
)


class DCAnalysisResult(NamedTuple):
    operating_point: OperatingPoint
    convergence_info: ConvergenceInfo
    type: str = "dc"


class DCSweepResult(NamedTuple):
    """Operating points for each value of a swept source."""
    source: str
    sweep_values: tuple[float, ...]
    operating_points: tuple[OperatingPoint, ...]


class DCSolver(NamedTuple):
    """
    Compiled DC solver for a circuit.

    Topology is validated and indexed once; each call only stamps values,
    factorizes and solves.
    """
    network: Network
    index_map: NodeIndexMap
    operating_point: Callable  # (params, options) -> OperatingPoint
    analyze: Callable  # (params, options) -> DCAnalysisResult
    sweep: Callable  # (source, values, params, options) -> DCSweepResult
    v: Callable  # (op, node) -> float
    i: Callable  # (op, component_ref) -> float
    p: Callable  # (op, component_ref) -> float
    defaults: dict  # {component_name: default_value}


@contextmanager
def _circuit_singularity(A: Matrix):
    """Re-raise a linear-algebra singularity with circuit-level guidance."""
    try:
        yield
    except SingularMatrixError as err:
        logger.warning(
            f"DC analysis: singular {A.rows}x{A.cols} MNA matrix (rank {rank(A)})"
        )
        raise SingularMatrixError(SINGULAR_CIRCUIT_MESSAGE) from err


def _extract(x: Sequence[float], components: Sequence[ComponentSpec],
             index_map: NodeIndexMap, values: Mapping[str, float],
             ground: str) -> OperatingPoint:
    """Turn a solution vector into voltages, currents and powers."""
    node_voltages = {ground: 0.0}
    for i, name in enumerate(index_map.index_to_node):
        node_voltages[name] = float(x[i])

    branch_currents = {}
    component_powers = {}
    for comp in components:
        if comp.kind == "Ground":
            continue
        value = values[comp.name]
        vp, vq = (node_voltages.get(node, 0.0) for node in comp.nodes)

        if comp.kind == "R":
            current = (vp - vq) / value
            power = (vp - vq) * current
        elif comp.kind == "VSource":
            # MNA branch unknown flows into the positive terminal
            current = -float(x[index_map.branch_index(comp.name)])
            power = -value * current
        else:  # ISource
            current = value
            power = (vp - vq) * value

        branch_currents[comp.name] = current
        component_powers[comp.name] = power

    return OperatingPoint(node_voltages, branch_currents, component_powers)


def compile_network(network: Network) -> DCSolver:
    """
    Compile a Network into DC solver functions.

    Args:
        network: Network with components

    Returns:
        DCSolver with operating_point, analyze, sweep, v, i, p functions

    Raises:
        InvalidCircuitError, NoGroundError, FloatingNodeError,
        UnsupportedAnalysisError: topology problems
    """
    if network is None:
        raise InvalidCircuitError("Circuit cannot be None")
    components = network.components
    ground = network.ground
    validate_network(components, ground)
    index_map = build_node_index_map(components, ground)

    defaults = {c.name: c.value for c in components if c.value is not None}

    def operating_point(params: dict | None = None,
                        options: SolverOptions | None = None) -> OperatingPoint:
        """
        Solve the DC operating point.

        Args:
            params: Component values (merged over defaults)
            options: SolverOptions (pivot_tolerance is used)
        """
        options = SolverOptions() if options is None else options
        values = resolve_values(components, params)

        # Ground-only circuit: nothing to solve
        if index_map.system_size == 0:
            return _extract([], components, index_map, values, ground)

        A = stamp_matrix(components, index_map, values)
        b = stamp_rhs(components, index_map, values)
        logger.debug(f"dc: solving {A.rows}x{A.cols} MNA system")
        with _circuit_singularity(A):
            x = solve_linear_system(A, b, options)
        return _extract(x.to_list(), components, index_map, values, ground)

    def analyze(params: dict | None = None,
                options: SolverOptions | None = None) -> DCAnalysisResult:
        return DCAnalysisResult(operating_point(params, options), LINEAR_CONVERGENCE)

    def sweep(source: ComponentRef | str, values: Sequence[float],
              params: dict | None = None,
              options: SolverOptions | None = None) -> DCSweepResult:
        """
        Sweep the value of one independent source.

        Source values only enter b, so A is factorized once and every sweep
        point becomes one right-hand-side column of a single solve_multiple.
        """
        options = SolverOptions() if options is None else options
        name = source if isinstance(source, str) else source.name
        comp = network.component(name)
        if comp is None:
            raise InvalidParameterError(f"Component '{name}' not found", component_id=name)
        if comp.kind not in ("VSource", "ISource"):
            raise InvalidParameterError(
                f"Only independent sources can be swept, '{name}' is {comp.kind}",
                component_id=name,
            )
        sweep_values = tuple(float(v) for v in values)
        if not sweep_values:
            raise InvalidParameterError("Sweep needs at least one value", component_id=name)
        if not all(jnp.isfinite(v) for v in sweep_values):
            raise InvalidParameterError("Sweep values must be finite", component_id=name)

        base = {**(params or {}), name: sweep_values[0]}
        base_values = resolve_values(components, base)
        point_values = [{**base_values, name: v} for v in sweep_values]

        A = stamp_matrix(components, index_map, base_values)
        B = jnp.stack([stamp_rhs(components, index_map, pv).data for pv in point_values], axis=1)
        logger.debug(f"dc sweep: {name} over {len(sweep_values)} points")
        with _circuit_singularity(A):
            lu = factorize(A, options.pivot_tolerance)
            X = solve_multiple(lu, Matrix(index_map.system_size, len(sweep_values), B.reshape(-1)))

        columns = X.as_array().T.tolist()
        points = tuple(
            _extract(col, components, index_map, pv, ground)
            for col, pv in zip(columns, point_values)
        )
        return DCSweepResult(name, sweep_values, points)

    def v(op: OperatingPoint, node: Node | str) -> float:
        """Voltage at a node."""
        name = node if isinstance(node, str) else node.name
        if name not in op.node_voltages:
            raise InvalidParameterError(f"Node {name} not found", node_id=name)
        return op.node_voltages[name]

    def i(op: OperatingPoint, component_ref: ComponentRef | str) -> float:
        """Current through a component."""
        name = component_ref if isinstance(component_ref, str) else component_ref.name
        if name not in op.branch_currents:
            raise InvalidParameterError(f"Component {name} has no branch current",
                                        component_id=name)
        return op.branch_currents[name]

    def p(op: OperatingPoint, component_ref: ComponentRef | str) -> float:
        """Power absorbed by a component (negative when delivering)."""
        name = component_ref if isinstance(component_ref, str) else component_ref.name
        if name not in op.component_powers:
            raise InvalidParameterError(f"Component {name} has no power", component_id=name)
        return op.component_powers[name]

    return DCSolver(
        network=network,
        index_map=index_map,
        operating_point=operating_point,
        analyze=analyze,
        sweep=sweep,
        v=v,
        i=i,
        p=p,
        defaults=defaults,
    )


def analyze_dc(network: Network, options: SolverOptions | None = None,
               params: dict | None = None) -> DCAnalysisResult:
    """
    DC operating point of a network in one call.

    Example:
        result = analyze_dc(net)
        result.operating_point.node_voltages["n1"]
    """
    return compile_network(network).analyze(params, options)


def dc_sweep(network: Network, source: ComponentRef | str, values: Sequence[float],
             options: SolverOptions | None = None,
             params: dict | None = None) -> DCSweepResult:
    """Sweep one independent source over values; see DCSolver.sweep."""
    return compile_network(network).sweep(source, values, params, options)
