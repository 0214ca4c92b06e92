"""MNA (Modified Nodal Analysis) assembly for DC circuits.

The system A x = b has one row per non-ground node followed by one row per
voltage source:

    x = [V(node_0) ... V(node_{n-1}), I(vs_0) ... I(vs_{m-1})]

Node rows are assigned in sorted node-name order and voltage-source rows in
component-list order, so equivalent topologies assemble to identical systems.
Ground has no row; stamps that would land on it are dropped.
"""

from __future__ import annotations
from collections import Counter
from typing import Iterable, Mapping, NamedTuple, Sequence

import jax.numpy as jnp

from ..errors import (
    FloatingNodeError,
    InvalidCircuitError,
    InvalidParameterError,
    NoGroundError,
    UnsupportedAnalysisError,
)
from ..linalg import Matrix, Vector
from ..logging import logger
from .components import check_resistance
from .network import ComponentSpec

SUPPORTED_KINDS = ("R", "VSource", "ISource", "Ground")


class NodeIndexMap(NamedTuple):
    """Matrix index bookkeeping for one assembly."""
    node_to_index: dict[str, int]
    index_to_node: tuple[str, ...]  # sorted non-ground node names
    voltage_source_ids: tuple[str, ...]  # component-list order

    @property
    def num_nodes(self) -> int:
        return len(self.index_to_node)

    @property
    def num_voltage_sources(self) -> int:
        return len(self.voltage_source_ids)

    @property
    def system_size(self) -> int:
        return self.num_nodes + self.num_voltage_sources

    def branch_index(self, source_name: str) -> int:
        """MNA row/column of a voltage source's branch current."""
        return self.num_nodes + self.voltage_source_ids.index(source_name)


class MNASystem(NamedTuple):
    """Assembled linear system."""
    A: Matrix
    b: Vector
    index_map: NodeIndexMap


def validate_network(components: Sequence[ComponentSpec] | None, ground: str) -> None:
    """
    Topology checks run before any numerical work.

    Raises, in this order of precedence:
        InvalidCircuitError: no component list, or an empty one
        NoGroundError: no component touches the ground node
        FloatingNodeError: a non-ground node has fewer than 2 attachments
        UnsupportedAnalysisError: a component kind DC analysis cannot stamp
    """
    if components is None:
        raise InvalidCircuitError("Circuit cannot be None")
    if len(components) == 0:
        raise InvalidCircuitError("Circuit must have at least one component")

    attachments = Counter(node for comp in components for node in comp.nodes)

    if ground not in attachments:
        raise NoGroundError(f"Ground node '{ground}' not found in circuit", node_id=ground)

    for node, count in attachments.items():
        if node != ground and count < 2:
            raise FloatingNodeError(
                f"Node '{node}' is connected to only one component", node_id=node
            )

    for comp in components:
        if comp.kind not in SUPPORTED_KINDS:
            raise UnsupportedAnalysisError(
                f"Component type '{comp.kind}' is not supported in DC analysis",
                component_id=comp.name,
            )


def build_node_index_map(components: Iterable[ComponentSpec], ground: str) -> NodeIndexMap:
    """Assign matrix indices: sorted non-ground nodes, then voltage sources."""
    node_names = set()
    voltage_sources = []
    for comp in components:
        if comp.kind == "Ground":
            continue
        node_names.update(n for n in comp.nodes if n != ground)
        if comp.kind == "VSource":
            voltage_sources.append(comp.name)

    ordered = tuple(sorted(node_names))
    return NodeIndexMap(
        node_to_index={name: i for i, name in enumerate(ordered)},
        index_to_node=ordered,
        voltage_source_ids=tuple(voltage_sources),
    )


def resolve_values(
    components: Iterable[ComponentSpec],
    params: Mapping[str, float] | None = None,
) -> dict[str, float]:
    """
    Merge factory defaults with per-call overrides.

    Returns {component_name: value} for every non-ground component.
    """
    params = params or {}
    values = {}
    for comp in components:
        if comp.kind == "Ground":
            continue
        value = params.get(comp.name, comp.value)
        if value is None:
            raise InvalidParameterError(
                f"No value given for component '{comp.name}'", component_id=comp.name
            )
        try:
            value = float(value)
        except (TypeError, ValueError) as err:
            raise InvalidParameterError(
                f"Value of '{comp.name}' must be a number, got {value!r}",
                component_id=comp.name,
            ) from err
        if comp.kind == "R":
            check_resistance(comp.name, value)
        elif not jnp.isfinite(value):
            raise InvalidParameterError(
                f"Value of '{comp.name}' must be a finite number", component_id=comp.name
            )
        values[comp.name] = value
    return values


def _conductance_entries(p: int | None, q: int | None, g: float):
    """(row, col, value) triples of a conductance g between rows p and q (None = ground)."""
    entries = []
    if p is not None:
        entries.append((p, p, g))
    if q is not None:
        entries.append((q, q, g))
    if p is not None and q is not None:
        entries.append((p, q, -g))
        entries.append((q, p, -g))
    return entries


def _branch_entries(p: int | None, q: int | None, k: int):
    """Triples coupling branch-current unknown k to its terminal nodes."""
    entries = []
    if p is not None:
        entries.append((p, k, 1.0))
        entries.append((k, p, 1.0))
    if q is not None:
        entries.append((q, k, -1.0))
        entries.append((k, q, -1.0))
    return entries


def stamp_matrix(components: Sequence[ComponentSpec], index_map: NodeIndexMap,
                 values: Mapping[str, float]) -> Matrix:
    """Build A. Depends on resistances and topology only, never on source values."""
    n = index_map.system_size
    idx = index_map.node_to_index

    entries = []
    for comp in components:
        if comp.kind == "R":
            p, q = (idx.get(node) for node in comp.nodes)
            entries.extend(_conductance_entries(p, q, 1.0 / values[comp.name]))
        elif comp.kind == "VSource":
            p, q = (idx.get(node) for node in comp.nodes)
            entries.extend(_branch_entries(p, q, index_map.branch_index(comp.name)))

    A = jnp.zeros((n, n), dtype=jnp.float64)
    if entries:
        rows, cols, vals = zip(*entries)
        # Single scatter; repeated (row, col) pairs accumulate
        A = A.at[jnp.array(rows), jnp.array(cols)].add(jnp.array(vals, dtype=jnp.float64))
    return Matrix(n, n, A.reshape(-1))


def stamp_rhs(components: Sequence[ComponentSpec], index_map: NodeIndexMap,
              values: Mapping[str, float]) -> Vector:
    """Build b from the independent sources."""
    n = index_map.system_size
    idx = index_map.node_to_index

    rows, vals = [], []
    for comp in components:
        if comp.kind == "VSource":
            rows.append(index_map.branch_index(comp.name))
            vals.append(values[comp.name])
        elif comp.kind == "ISource":
            # Current leaves the positive terminal node, enters the negative one
            p, q = (idx.get(node) for node in comp.nodes)
            current = values[comp.name]
            if p is not None:
                rows.append(p)
                vals.append(-current)
            if q is not None:
                rows.append(q)
                vals.append(current)

    b = jnp.zeros(n, dtype=jnp.float64)
    if rows:
        b = b.at[jnp.array(rows)].add(jnp.array(vals, dtype=jnp.float64))
    return Vector(n, b)


def assemble(
    components: Sequence[ComponentSpec],
    ground: str,
    params: Mapping[str, float] | None = None,
) -> MNASystem:
    """
    Validate a component list and build its MNA system.

    Args:
        components: Ordered component list
        ground: Name of the reference node
        params: Optional {component_name: value} overrides

    Returns:
        MNASystem (A, b, index_map); A is 0x0 for a ground-only circuit
    """
    validate_network(components, ground)
    index_map = build_node_index_map(components, ground)
    values = resolve_values(components, params)

    A = stamp_matrix(components, index_map, values)
    b = stamp_rhs(components, index_map, values)
    logger.debug(
        f"assemble: {index_map.num_nodes} nodes + {index_map.num_voltage_sources} "
        f"voltage sources -> {index_map.system_size}x{index_map.system_size} system"
    )
    return MNASystem(A, b, index_map)
