"""Circuit component factory functions (functional style).

Factories perform the field-level checks of the component model (names,
distinct terminals, finite values, resistance range). Topology checks happen
later, in the assembler.
"""

from __future__ import annotations

import math

from ..errors import InvalidComponentError, InvalidParameterError
from .network import Network, Node, ComponentSpec, ComponentRef

MIN_RESISTANCE = 1e-3  # 1 mΩ
MAX_RESISTANCE = 1e12  # 1 TΩ


def _check_two_terminal(name: str, node_a: Node, node_b: Node):
    if not name or not name.strip():
        raise InvalidComponentError("Component name cannot be empty", component_id=name)
    for node in (node_a, node_b):
        if not node.name or not node.name.strip():
            raise InvalidComponentError("Node name cannot be empty", component_id=name)
    if node_a.name == node_b.name:
        raise InvalidComponentError(
            "Terminals cannot be connected to the same node", component_id=name
        )


def _check_finite(name: str, value: float | None, what: str):
    if value is not None and not math.isfinite(value):
        raise InvalidParameterError(f"{what} must be a finite number", component_id=name)


def check_resistance(name: str, value: float):
    """Raise InvalidParameterError unless value is a finite in-range resistance."""
    _check_finite(name, value, "Resistance")
    if not MIN_RESISTANCE <= value <= MAX_RESISTANCE:
        raise InvalidParameterError(
            f"Resistance must be between {MIN_RESISTANCE:g} and {MAX_RESISTANCE:g} ohms, "
            f"got {value:g}",
            component_id=name,
        )


def R(
    net: Network,
    node_a: Node,
    node_b: Node,
    *,
    name: str,
    value: float | None = None,
) -> tuple[Network, ComponentRef]:
    """
    Create a resistor.

    Args:
        net: Network to add to
        node_a: First terminal
        node_b: Second terminal
        name: Component name (required, used as key in params)
        value: Resistance in Ohms (optional default, can be overridden at solve time)

    Returns:
        (new_network, component_ref)

    Example:
        net, r1 = R(net, n1, n2, name="R1", value=1000.0)  # 1 kΩ
    """
    _check_two_terminal(name, node_a, node_b)
    if value is not None:
        check_resistance(name, value)
    spec = ComponentSpec(name=name, kind="R", nodes=(node_a.name, node_b.name), value=value)
    return net.add_component(spec)


def VSource(
    net: Network,
    node_p: Node,
    node_n: Node,
    *,
    name: str,
    value: float | None = None,
) -> tuple[Network, ComponentRef]:
    """
    Create an ideal DC voltage source: V(node_p) - V(node_n) = value.

    Each voltage source adds one branch-current unknown to the MNA system.

    Example:
        net, vs = VSource(net, n1, net.gnd, name="vs", value=5.0)  # 5V
    """
    _check_two_terminal(name, node_p, node_n)
    _check_finite(name, value, "Voltage")
    spec = ComponentSpec(name=name, kind="VSource", nodes=(node_p.name, node_n.name), value=value)
    return net.add_component(spec)


def ISource(
    net: Network,
    node_p: Node,
    node_n: Node,
    *,
    name: str,
    value: float | None = None,
) -> tuple[Network, ComponentRef]:
    """
    Create an ideal DC current source.

    Conventional current `value` leaves through node_p into the external
    circuit and returns through node_n.

    Example:
        net, i1 = ISource(net, net.gnd, n1, name="I1", value=1e-3)  # 1 mA into n1
    """
    _check_two_terminal(name, node_p, node_n)
    _check_finite(name, value, "Current")
    spec = ComponentSpec(name=name, kind="ISource", nodes=(node_p.name, node_n.name), value=value)
    return net.add_component(spec)


def Ground(
    net: Network,
    node: Node | None = None,
    *,
    name: str = "GND",
) -> tuple[Network, ComponentRef]:
    """
    Place a ground marker on a node (the network's ground node by default).

    The marker counts as an attachment of its node, which is how a circuit
    declares where its reference node sits.
    """
    node = net.gnd if node is None else node
    if not name or not name.strip():
        raise InvalidComponentError("Component name cannot be empty", component_id=name)
    spec = ComponentSpec(name=name, kind="Ground", nodes=(node.name,))
    return net.add_component(spec)
