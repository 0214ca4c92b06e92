"""Network and Node classes for circuit topology (immutable/functional style)."""

from __future__ import annotations
from typing import NamedTuple, TYPE_CHECKING

from ..errors import InvalidComponentError

if TYPE_CHECKING:
    from .analysis import DCSolver


class Node(NamedTuple):
    """A node in the circuit (electrical connection point)."""
    name: str


class ComponentRef(NamedTuple):
    """Reference to a component for later probing."""
    name: str
    kind: str  # "R", "VSource", "ISource", "Ground"


class ComponentSpec(NamedTuple):
    """
    Specification for a component.

    kind is the tag the assembler dispatches on. Two-terminal components list
    (positive, negative) node names; a Ground marker lists its single node.
    """
    name: str
    kind: str
    nodes: tuple[str, ...]
    value: float | None = None  # ohms, volts or amperes depending on kind


class Network(NamedTuple):
    """
    Immutable circuit network topology.

    Node matrix indices are not fixed here: they are assigned at assembly
    time from the sorted node names, so two networks with the same topology
    assemble to the same system regardless of construction order.

    Build using functional style:
        net = Network()
        net, n1 = net.node("n1")
        net, v1 = VSource(net, n1, net.gnd, name="V1", value=10.0)
        net, r1 = R(net, n1, net.gnd, name="R1", value=1000.0)
    """
    ground: str = "gnd"
    nodes: tuple[Node, ...] = ()
    components: tuple[ComponentSpec, ...] = ()

    @property
    def gnd(self) -> Node:
        """Ground node (reference, always 0V)."""
        return Node(self.ground)

    @property
    def num_nodes(self) -> int:
        """Number of declared non-ground nodes."""
        return len(self.nodes)

    def node(self, name: str) -> tuple[Network, Node]:
        """
        Declare a node.

        Returns (new_network, node). Declaring an existing name (or the
        ground name) returns the existing node and the unchanged network.
        """
        if name == self.ground:
            return self, self.gnd
        for n in self.nodes:
            if n.name == name:
                return self, n

        new_node = Node(name)
        return self._replace(nodes=self.nodes + (new_node,)), new_node

    def add_component(self, spec: ComponentSpec) -> tuple[Network, ComponentRef]:
        """
        Add a component specification.

        Returns (new_network, component_ref).
        """
        if any(c.name == spec.name for c in self.components):
            raise InvalidComponentError(
                f"Component '{spec.name}' already exists", component_id=spec.name
            )
        new_net = self._replace(components=self.components + (spec,))
        ref = ComponentRef(spec.name, spec.kind)
        return new_net, ref

    def component(self, name: str) -> ComponentSpec | None:
        """Look up a component by name."""
        for comp in self.components:
            if comp.name == name:
                return comp
        return None

    def compile(self) -> DCSolver:
        """
        Create DC solver functions from this network.

        Returns:
            DCSolver with operating_point, analyze, sweep and probe functions
        """
        from .analysis import compile_network
        return compile_network(self)
