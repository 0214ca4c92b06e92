"""Shared circuit fixtures."""

import jax
import pytest

jax.config.update("jax_enable_x64", True)


@pytest.fixture
def single_resistor():
    """V1 = 10 V across R1 = 1 kΩ to ground."""
    from pyohm.dc import Network, R, VSource

    net = Network()
    net, n1 = net.node("node1")
    net, v1 = VSource(net, n1, net.gnd, name="V1", value=10.0)
    net, r1 = R(net, n1, net.gnd, name="R1", value=1000.0)
    return net


@pytest.fixture
def voltage_divider():
    """V1 = 12 V, R1 = 1 kΩ (node1-node2), R2 = 2 kΩ (node2-gnd)."""
    from pyohm.dc import Network, R, VSource

    net = Network()
    net, n1 = net.node("node1")
    net, n2 = net.node("node2")
    net, v1 = VSource(net, n1, net.gnd, name="V1", value=12.0)
    net, r1 = R(net, n1, n2, name="R1", value=1000.0)
    net, r2 = R(net, n2, net.gnd, name="R2", value=2000.0)
    return net


@pytest.fixture
def parallel_resistors():
    """V1 = 12 V across 100 Ω, 200 Ω and 300 Ω in parallel."""
    from pyohm.dc import Network, R, VSource

    net = Network()
    net, n1 = net.node("node1")
    net, v1 = VSource(net, n1, net.gnd, name="V1", value=12.0)
    net, r1 = R(net, n1, net.gnd, name="R1", value=100.0)
    net, r2 = R(net, n1, net.gnd, name="R2", value=200.0)
    net, r3 = R(net, n1, net.gnd, name="R3", value=300.0)
    return net


@pytest.fixture
def bridge_with_current_source():
    """Mixed sources: V1 = 5 V, I1 = 2 mA into node b, resistive bridge."""
    from pyohm.dc import Network, R, VSource, ISource

    net = Network()
    net, a = net.node("a")
    net, b = net.node("b")
    net, c = net.node("c")
    net, v1 = VSource(net, a, net.gnd, name="V1", value=5.0)
    net, r1 = R(net, a, b, name="R1", value=1000.0)
    net, r2 = R(net, a, c, name="R2", value=2200.0)
    net, r3 = R(net, b, c, name="R3", value=470.0)
    net, r4 = R(net, b, net.gnd, name="R4", value=3300.0)
    net, r5 = R(net, c, net.gnd, name="R5", value=1500.0)
    net, i1 = ISource(net, net.gnd, b, name="I1", value=2e-3)
    return net
