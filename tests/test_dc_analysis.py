"""
Test: DC operating point of linear resistive circuits.

Sign conventions checked here:
    - source currents are positive when the source delivers power
    - component powers are positive when absorbed and sum to zero
"""
import logging
import pytest
import jax.numpy as jnp


def _power_balance(op) -> float:
    return abs(sum(op.component_powers.values()))


def test_single_resistor(single_resistor):
    from pyohm.dc import analyze_dc

    result = analyze_dc(single_resistor)
    op = result.operating_point

    assert op.node_voltages["gnd"] == 0.0
    assert op.node_voltages["node1"] == pytest.approx(10.0, abs=1e-12)
    assert op.branch_currents["R1"] == pytest.approx(0.01, abs=1e-15)
    assert op.branch_currents["V1"] == pytest.approx(0.01, abs=1e-15)
    assert op.component_powers["R1"] == pytest.approx(0.1, abs=1e-12)
    assert op.component_powers["V1"] == pytest.approx(-0.1, abs=1e-12)


def test_voltage_divider(voltage_divider):
    from pyohm.dc import analyze_dc

    op = analyze_dc(voltage_divider).operating_point

    assert op.node_voltages["node1"] == pytest.approx(12.0, abs=1e-12)
    assert op.node_voltages["node2"] == pytest.approx(8.0, abs=1e-12)
    assert op.branch_currents["R1"] == pytest.approx(4e-3, abs=1e-15)
    assert op.branch_currents["R2"] == pytest.approx(4e-3, abs=1e-15)
    assert op.branch_currents["V1"] == pytest.approx(4e-3, abs=1e-15)
    assert op.component_powers["R1"] == pytest.approx(0.016, abs=1e-12)
    assert op.component_powers["R2"] == pytest.approx(0.032, abs=1e-12)
    assert op.component_powers["V1"] == pytest.approx(-0.048, abs=1e-12)


def test_parallel_resistors(parallel_resistors):
    from pyohm.dc import analyze_dc

    op = analyze_dc(parallel_resistors).operating_point

    assert op.branch_currents["R1"] == pytest.approx(0.12, abs=1e-12)
    assert op.branch_currents["R2"] == pytest.approx(0.06, abs=1e-12)
    assert op.branch_currents["R3"] == pytest.approx(0.04, abs=1e-12)
    assert op.branch_currents["V1"] == pytest.approx(0.22, abs=1e-12)


def test_current_source_into_resistor():
    """1 mA pushed into n1 through 1 kΩ to ground gives 1 V."""
    from pyohm.dc import Network, R, ISource, analyze_dc

    net = Network()
    net, n1 = net.node("n1")
    net, _ = ISource(net, net.gnd, n1, name="I1", value=1e-3)
    net, _ = R(net, n1, net.gnd, name="R1", value=1000.0)

    op = analyze_dc(net).operating_point
    assert op.node_voltages["n1"] == pytest.approx(1.0, abs=1e-12)
    assert op.branch_currents["I1"] == 1e-3
    assert op.component_powers["I1"] == pytest.approx(-1e-3, abs=1e-15)
    assert op.component_powers["R1"] == pytest.approx(1e-3, abs=1e-15)


def test_bridge_matches_direct_solve(bridge_with_current_source):
    from pyohm.dc import analyze_dc, assemble

    net = bridge_with_current_source
    op = analyze_dc(net).operating_point
    system = assemble(net.components, net.ground)
    x = jnp.linalg.solve(system.A.as_array(), system.b.data)

    for name, index in system.index_map.node_to_index.items():
        assert op.node_voltages[name] == pytest.approx(float(x[index]), abs=1e-10)
    assert op.node_voltages["a"] == pytest.approx(5.0, abs=1e-12)


def test_kirchhoff_current_law_at_bridge_nodes(bridge_with_current_source):
    """Resistor currents leaving node b balance the 2 mA injected by I1."""
    from pyohm.dc import analyze_dc

    currents = analyze_dc(bridge_with_current_source).operating_point.branch_currents
    leaving_b = -currents["R1"] + currents["R3"] + currents["R4"]
    assert leaving_b == pytest.approx(2e-3, abs=1e-12)
    leaving_c = -currents["R2"] - currents["R3"] + currents["R5"]
    assert leaving_c == pytest.approx(0.0, abs=1e-12)


@pytest.mark.parametrize("fixture_name", [
    "single_resistor",
    "voltage_divider",
    "parallel_resistors",
    "bridge_with_current_source",
])
def test_power_balance(fixture_name, request):
    from pyohm.dc import analyze_dc

    net = request.getfixturevalue(fixture_name)
    op = analyze_dc(net).operating_point
    assert _power_balance(op) < 1e-9


def test_result_metadata(single_resistor):
    from pyohm.dc import analyze_dc

    result = analyze_dc(single_resistor)
    assert result.type == "dc"
    info = result.convergence_info
    assert info.converged
    assert info.iterations == 1
    assert info.final_error == 0.0


def test_ground_only_circuit():
    from pyohm.dc import Network, Ground, analyze_dc

    net, _ = Ground(Network())
    op = analyze_dc(net).operating_point
    assert op.node_voltages == {"gnd": 0.0}
    assert op.branch_currents == {}
    assert op.component_powers == {}


def test_custom_ground_name():
    from pyohm.dc import Network, R, VSource, analyze_dc

    net = Network(ground="0")
    net, n1 = net.node("n1")
    net, _ = VSource(net, n1, net.gnd, name="V1", value=2.0)
    net, _ = R(net, n1, net.gnd, name="R1", value=10.0)

    op = analyze_dc(net).operating_point
    assert op.node_voltages["0"] == 0.0
    assert op.node_voltages["n1"] == pytest.approx(2.0, abs=1e-12)


class TestCompiledSolver:

    def test_params_override_defaults(self, voltage_divider):
        solver = voltage_divider.compile()

        default = solver.operating_point()
        override = solver.operating_point({"R2": 1000.0})

        assert solver.v(default, "node2") == pytest.approx(8.0, abs=1e-12)
        assert solver.v(override, "node2") == pytest.approx(6.0, abs=1e-12)
        assert solver.defaults == {"V1": 12.0, "R1": 1000.0, "R2": 2000.0}

    def test_probes_accept_refs(self):
        from pyohm.dc import Network, R, VSource

        net = Network()
        net, n1 = net.node("n1")
        net, v1 = VSource(net, n1, net.gnd, name="V1", value=3.0)
        net, r1 = R(net, n1, net.gnd, name="R1", value=300.0)

        solver = net.compile()
        op = solver.operating_point()
        assert solver.v(op, n1) == pytest.approx(3.0, abs=1e-12)
        assert solver.v(op, net.gnd) == 0.0
        assert solver.i(op, r1) == pytest.approx(0.01, abs=1e-15)
        assert solver.p(op, v1) == pytest.approx(-0.03, abs=1e-12)

    def test_unknown_probe_names(self, single_resistor):
        from pyohm import InvalidParameterError

        solver = single_resistor.compile()
        op = solver.operating_point()
        with pytest.raises(InvalidParameterError):
            solver.v(op, "nowhere")
        with pytest.raises(InvalidParameterError):
            solver.i(op, "R99")
        with pytest.raises(InvalidParameterError):
            solver.p(op, "R99")

    def test_value_supplied_only_at_solve_time(self):
        from pyohm import InvalidParameterError
        from pyohm.dc import Network, R, VSource

        net = Network()
        net, n1 = net.node("n1")
        net, _ = VSource(net, n1, net.gnd, name="V1")
        net, _ = R(net, n1, net.gnd, name="R1", value=50.0)

        solver = net.compile()
        with pytest.raises(InvalidParameterError, match="V1"):
            solver.operating_point()
        op = solver.operating_point({"V1": 5.0})
        assert solver.i(op, "R1") == pytest.approx(0.1, abs=1e-12)


class TestCircuitErrors:

    def test_none_network(self):
        from pyohm import InvalidCircuitError
        from pyohm.dc import analyze_dc

        with pytest.raises(InvalidCircuitError):
            analyze_dc(None)

    def test_empty_network(self):
        from pyohm import InvalidCircuitError
        from pyohm.dc import Network, analyze_dc

        with pytest.raises(InvalidCircuitError):
            analyze_dc(Network())

    def test_parallel_voltage_sources_are_singular(self):
        from pyohm import SingularMatrixError, ErrorCode
        from pyohm.dc import Network, R, VSource, analyze_dc

        net = Network()
        net, n1 = net.node("n1")
        net, _ = VSource(net, n1, net.gnd, name="V1", value=5.0)
        net, _ = VSource(net, n1, net.gnd, name="V2", value=3.0)
        net, _ = R(net, n1, net.gnd, name="R1", value=1000.0)

        with pytest.raises(SingularMatrixError, match="singular") as exc_info:
            analyze_dc(net)
        assert exc_info.value.code == ErrorCode.SINGULAR_MATRIX
        assert isinstance(exc_info.value.__cause__, SingularMatrixError)

    def test_voltage_source_loop_is_singular(self):
        from pyohm import SingularMatrixError
        from pyohm.dc import Network, VSource, analyze_dc

        net = Network()
        net, n1 = net.node("n1")
        net, n2 = net.node("n2")
        net, _ = VSource(net, n1, net.gnd, name="V1", value=1.0)
        net, _ = VSource(net, n1, n2, name="V2", value=1.0)
        net, _ = VSource(net, n2, net.gnd, name="V3", value=1.0)

        with pytest.raises(SingularMatrixError, match="loops with only voltage sources"):
            analyze_dc(net)

    def test_singular_circuit_logs_warning(self, caplog):
        from pyohm import SingularMatrixError
        from pyohm.dc import Network, R, VSource, analyze_dc

        net = Network()
        net, n1 = net.node("n1")
        net, _ = VSource(net, n1, net.gnd, name="V1", value=5.0)
        net, _ = VSource(net, n1, net.gnd, name="V2", value=3.0)
        net, _ = R(net, n1, net.gnd, name="R1", value=1000.0)

        with caplog.at_level(logging.WARNING, logger="pyohm"):
            with pytest.raises(SingularMatrixError):
                analyze_dc(net)
        assert "singular 3x3 MNA matrix (rank 2)" in caplog.text


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
