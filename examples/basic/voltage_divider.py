"""
Example: Voltage Divider

Demonstrates the voltage divider rule: V_out = V_in * R2 / (R1 + R2)

Three examples:
1. Simple 2-resistor divider (50% division with equal resistors)
2. 4-resistor divider chain showing multiple tap points
3. Sweep of the input voltage sharing a single factorization

Components used: R, VSource
"""
from pyohm.dc import Network, R, VSource


def build_simple_divider():
    """Build a simple 2-resistor voltage divider.

    Circuit:
        Vs ---[R1]---+---[R2]--- GND
                     |
                    Vout
    """
    net = Network()
    net, n_top = net.node("top")      # Top of divider (Vs output)
    net, n_mid = net.node("mid")      # Middle tap point

    net, vs = VSource(net, n_top, net.gnd, name="vs", value=10.0)
    net, r1 = R(net, n_top, n_mid, name="R1", value=10000.0)
    net, r2 = R(net, n_mid, net.gnd, name="R2", value=10000.0)

    return net, {"top": n_top, "mid": n_mid}, {"vs": vs, "R1": r1, "R2": r2}


def build_chain_divider():
    """Build a 4-resistor chain divider with multiple taps.

    Circuit:
        Vs ---[R1]---+---[R2]---+---[R3]---+---[R4]--- GND
                     |          |          |
                   tap1       tap2       tap3
    """
    net = Network()
    net, n_top = net.node("top")
    net, tap1 = net.node("tap1")
    net, tap2 = net.node("tap2")
    net, tap3 = net.node("tap3")

    net, vs = VSource(net, n_top, net.gnd, name="vs", value=10.0)
    net, r1 = R(net, n_top, tap1, name="R1", value=10000.0)
    net, r2 = R(net, tap1, tap2, name="R2", value=10000.0)
    net, r3 = R(net, tap2, tap3, name="R3", value=10000.0)
    net, r4 = R(net, tap3, net.gnd, name="R4", value=10000.0)

    nodes = {"top": n_top, "tap1": tap1, "tap2": tap2, "tap3": tap3}
    components = {"vs": vs, "R1": r1, "R2": r2, "R3": r3, "R4": r4}
    return net, nodes, components


def solve_simple_divider(V_in=10.0, R1=10000.0, R2=10000.0):
    """Solve the simple voltage divider and return the output voltage."""
    net, nodes, _ = build_simple_divider()
    solver = net.compile()
    op = solver.operating_point({"vs": V_in, "R1": R1, "R2": R2})
    return solver.v(op, nodes["mid"])


def solve_chain_divider(V_in=10.0):
    """Solve the 4-resistor chain divider and return tap voltages."""
    net, nodes, _ = build_chain_divider()
    solver = net.compile()
    op = solver.operating_point({"vs": V_in})
    return {tap: solver.v(op, nodes[tap]) for tap in ("tap1", "tap2", "tap3")}


def sweep_input(values):
    """Output voltage of the simple divider for each input voltage."""
    net, nodes, components = build_simple_divider()
    solver = net.compile()
    result = solver.sweep(components["vs"], values)
    return [solver.v(op, nodes["mid"]) for op in result.operating_points]


def main():
    print("=" * 60)
    print("Voltage Divider Example")
    print("=" * 60)

    # Simple divider test
    print("\n1. Simple Voltage Divider (R1 = R2 = 10k)")
    print("-" * 40)
    V_in = 10.0
    v_out = solve_simple_divider(V_in=V_in, R1=10000.0, R2=10000.0)
    expected = V_in * 0.5  # Equal resistors = 50% division
    print(f"   Input voltage:    {V_in:.2f} V")
    print(f"   Output voltage:   {v_out:.4f} V")
    print(f"   Expected (50%):   {expected:.2f} V")
    print(f"   Error:            {abs(v_out - expected):.6f} V")

    # Unequal resistors
    print("\n2. Unequal Resistors (R1=10k, R2=20k)")
    print("-" * 40)
    v_out_2 = solve_simple_divider(V_in=V_in, R1=10000.0, R2=20000.0)
    expected_2 = V_in * 20000 / (10000 + 20000)  # 2/3
    print(f"   Input voltage:    {V_in:.2f} V")
    print(f"   Output voltage:   {v_out_2:.4f} V")
    print(f"   Expected (2/3):   {expected_2:.4f} V")

    # Chain divider
    print("\n3. 4-Resistor Chain (equal 10k resistors)")
    print("-" * 40)
    taps = solve_chain_divider(V_in=V_in)
    print(f"   Input voltage:    {V_in:.2f} V")
    print(f"   Tap 1 (75%):      {taps['tap1']:.4f} V (expected: {V_in*0.75:.2f})")
    print(f"   Tap 2 (50%):      {taps['tap2']:.4f} V (expected: {V_in*0.50:.2f})")
    print(f"   Tap 3 (25%):      {taps['tap3']:.4f} V (expected: {V_in*0.25:.2f})")

    # Sweep
    print("\n4. Input Sweep (one factorization, many right-hand sides)")
    print("-" * 40)
    values = [0.0, 2.5, 5.0, 7.5, 10.0]
    for v_in, v_out in zip(values, sweep_input(values)):
        print(f"   V_in = {v_in:5.2f} V  ->  V_out = {v_out:.4f} V")

    print("\n" + "=" * 60)


if __name__ == "__main__":
    main()
