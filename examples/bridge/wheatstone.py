"""
Example: Wheatstone Bridge with a Current Injection

A resistive bridge driven by a 5 V source, with a current source pushing
extra current into one arm. Prints node voltages, branch currents and the
power table, whose entries sum to zero.

Components used: R, VSource, ISource
"""
from pyohm.dc import Network, R, VSource, ISource, analyze_dc


def build_bridge(I_inject=2e-3):
    """Build the bridge.

    Circuit:
        a ---[R1]--- b ---[R4]--- GND
        a ---[R2]--- c ---[R5]--- GND
        b ---[R3]--- c
        V1: a to GND (5 V), I1: GND into b
    """
    net = Network()
    net, a = net.node("a")
    net, b = net.node("b")
    net, c = net.node("c")

    net, _ = VSource(net, a, net.gnd, name="V1", value=5.0)
    net, _ = R(net, a, b, name="R1", value=1000.0)
    net, _ = R(net, a, c, name="R2", value=2200.0)
    net, _ = R(net, b, c, name="R3", value=470.0)
    net, _ = R(net, b, net.gnd, name="R4", value=3300.0)
    net, _ = R(net, c, net.gnd, name="R5", value=1500.0)
    net, _ = ISource(net, net.gnd, b, name="I1", value=I_inject)
    return net


def main():
    print("=" * 60)
    print("Wheatstone Bridge Example")
    print("=" * 60)

    result = analyze_dc(build_bridge())
    op = result.operating_point

    print("\nNode voltages")
    print("-" * 40)
    for node, voltage in op.node_voltages.items():
        print(f"   V({node:>3}) = {voltage:10.6f} V")

    print("\nBranch currents and absorbed power")
    print("-" * 40)
    for name, current in op.branch_currents.items():
        power = op.component_powers[name]
        print(f"   {name:>3}: I = {current * 1e3:9.4f} mA   P = {power * 1e3:9.4f} mW")

    total = sum(op.component_powers.values())
    print(f"\n   Sum of powers: {total:.3e} W")
    print("\n" + "=" * 60)


if __name__ == "__main__":
    main()
