"""
Example: Diode + Resistor Operating Point by Newton-Raphson

The linear DC solver handles R/V/I circuits in one solve. A nonlinear
element needs an iterative solve; here the single KCL equation at the
diode node is written out by hand and handed to the Newton-Raphson driver.

Circuit:
    Vs ---[R]---+--- Vd
                |
               [D]
                |
               GND

    F(Vd) = (Vd - Vs) / R + Is * (exp(Vd / Vt) - 1) = 0
"""
import jax.numpy as jnp

from pyohm import NewtonOptions
from pyohm.linalg import Matrix, Vector, NonlinearSystem, solve_newton_raphson

I_S = 1e-14       # Saturation current
V_T = 0.025852    # Thermal voltage at 300 K


def build_system(V_s=5.0, R_val=1000.0):
    def residual(x):
        vd = x.data
        return Vector(1, (vd - V_s) / R_val + I_S * (jnp.exp(vd / V_T) - 1.0))

    def jacobian(x):
        vd = x.data
        return Matrix(1, 1, 1.0 / R_val + I_S / V_T * jnp.exp(vd / V_T))

    return NonlinearSystem(residual, jacobian, size=1)


def main():
    print("=" * 60)
    print("Diode + Resistor (Newton-Raphson)")
    print("=" * 60)

    system = build_system()
    for damping in (1.0, 0.5):
        result = solve_newton_raphson(
            system, Vector.from_values([0.6]), NewtonOptions(damping_factor=damping)
        )
        vd = float(result.solution.data[0])
        current = (5.0 - vd) / 1000.0
        print(f"\n   damping = {damping}")
        print(f"   Vd = {vd:.6f} V   I = {current * 1e3:.4f} mA")
        print(f"   iterations = {result.iterations}   |F| = {result.final_residual_norm:.2e}")

    print("\n" + "=" * 60)


if __name__ == "__main__":
    main()
