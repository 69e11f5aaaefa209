"""
Example: 12AX7 Common-Cathode Stage

Builds a single triode gain stage, prints its SPICE netlist and evaluates
the Kurt Blum plate-current model numerically through JAX.

Three parts:
1. Netlist export of the stage
2. Plate current vs grid voltage at a fixed plate voltage
3. Transconductance dIp/dVg from jax.grad

Components used: VSource, SignalInput, C, CommonCathodeStage
"""
import jax
import jax.numpy as jnp
import sympy

from pyvalve.circuit import Circuit, VSource, SignalInput, C, CommonCathodeStage
from pyvalve.circuit import drive_expression, plate_current_expression
from pyvalve.circuit.numeric import lambdify
from pyvalve.export import to_netlist


def build_stage():
    """Build a bypassed common-cathode stage.

    Circuit:
        B+ ---[100k]---+--- P
                       |
        in --||-- G --(V1)
                  |    |
                [1M]   +--- K ---[1.5k]||[22u]--- GND
    """
    circuit = Circuit("12AX7 common cathode")
    VSource(circuit, "B+", circuit.gnd, name="VB", value=250.0)
    SignalInput(circuit, "in", circuit.gnd, name="IN")
    C(circuit, "in", "G", name="C1", value="22n")
    refs = CommonCathodeStage(circuit, "G", "B+", "P", prefix="V1")
    return circuit, refs


def plate_current_function(tube):
    """Ip(Vpk, Vgk) for the tube's current parameters, as a JAX function."""
    vpk, vgk = sympy.symbols("vpk vgk")
    e1 = drive_expression(vpk, vgk, tube.mu, tube.kp, tube.kvb)
    ip = plate_current_expression(e1, tube.ex, tube.kg1)
    return lambdify(ip, [vpk, vgk])


def main():
    print("=" * 60)
    print("12AX7 Common-Cathode Stage")
    print("=" * 60)

    circuit, refs = build_stage()

    print("\n1. SPICE netlist")
    print("-" * 40)
    print(to_netlist(circuit))

    analysis = circuit.analyze()
    print(f"   Stamps:         {len(analysis.stamps)}")
    print(f"   Internal nodes: {len(analysis.internal_nodes)}")
    print(f"   Unknowns:       {len(analysis.unknowns)}")

    ip = plate_current_function(refs.tube)

    print("\n2. Plate current at Vpk = 200 V")
    print("-" * 40)
    for vgk in jnp.linspace(-4.0, 0.0, 9):
        print(f"   Vgk = {float(vgk):5.2f} V   Ip = {float(ip(200.0, vgk)) * 1e3:7.4f} mA")

    print("\n3. Transconductance (JAX)")
    print("-" * 40)
    gm = jax.grad(ip, argnums=1)
    ra_inv = jax.grad(ip, argnums=0)
    for vgk in (-2.0, -1.5, -1.0):
        g = float(gm(200.0, vgk))
        ra = 1.0 / float(ra_inv(200.0, vgk))
        print(f"   Vgk = {vgk:5.2f} V   gm = {g * 1e3:.3f} mA/V   ra = {ra / 1e3:.1f} k   mu = {g * ra:.1f}")

    print("\n" + "=" * 60)


if __name__ == "__main__":
    main()
