"""Circuit component factory functions (functional style).

Each factory creates a device, adds it to the circuit and wires its
terminals in canonical order in one call:

    circuit = Circuit("stage")
    r1 = R(circuit, "N1", "N2", name="R1", value="100k")
"""

from __future__ import annotations

from ..export.units import parse_si
from .devices import (
    Resistor,
    Capacitor,
    VoltageSource,
    CurrentSource,
    Diode,
    Input,
    Speaker,
    Potentiometer,
    VariableResistor,
)
from .network import Circuit, Node
from .tubes import KurtBlum12AX7


def _params(**values) -> dict:
    """Drop unset values and parse SI strings ("100k", ".47µ")."""
    return {k: parse_si(v) for k, v in values.items() if v is not None}


def R(
    circuit: Circuit,
    node_a: Node | str,
    node_b: Node | str,
    *,
    name: str,
    value: float | str | None = None,
) -> Resistor:
    """
    Create a resistor.

    Args:
        circuit: Circuit to add to
        node_a: First terminal
        node_b: Second terminal
        name: Device name (used as the netlist name)
        value: Resistance in Ohms (default 1 kΩ)

    Returns:
        The new Resistor

    Example:
        r1 = R(circuit, n1, n2, name="R1", value=1000.0)  # 1 kΩ
    """
    device = Resistor(name, **_params(resistance=value))
    return circuit.connect(device, node_a, node_b)


def C(
    circuit: Circuit,
    node_a: Node | str,
    node_b: Node | str,
    *,
    name: str,
    value: float | str | None = None,
) -> Capacitor:
    """
    Create a capacitor.

    Args:
        circuit: Circuit to add to
        node_a: First terminal (positive for voltage reference)
        node_b: Second terminal
        name: Device name
        value: Capacitance in Farads (default 1 µF)

    Returns:
        The new Capacitor
    """
    device = Capacitor(name, **_params(capacitance=value))
    return circuit.connect(device, node_a, node_b)


def VSource(
    circuit: Circuit,
    node_p: Node | str,
    node_n: Node | str,
    *,
    name: str,
    value: float | str | None = None,
) -> VoltageSource:
    """
    Create a DC voltage source.

    Args:
        circuit: Circuit to add to
        node_p: Positive terminal
        node_n: Negative terminal
        name: Device name
        value: Voltage in Volts (default 0 V)

    Returns:
        The new VoltageSource

    Example:
        vb = VSource(circuit, "B+", circuit.gnd, name="VB", value=250.0)
    """
    device = VoltageSource(name, **_params(voltage=value))
    return circuit.connect(device, node_p, node_n)


def ISource(
    circuit: Circuit,
    node_a: Node | str,
    node_b: Node | str,
    *,
    name: str,
    value: float | str | None = None,
) -> CurrentSource:
    """Create a DC current source; ``value`` Amperes flow from node_a to node_b."""
    device = CurrentSource(name, **_params(current=value))
    return circuit.connect(device, node_a, node_b)


def D(
    circuit: Circuit,
    anode: Node | str,
    cathode: Node | str,
    *,
    name: str,
    saturation_current: float | str | None = None,
    ideality: float | None = None,
) -> Diode:
    """Create a junction diode conducting from anode to cathode."""
    device = Diode(name, **_params(saturation_current=saturation_current, ideality=ideality))
    return circuit.connect(device, anode, cathode)


def SignalInput(
    circuit: Circuit,
    node_p: Node | str,
    node_n: Node | str,
    *,
    name: str,
) -> Input:
    """
    Create an input voltage source driven by the signal ``V_in[name]``.

    The signal symbol is available as ``device.signal``.
    """
    return circuit.connect(Input(name), node_p, node_n)


def Load(
    circuit: Circuit,
    node_a: Node | str,
    node_b: Node | str,
    *,
    name: str,
    impedance: float | str | None = None,
) -> Speaker:
    """Create a speaker load (default 8 Ω)."""
    device = Speaker(name, **_params(impedance=impedance))
    return circuit.connect(device, node_a, node_b)


def Pot(
    circuit: Circuit,
    anode: Node | str,
    cathode: Node | str,
    wiper: Node | str,
    *,
    name: str,
    value: float | str | None = None,
    wipe: float | None = None,
) -> Potentiometer:
    """
    Create a potentiometer.

    Args:
        circuit: Circuit to add to
        anode: End terminal A
        cathode: End terminal C
        wiper: Wiper terminal W
        name: Device name
        value: Total resistance in Ohms (default 10 kΩ)
        wipe: Wiper position in [0, 1] (default 0.5)

    Returns:
        The new Potentiometer
    """
    device = Potentiometer(name, **_params(resistance=value, wipe=wipe))
    return circuit.connect(device, anode, cathode, wiper)


def VarR(
    circuit: Circuit,
    node_a: Node | str,
    node_b: Node | str,
    *,
    name: str,
    value: float | str | None = None,
    wipe: float | None = None,
) -> VariableResistor:
    """Create a variable resistor (R = value * wipe)."""
    device = VariableResistor(name, **_params(resistance=value, wipe=wipe))
    return circuit.connect(device, node_a, node_b)


def Triode12AX7(
    circuit: Circuit,
    plate: Node | str,
    grid: Node | str,
    cathode: Node | str,
    *,
    name: str,
    **params,
) -> KurtBlum12AX7:
    """
    Create a 12AX7 triode (Kurt Blum model).

    Args:
        circuit: Circuit to add to
        plate: Plate node
        grid: Grid node
        cathode: Cathode node
        name: Device name
        params: Model parameter overrides (mu, ex, kg1, kp, kvb, rgi)

    Returns:
        The new KurtBlum12AX7
    """
    device = KurtBlum12AX7(name, **_params(**params))
    return circuit.connect(device, plate, grid, cathode)
