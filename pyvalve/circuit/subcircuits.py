"""Reusable subcircuit building blocks."""

from __future__ import annotations
from typing import NamedTuple

from .components import R, C, Triode12AX7
from .devices import Resistor, Capacitor
from .network import Circuit, Node
from .tubes import KurtBlum12AX7


class CommonCathodeRefs(NamedTuple):
    """References to the devices and nodes of a common-cathode stage."""
    tube: KurtBlum12AX7
    r_grid: Resistor
    r_plate: Resistor
    r_cathode: Resistor
    c_bypass: Capacitor | None
    cathode: Node
    prefix: str


def CommonCathodeStage(
    circuit: Circuit,
    grid: Node | str,
    supply: Node | str,
    plate: Node | str,
    *,
    prefix: str = "cc",
    plate_load: float | str = 100e3,
    cathode_resistor: float | str = 1.5e3,
    grid_leak: float | str = 1e6,
    bypass: float | str | None = 22e-6,
) -> CommonCathodeRefs:
    """
    Create a 12AX7 common-cathode gain stage.

    Topology:
        supply ──[Rp]──┬── plate
                       P
        grid ─────── G(V)
          │            K
        [Rg]           ├── cathode
          │          [Rk] ║ [Ck]
         gnd ──────────┴───┘

    Device names are {prefix}_V, {prefix}_RG, {prefix}_RP, {prefix}_RK and
    {prefix}_CK; the cathode node is {prefix}_K.

    Args:
        circuit: Circuit to add to
        grid: Grid (input) node
        supply: B+ node
        plate: Plate (output) node
        prefix: Name prefix for devices and the cathode node
        plate_load: Plate load resistance
        cathode_resistor: Cathode bias resistance
        grid_leak: Grid-to-ground resistance
        bypass: Cathode bypass capacitance, None for an unbypassed stage

    Returns:
        CommonCathodeRefs
    """
    cathode = circuit.node(f"{prefix}_K")
    gnd = circuit.gnd

    r_grid = R(circuit, grid, gnd, name=f"{prefix}_RG", value=grid_leak)
    r_plate = R(circuit, supply, plate, name=f"{prefix}_RP", value=plate_load)
    tube = Triode12AX7(circuit, plate, grid, cathode, name=f"{prefix}_V")
    r_cathode = R(circuit, cathode, gnd, name=f"{prefix}_RK", value=cathode_resistor)
    c_bypass = None
    if bypass is not None:
        c_bypass = C(circuit, cathode, gnd, name=f"{prefix}_CK", value=bypass)

    return CommonCathodeRefs(tube, r_grid, r_plate, r_cathode, c_bypass, cathode, prefix)


def Series(
    circuit: Circuit,
    n1: Node | str,
    n2: Node | str,
    elem1_factory,
    elem2_factory,
    prefix: str = "ser",
) -> tuple:
    """
    Connect two two-terminal elements in series.

    Topology:
        n1 ──[elem1]──(n_mid)──[elem2]── n2

    Args:
        circuit: Circuit to add to
        n1: Input terminal
        n2: Output terminal
        elem1_factory: Callable (circuit, node_a, node_b) -> device
        elem2_factory: Callable (circuit, node_a, node_b) -> device
        prefix: Name prefix for the internal connection node

    Returns:
        (device1, device2, n_mid)

    Example:
        r, c, mid = Series(
            circuit, "in", "out",
            lambda ckt, a, b: R(ckt, a, b, name="R1", value=1000.0),
            lambda ckt, a, b: C(ckt, a, b, name="C1", value=1e-6),
            prefix="rc",
        )
    """
    n_mid = circuit.node(f"{prefix}_mid")
    dev1 = elem1_factory(circuit, n1, n_mid)
    dev2 = elem2_factory(circuit, n_mid, n2)
    return dev1, dev2, n_mid


def Parallel(
    circuit: Circuit,
    n1: Node | str,
    n2: Node | str,
    elem1_factory,
    elem2_factory,
) -> tuple:
    """
    Connect two two-terminal elements in parallel.

    Topology:
        n1 ──┬──[elem1]──┬── n2
             └──[elem2]──┘

    Returns:
        (device1, device2)
    """
    dev1 = elem1_factory(circuit, n1, n2)
    dev2 = elem2_factory(circuit, n1, n2)
    return dev1, dev2
