"""
SPICE netlist export.

One line per device, dispatched on ``Device.kind``. Devices of a kind with
no formatting rule are skipped.
"""

from __future__ import annotations
from pathlib import Path
from typing import TYPE_CHECKING

from .. import config
from ..errors import TopologyError, UnsupportedDeviceError
from ..logging import logger
from .units import format_si

if TYPE_CHECKING:
    from ..circuit.devices import Device
    from ..circuit.network import Circuit, Terminal


def _net(terminal: Terminal) -> str:
    if terminal.node is None:
        raise TopologyError(f"terminal {terminal.owner.name}.{terminal.name} is not connected")
    return terminal.node.name


def _wipe(wipe: float) -> str:
    return f"{wipe:g}"


def format_device(device: Device) -> str:
    """
    Netlist line for one device.

    Raises:
        UnsupportedDeviceError: If the device kind has no netlist form.
    """
    kind = device.kind
    nets = [_net(t) for t in device.terminals]

    if kind == "Resistor":
        return f"R{device.name} {nets[0]} {nets[1]} {format_si(device.resistance)}"
    elif kind == "Capacitor":
        return f"C{device.name} {nets[0]} {nets[1]} {format_si(device.capacitance)}"
    elif kind == "Input":
        return f"V_SRC_{device.name} {nets[0]} {nets[1]} {config.INPUT_SPICE_SOURCE}"
    elif kind == "VoltageSource":
        return f"V_SRC_{device.name} {nets[0]} {nets[1]} {format_si(device.voltage)} DC"
    elif kind == "KurtBlum12AX7":
        plate, grid, cathode = nets
        return f"XU{device.name} {plate} {grid} {cathode} {device.spice_model}"
    elif kind == "Potentiometer":
        anode, cathode, wiper = nets
        return (
            f"XR_{device.name} {anode} {cathode} {wiper} potentiometer "
            f"R={format_si(device.resistance)} wiper={_wipe(device.wipe)}"
        )
    elif kind == "VariableResistor":
        # Rheostat: wiper tied back to the anode
        anode, cathode = nets
        return (
            f"XR_{device.name} {anode} {cathode} {anode} potentiometer "
            f"R={format_si(device.resistance)} wiper={_wipe(device.wipe)}"
        )
    elif kind == "Speaker":
        return f"R_SPKR_{device.name} {nets[0]} {nets[1]} {format_si(device.impedance)}"
    else:
        raise UnsupportedDeviceError(device.name, kind)


def netlist_lines(circuit: Circuit) -> list[str]:
    """Netlist of ``circuit`` as a list of lines."""
    lines = [f"* {circuit.name}"]
    skipped = 0
    for device in circuit.devices:
        try:
            lines.append(format_device(device))
        except UnsupportedDeviceError as e:
            skipped += 1
            logger.info(f"skipping {device.name}: {e}")

    lines.append(f".INC {config.TRIODE_SPICE_INCLUDE}")
    lines.extend(config.POTENTIOMETER_SUBCKT)
    lines.append(config.NETLIST_ANALYSIS)

    logger.debug(f"{circuit.name}: exported {len(circuit.devices) - skipped} devices, skipped {skipped}")
    return lines


def to_netlist(circuit: Circuit) -> str:
    """Netlist of ``circuit`` as text."""
    return "\n".join(netlist_lines(circuit)) + "\n"


def write_netlist(circuit: Circuit, path: str | Path) -> Path:
    """
    Write the netlist of ``circuit`` to ``path``.

    Returns:
        The path written
    """
    path = Path(path)
    path.write_text(to_netlist(circuit), encoding="ascii")
    logger.info(f"wrote netlist {path}")
    return path
