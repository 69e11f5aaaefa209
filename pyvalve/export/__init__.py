"""pyvalve export module: SPICE netlists and SI value formatting."""

from .netlist import format_device, netlist_lines, to_netlist, write_netlist
from .units import format_si, parse_si

__all__ = [
    "format_device",
    "netlist_lines",
    "to_netlist",
    "write_netlist",
    "format_si",
    "parse_si",
]
