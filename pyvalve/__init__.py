"""pyvalve - symbolic MNA device models for tube audio circuits.

Devices (resistors, sources, diodes, potentiometers, the 12AX7 triode)
contribute symbolic stamps to a shared Modified Nodal Analysis system.
The assembled system can be compiled to JAX residual/Jacobian functions
for a Newton solver, or exported as a SPICE netlist.

    - circuit: topology, devices, analysis builder, numeric boundary
    - export: SPICE netlist and SI value formatting

Usage:
    from pyvalve.circuit import Circuit, R, VSource, Triode12AX7
    from pyvalve.export import to_netlist
"""

__version__ = "0.1.0"
__all__ = ["circuit", "export", "__version__"]
