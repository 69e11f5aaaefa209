"""pyvalve circuit module.

Topology, device models and the MNA equation-system builder.

Devices:
    - Resistor, Capacitor, VoltageSource, CurrentSource, Diode
    - Input (externally driven source), Speaker (load)
    - Potentiometer, VariableResistor
    - KurtBlum12AX7: 12AX7 triode

Subcircuits:
    - CommonCathodeStage: triode gain stage
    - Series, Parallel
"""

from .network import Circuit, Node, Terminal
from .analysis import Analysis, Stamp, STAMP_KINDS, analyze_circuit
from .devices import (
    DEVICE_KINDS,
    Device,
    ParameterChange,
    TwoTerminal,
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
from .tubes import (
    KurtBlum12AX7,
    abs_power,
    signed_power,
    drive_expression,
    plate_current_expression,
)
from .components import R, C, VSource, ISource, D, SignalInput, Load, Pot, VarR, Triode12AX7
from .subcircuits import CommonCathodeStage, CommonCathodeRefs, Series, Parallel

__all__ = [
    # Topology
    "Circuit",
    "Node",
    "Terminal",
    # Analysis
    "Analysis",
    "Stamp",
    "STAMP_KINDS",
    "analyze_circuit",
    # Devices
    "DEVICE_KINDS",
    "Device",
    "ParameterChange",
    "TwoTerminal",
    "Resistor",
    "Capacitor",
    "VoltageSource",
    "CurrentSource",
    "Diode",
    "Input",
    "Speaker",
    "Potentiometer",
    "VariableResistor",
    "KurtBlum12AX7",
    # Model expressions
    "abs_power",
    "signed_power",
    "drive_expression",
    "plate_current_expression",
    # Factories
    "R",
    "C",
    "VSource",
    "ISource",
    "D",
    "SignalInput",
    "Load",
    "Pot",
    "VarR",
    "Triode12AX7",
    # Subcircuits
    "CommonCathodeStage",
    "CommonCathodeRefs",
    "Series",
    "Parallel",
]
