"""Default configuration values for pyvalve.

This module centralizes the constants used by the device models, the
analysis builder and the netlist exporter.
"""

# Physical constants (CODATA 2018 exact values)
K_BOLTZMANN = 1.380649e-23  # Boltzmann constant (J/K)
Q_ELECTRON = 1.602176634e-19  # Elementary charge (C)

# Temperature in Kelvin (27C = 300.15K)
DEFAULT_TEMPERATURE_K = 300.15

# Thermal voltage kT/q at the default temperature (~25.86 mV)
THERMAL_VOLTAGE = K_BOLTZMANN * DEFAULT_TEMPERATURE_K / Q_ELECTRON

# Bleeder resistance used to keep auxiliary and device-internal branches
# from floating (1 GOhm)
BLEEDER_RESISTANCE = 1e9

# Grid-current junction of the 12AX7 model (D3 5 3 DX, .MODEL DX D(IS=1N))
GRID_DIODE_IS = 1e-9
GRID_DIODE_N = 1.0

# Potentiometer wiper is kept away from the rails so neither half shorts
WIPE_MIN = 1e-3
WIPE_MAX = 0.999
DEFAULT_WIPE = 0.5

# SPICE export
TRIODE_SPICE_MODEL = "NH12AX7"
TRIODE_SPICE_INCLUDE = "dmtriodep.inc"
INPUT_SPICE_SOURCE = "SINE(0 0.6447 440) AC"
POTENTIOMETER_SUBCKT = (
    ".subckt potentiometer A C W",
    ".param w=limit(wiper,1m,.999)",
    "R0 A W {R*(1-w)}",
    "R1 W C {R*(w)}",
    ".ends potentiometer",
)
NETLIST_ANALYSIS = ".tran 100m"

# Significant digits used when formatting component values
SI_SIGNIFICANT_DIGITS = 5
