"""
Device base class and the linear/passive devices.

A device owns a fixed, ordered set of terminals and a set of named float
parameters. ``analyze`` checks wiring, validates parameters and emits the
device's stamps into an Analysis. Parameters are validated lazily, when the
device is analyzed, never when they are assigned.

Parameter changes go through ``Device.set``, which bumps the device revision
and calls the observers registered with ``subscribe`` exactly once per
effective change.
"""

from __future__ import annotations
from typing import NamedTuple, Callable
import math

import sympy

from .. import config
from ..errors import ParameterError, TopologyError
from . import stamps
from .analysis import Analysis
from .network import Terminal


# Closed set of device kinds known to the exporters
DEVICE_KINDS = (
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
)


class ParameterChange(NamedTuple):
    """Change event emitted when a device parameter takes a new value."""
    device: str
    parameter: str
    old: float
    new: float
    revision: int  # device revision after the change


def parameter(name: str, doc: str | None = None) -> property:
    """Property that reads ``name`` from the device parameters and writes through ``Device.set``."""

    def fget(self):
        return self._params[name]

    def fset(self, value):
        self.set(name, value)

    return property(fget, fset, doc=doc)


def _same(old: float, new: float) -> bool:
    if isinstance(old, float) and isinstance(new, float) and math.isnan(old) and math.isnan(new):
        return True
    return old == new


class Device:
    """
    Base class of every circuit device.

    Subclasses declare ``kind``, ``terminal_names``, ``defaults`` and the
    parameters that must be positive, and implement ``stamp``.
    """
    kind: str = "Device"
    terminal_names: tuple[str, ...] = ()
    defaults: tuple[tuple[str, float], ...] = ()  # ((param_name, default_value), ...)
    positive_parameters: tuple[str, ...] = ()
    finite_parameters: tuple[str, ...] = ()
    default_name: str = "X1"

    def __init__(self, name: str | None = None, **params):
        self.name = name if name is not None else self.default_name
        self._terminals = tuple(Terminal(self, t) for t in self.terminal_names)
        self._params: dict[str, float] = dict(self.defaults)
        for key, value in params.items():
            if key not in self._params:
                raise TypeError(f"{type(self).__name__} has no parameter {key!r}")
            self._params[key] = float(value)
        self.revision = 0
        self._observers: list[Callable[[ParameterChange], None]] = []

    @property
    def terminals(self) -> tuple[Terminal, ...]:
        """Terminals in canonical pinout order."""
        return self._terminals

    def terminal(self, name: str) -> Terminal:
        for t in self._terminals:
            if t.name == name:
                return t
        raise KeyError(f"{self.name} has no terminal {name!r}")

    @property
    def parameters(self) -> dict[str, float]:
        """Snapshot of the current parameter values."""
        return dict(self._params)

    def get(self, name: str) -> float:
        return self._params[name]

    def set(self, name: str, value) -> ParameterChange | None:
        """
        Set a parameter.

        Returns:
            The change event, or None if the value did not change (no
            notification is sent in that case).
        """
        if name not in self._params:
            raise KeyError(f"{self.name} has no parameter {name!r}")
        value = float(value)
        old = self._params[name]
        if _same(old, value):
            return None
        self._params[name] = value
        self.revision += 1
        change = ParameterChange(self.name, name, old, value, self.revision)
        for observer in list(self._observers):
            observer(change)
        return change

    def subscribe(self, observer: Callable[[ParameterChange], None]) -> None:
        """Register a callback invoked with every ParameterChange."""
        self._observers.append(observer)

    def unsubscribe(self, observer: Callable[[ParameterChange], None]) -> None:
        self._observers = [o for o in self._observers if o != observer]

    # --- Analysis ---

    def check_wiring(self) -> None:
        for t in self._terminals:
            if not t.connected:
                raise TopologyError(f"terminal {self.name}.{t.name} is not connected")

    def _check_positive(self, name: str) -> None:
        value = self._params[name]
        if not math.isfinite(value) or value <= 0:
            raise ParameterError(self.name, name, value)

    def _check_finite(self, name: str) -> None:
        value = self._params[name]
        if not math.isfinite(value):
            raise ParameterError(self.name, name, value, "must be finite")

    def validate(self) -> None:
        """Raise ParameterError if a parameter is out of range."""
        for name in self.positive_parameters:
            self._check_positive(name)
        for name in self.finite_parameters:
            self._check_finite(name)

    def analyze(self, analysis: Analysis) -> None:
        """
        Emit this device's contribution into ``analysis``.

        Raises:
            TopologyError: If a terminal is not wired.
            ParameterError: If a parameter is invalid.
        """
        self.check_wiring()
        self.validate()
        with analysis.device_scope(self):
            self.stamp(analysis)

    def stamp(self, analysis: Analysis) -> None:
        raise NotImplementedError

    def __repr__(self) -> str:
        params = ", ".join(f"{k}={v!r}" for k, v in self._params.items())
        return f"{type(self).__name__}({self.name!r}{', ' if params else ''}{params})"


class TwoTerminal(Device):
    """Device with an anode (A) and a cathode (C)."""
    terminal_names = ("A", "C")

    @property
    def anode(self) -> Terminal:
        return self._terminals[0]

    @property
    def cathode(self) -> Terminal:
        return self._terminals[1]

    @property
    def V(self) -> sympy.Expr:
        """Voltage across the device, V(A) - V(C)."""
        return self.anode.V - self.cathode.V


class Resistor(TwoTerminal):
    kind = "Resistor"
    defaults = (("resistance", 1e3),)
    positive_parameters = ("resistance",)
    default_name = "R1"

    resistance = parameter("resistance", "Resistance in Ohms.")

    def stamp(self, analysis: Analysis) -> None:
        stamps.resistor(analysis, self.anode, self.cathode, self.resistance)


class Capacitor(TwoTerminal):
    kind = "Capacitor"
    defaults = (("capacitance", 1e-6),)
    positive_parameters = ("capacitance",)
    default_name = "C1"

    capacitance = parameter("capacitance", "Capacitance in Farads.")

    def stamp(self, analysis: Analysis) -> None:
        stamps.capacitor(analysis, self.anode, self.cathode, self.capacitance)


class VoltageSource(TwoTerminal):
    kind = "VoltageSource"
    defaults = (("voltage", 0.0),)
    finite_parameters = ("voltage",)
    default_name = "V1"

    voltage = parameter("voltage", "DC voltage in Volts.")

    def stamp(self, analysis: Analysis) -> None:
        stamps.voltage_source(analysis, self.anode, self.cathode, self.voltage)


class CurrentSource(TwoTerminal):
    kind = "CurrentSource"
    defaults = (("current", 0.0),)
    finite_parameters = ("current",)
    default_name = "I1"

    current = parameter("current", "DC current in Amperes, flowing anode to cathode.")

    def stamp(self, analysis: Analysis) -> None:
        stamps.current_source(analysis, self.anode, self.cathode, self.current)


class Diode(TwoTerminal):
    kind = "Diode"
    defaults = (("saturation_current", 1e-14), ("ideality", 1.0))
    positive_parameters = ("saturation_current", "ideality")
    default_name = "D1"

    saturation_current = parameter("saturation_current", "Saturation current Is in Amperes.")
    ideality = parameter("ideality", "Emission coefficient n.")

    def stamp(self, analysis: Analysis) -> None:
        stamps.diode(analysis, self.anode, self.cathode, self.saturation_current, self.ideality)


class Input(TwoTerminal):
    """Voltage source driven by an external signal, ``V_in[name]``."""
    kind = "Input"
    default_name = "V_in"

    @property
    def signal(self) -> sympy.Symbol:
        return sympy.Symbol(f"V_in[{self.name}]")

    def stamp(self, analysis: Analysis) -> None:
        stamps.voltage_source(analysis, self.anode, self.cathode, self.signal)


class Speaker(TwoTerminal):
    """Speaker load, modeled as its nominal impedance."""
    kind = "Speaker"
    defaults = (("impedance", 8.0),)
    positive_parameters = ("impedance",)
    default_name = "SPKR1"

    impedance = parameter("impedance", "Nominal impedance in Ohms.")

    def stamp(self, analysis: Analysis) -> None:
        stamps.resistor(analysis, self.anode, self.cathode, self.impedance)


def _clamped_wipe(wipe: float) -> float:
    return min(max(wipe, config.WIPE_MIN), config.WIPE_MAX)


class _Wiped:
    """Shared validation for devices with a wiper position in [0, 1]."""

    def _check_wipe(self) -> None:
        wipe = self._params["wipe"]
        if not math.isfinite(wipe) or wipe < 0.0 or wipe > 1.0:
            raise ParameterError(self.name, "wipe", wipe, "must be between 0 and 1")


class Potentiometer(_Wiped, Device):
    """
    Three-terminal potentiometer.

    Topology:
        A ──[R*(1-w)]── W ──[R*w]── C
    """
    kind = "Potentiometer"
    terminal_names = ("A", "C", "W")
    defaults = (("resistance", 10e3), ("wipe", config.DEFAULT_WIPE))
    positive_parameters = ("resistance",)
    default_name = "RPOT1"

    resistance = parameter("resistance", "Total resistance in Ohms.")
    wipe = parameter("wipe", "Wiper position, 0 at the cathode end, 1 at the anode end.")

    @property
    def anode(self) -> Terminal:
        return self._terminals[0]

    @property
    def cathode(self) -> Terminal:
        return self._terminals[1]

    @property
    def wiper(self) -> Terminal:
        return self._terminals[2]

    def validate(self) -> None:
        super().validate()
        self._check_wipe()

    def stamp(self, analysis: Analysis) -> None:
        w = _clamped_wipe(self.wipe)
        stamps.resistor(analysis, self.anode, self.wiper, self.resistance * (1.0 - w))
        stamps.resistor(analysis, self.wiper, self.cathode, self.resistance * w)


class VariableResistor(_Wiped, TwoTerminal):
    """Rheostat: resistance R*w between anode and cathode."""
    kind = "VariableResistor"
    defaults = (("resistance", 10e3), ("wipe", config.DEFAULT_WIPE))
    positive_parameters = ("resistance",)
    default_name = "RVAR1"

    resistance = parameter("resistance", "Full-scale resistance in Ohms.")
    wipe = parameter("wipe", "Fraction of the full-scale resistance in circuit.")

    def validate(self) -> None:
        super().validate()
        self._check_wipe()

    def stamp(self, analysis: Analysis) -> None:
        stamps.resistor(analysis, self.anode, self.cathode, self.resistance * _clamped_wipe(self.wipe))
