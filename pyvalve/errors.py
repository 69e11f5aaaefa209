"""Exception types raised while building, analyzing and exporting circuits."""

from __future__ import annotations


class PyValveError(ValueError):
    """Base class for all pyvalve errors."""


class TopologyError(PyValveError):
    """Terminal wired twice, device analyzed with an unwired terminal, or a
    device name used twice in one circuit."""


class ParameterError(PyValveError):
    """A device parameter is out of its valid range when the device is analyzed."""

    def __init__(self, device: str, parameter: str, value, reason: str = "must be positive and finite"):
        self.device = device
        self.parameter = parameter
        self.value = value
        self.reason = reason
        super().__init__(f"{device}: parameter {parameter}={value!r} {reason}")


class UnsupportedDeviceError(PyValveError):
    """An export sink has no formatting rule for a device kind."""

    def __init__(self, device: str, kind: str, target: str = "netlist"):
        self.device = device
        self.kind = kind
        self.target = target
        super().__init__(f"{target} export has no rule for {kind} device {device!r}")
