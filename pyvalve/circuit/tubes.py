"""
Vacuum tube models.

KurtBlum12AX7 reproduces Kurt Blum's SPICE macro-model of the 12AX7 triode
as a composition of primitive stamps:

    E1 = ln(1 + exp(Kp * (1/mu + Vgk / sqrt(Kvb + Vpk^2)))) * Vpk / Kp
    Ip = 0.5 * (sign(E1)*|E1|^Ex + |E1|^Ex) / Kg1

plus a grid-current junction (Rgi in series with a diode from grid to
cathode).
"""

from __future__ import annotations

import sympy

from .. import config
from . import stamps
from .analysis import Analysis
from .devices import Device, parameter
from .network import Terminal


def abs_power(x, y) -> sympy.Expr:
    """|x|^y"""
    return sympy.Abs(x) ** y


def signed_power(x, y) -> sympy.Expr:
    """sign(x) * |x|^y"""
    return sympy.sign(x) * sympy.Abs(x) ** y


def drive_expression(vpk, vgk, mu, kp, kvb) -> sympy.Expr:
    """
    Effective drive voltage E1 of the Koren/Blum triode model.

    The ln(1 + exp(.)) soft knee keeps E1 smooth across the cutoff
    transition; Kvb > 0 keeps the square root away from zero.

    Args:
        vpk: Plate-cathode voltage (expression or number)
        vgk: Grid-cathode voltage (expression or number)
        mu: Amplification factor
        kp: Knee parameter
        kvb: Knee voltage parameter (V^2)
    """
    vpk = sympy.sympify(vpk)
    vgk = sympy.sympify(vgk)
    mu = sympy.sympify(mu)
    kp = sympy.sympify(kp)
    kvb = sympy.sympify(kvb)
    return sympy.log(1 + sympy.exp(kp * (1 / mu + vgk * (kvb + vpk * vpk) ** -0.5))) * vpk / kp


def plate_current_expression(e1, ex, kg1) -> sympy.Expr:
    """
    Plate current from the drive voltage.

    Equals E1^Ex / Kg1 for E1 > 0 and 0 for E1 <= 0.
    """
    ex = sympy.sympify(ex)
    return sympy.Rational(1, 2) * (signed_power(e1, ex) + abs_power(e1, ex)) / kg1


class KurtBlum12AX7(Device):
    """
    12AX7 triode (Kurt Blum model).

    Terminals (canonical order): Plate (P), Grid (G), Cathode (K).

    Topology emitted by ``stamp``:
        n7 ──[1G]── n0,  n7 ──(E1)── n0       drive expression host
        P  ──[1G]── K,   P  ──(Ip)──> K        plate current
        G  ──[Rgi]── n5 ──|>|── K              grid current
    """
    kind = "KurtBlum12AX7"
    terminal_names = ("P", "G", "K")
    defaults = (
        ("mu", 96.20),
        ("ex", 1.437),
        ("kg1", 613.4),
        ("kp", 740.3),
        ("kvb", 1672.0),
        ("rgi", 2000.0),
    )
    positive_parameters = ("mu", "ex", "kg1", "kp", "kvb", "rgi")
    default_name = "V1"
    spice_model = config.TRIODE_SPICE_MODEL

    mu = parameter("mu", "Voltage gain.")
    ex = parameter("ex", "Plate current exponent.")
    kg1 = parameter("kg1", "Plate current scale.")
    kp = parameter("kp", "Knee parameter.")
    kvb = parameter("kvb", "Knee voltage parameter.")
    rgi = parameter("rgi", "Grid series resistance in Ohms.")

    @property
    def plate(self) -> Terminal:
        return self._terminals[0]

    @property
    def grid(self) -> Terminal:
        return self._terminals[1]

    @property
    def cathode(self) -> Terminal:
        return self._terminals[2]

    def drive(self) -> sympy.Expr:
        """E1 in terms of the terminal voltages."""
        vpk = self.plate.V - self.cathode.V
        vgk = self.grid.V - self.cathode.V
        return drive_expression(
            vpk,
            vgk,
            sympy.Float(self.mu),
            sympy.Float(self.kp),
            sympy.Float(self.kvb),
        )

    def plate_current(self) -> sympy.Expr:
        """Plate current Ip in terms of the terminal voltages."""
        return plate_current_expression(self.drive(), sympy.Float(self.ex), sympy.Float(self.kg1))

    def stamp(self, analysis: Analysis) -> None:
        e1 = self.drive()

        stamps.behavioral_source(analysis, e1)

        stamps.resistor(analysis, self.plate, self.cathode, config.BLEEDER_RESISTANCE)
        stamps.current_source(
            analysis,
            self.plate,
            self.cathode,
            plate_current_expression(e1, sympy.Float(self.ex), sympy.Float(self.kg1)),
        )

        n5 = analysis.new_internal_node()
        stamps.resistor(analysis, self.grid, n5, self.rgi)
        stamps.diode(analysis, n5, self.cathode, config.GRID_DIODE_IS, config.GRID_DIODE_N)
