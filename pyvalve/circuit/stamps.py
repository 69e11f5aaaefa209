"""
Primitive stamp functions.

Every device decomposes into these two-terminal contributions. Each
function appends exactly one stamp to the analysis (``behavioral_source``
is a composition of two) and never reads stamps emitted by anyone else, so
the order they are called in does not matter.

The node arguments accept either a Node or a wired Terminal.
"""

from __future__ import annotations

import sympy

from .. import config
from ..errors import TopologyError
from .analysis import Analysis
from .network import Node, Terminal


def _node(x: Node | Terminal) -> Node:
    if isinstance(x, Terminal):
        if x.node is None:
            raise TopologyError(f"terminal {x.owner.name}.{x.name} is not connected")
        return x.node
    return x


def resistor(analysis: Analysis, a: Node | Terminal, b: Node | Terminal, resistance) -> None:
    """current(a->b) = (V(a) - V(b)) / R"""
    analysis.add_stamp("R", _node(a), _node(b), resistance)


def capacitor(analysis: Analysis, a: Node | Terminal, b: Node | Terminal, capacitance) -> None:
    """current(a->b) = C * d(V(a) - V(b))/dt"""
    analysis.add_stamp("C", _node(a), _node(b), capacitance)


def voltage_source(analysis: Analysis, a: Node | Terminal, b: Node | Terminal, voltage) -> sympy.Symbol:
    """
    V(a) - V(b) = E

    Introduces one auxiliary unknown, the current through the source.

    Returns:
        The branch-current symbol
    """
    current = analysis.new_branch_current()
    analysis.add_stamp("V", _node(a), _node(b), voltage, aux=(current,))
    return current


def current_source(analysis: Analysis, a: Node | Terminal, b: Node | Terminal, current) -> None:
    """current(a->b) = E"""
    analysis.add_stamp("I", _node(a), _node(b), current)


def diode(
    analysis: Analysis,
    a: Node | Terminal,
    b: Node | Terminal,
    saturation_current,
    ideality=1.0,
) -> None:
    """current(a->b) = Is * (exp((V(a) - V(b)) / (n * Vt)) - 1)"""
    analysis.add_stamp("D", _node(a), _node(b), saturation_current, aux=(sympy.sympify(ideality),))


def behavioral_source(analysis: Analysis, expr) -> tuple[Node, Node]:
    """
    Host an arbitrary expression as the voltage of an isolated pair of
    internal nodes.

    Topology:
        hi ──[1G]──┬── lo
        hi ──(E)───┘

    Returns:
        (hi, lo) internal nodes; V(hi) - V(lo) = expr
    """
    hi = analysis.new_internal_node()
    lo = analysis.new_internal_node()
    resistor(analysis, hi, lo, config.BLEEDER_RESISTANCE)
    voltage_source(analysis, hi, lo, expr)
    return hi, lo
