"""
Equation-system builder for Modified Nodal Analysis (MNA).

Devices contribute to an :class:`Analysis` by emitting stamps: one symbolic
relation between two nodes per stamp. The builder keeps the stamps in a flat
append-only list, hands out internal nodes, and tracks the auxiliary
branch-current unknowns that voltage sources introduce.

Stamp kinds (``Stamp.value`` / ``Stamp.aux``):
    "R": resistance R                 current(a->b) = (V(a) - V(b)) / R
    "C": capacitance C                current(a->b) = C * d(V(a) - V(b))/dt
    "V": voltage E, aux=(i,)          V(a) - V(b) = E, i flows a->b through the source
    "I": current E                    current(a->b) = E
    "D": saturation current Is,       current(a->b) = Is * (exp((V(a) - V(b)) / (n*Vt)) - 1)
         aux=(n,)
"""

from __future__ import annotations
from contextlib import contextmanager
from typing import NamedTuple, TYPE_CHECKING
import itertools
import threading

import sympy

from .. import config
from ..errors import TopologyError
from ..logging import logger
from .network import Node

if TYPE_CHECKING:
    from .network import Circuit
    from .devices import Device


STAMP_KINDS = ("R", "C", "V", "I", "D")


class Stamp(NamedTuple):
    """One atomic contribution to the equation system."""
    kind: str  # one of STAMP_KINDS
    a: Node
    b: Node
    value: sympy.Expr
    device: str  # name of the emitting device
    aux: tuple = ()  # kind-specific extras (branch current symbol, diode ideality)


# Process-wide allocator for internal node identities
_internal_ids = itertools.count(1)
_internal_lock = threading.Lock()


def _next_internal_id() -> int:
    with _internal_lock:
        return next(_internal_ids)


class _DeviceScope:
    """Bookkeeping for the device currently emitting stamps."""

    def __init__(self, device: Device, first_stamp: int):
        self.device = device
        self.first_stamp = first_stamp
        self.internal_nodes: list[Node] = []


class Analysis:
    """
    Accumulates the stamps of every device of a circuit.

    Args:
        nodes: Named nodes of the circuit (ground first)
    """

    def __init__(self, nodes: tuple[Node, ...] = (Node("0", 0),)):
        self.nodes = tuple(nodes)
        self._stamps: list[Stamp] = []
        self._internal_nodes: list[Node] = []
        self._currents: list[sympy.Symbol] = []
        self._lock = threading.Lock()
        self._scope: _DeviceScope | None = None

    @property
    def stamps(self) -> tuple[Stamp, ...]:
        return tuple(self._stamps)

    @property
    def internal_nodes(self) -> tuple[Node, ...]:
        return tuple(self._internal_nodes)

    @property
    def branch_currents(self) -> tuple[sympy.Symbol, ...]:
        return tuple(self._currents)

    @property
    def unknowns(self) -> tuple[sympy.Symbol, ...]:
        """
        Unknowns of the system: voltages of the named nodes touched by a
        stamp (ground excluded), internal node voltages, then auxiliary
        branch currents.
        """
        named = [n.V for n in self._active_nodes()]
        internal = [n.V for n in self._internal_nodes]
        return tuple(named + internal + list(self._currents))

    def _active_nodes(self) -> list[Node]:
        """Named non-ground nodes referenced by at least one stamp, in arena order."""
        referenced = {n for s in self._stamps for n in (s.a, s.b)}
        return [n for n in self.nodes if not n.is_ground and n in referenced]

    # --- Builder interface used by devices and stamp functions ---

    def new_internal_node(self, owner: str | None = None) -> Node:
        """
        Allocate a fresh device-private node.

        Identities are unique across all analyses in the process.
        """
        if owner is None and self._scope is not None:
            owner = self._scope.device.name
        index = _next_internal_id()
        name = f"_{owner}.{index}" if owner else f"_n{index}"
        node = Node(name, index, internal=True)
        with self._lock:
            self._internal_nodes.append(node)
            if self._scope is not None:
                self._scope.internal_nodes.append(node)
        return node

    def new_branch_current(self) -> sympy.Symbol:
        """
        Register an auxiliary branch-current unknown for the current device.

        Named I[<device>]; a name already taken in this analysis gets a
        .1, .2, ... suffix.
        """
        with self._lock:
            label = self._scope.device.name if self._scope is not None else "#"
            symbol = sympy.Symbol(f"I[{label}]")
            suffix = 1
            while symbol in self._currents:
                symbol = sympy.Symbol(f"I[{label}.{suffix}]")
                suffix += 1
            self._currents.append(symbol)
        return symbol

    def add_stamp(self, kind: str, a: Node, b: Node, value, aux: tuple = ()) -> None:
        """Append one stamp. No deduplication is done."""
        if kind not in STAMP_KINDS:
            raise ValueError(f"Unknown stamp kind {kind!r}")
        device = self._scope.device.name if self._scope is not None else ""
        stamp = Stamp(kind, a, b, sympy.sympify(value), device, tuple(aux))
        with self._lock:
            self._stamps.append(stamp)

    @contextmanager
    def device_scope(self, device: Device):
        """
        Attribute the stamps emitted inside the block to ``device``.

        On exit, every internal node allocated in the block must be
        referenced by a stamp emitted in the block.
        """
        scope = _DeviceScope(device, len(self._stamps))
        previous, self._scope = self._scope, scope
        try:
            yield scope
        finally:
            self._scope = previous
        emitted = self._stamps[scope.first_stamp:]
        referenced = {n for s in emitted for n in (s.a, s.b)}
        for node in scope.internal_nodes:
            if node not in referenced:
                raise TopologyError(f"{device.name}: internal node {node.name} is not referenced by any stamp")

    # --- Assembly, consumed by solvers ---

    def branch_current(self, stamp: Stamp, dc: bool = True) -> sympy.Expr:
        """Current flowing from ``stamp.a`` to ``stamp.b`` through the stamp."""
        va, vb = stamp.a.V, stamp.b.V
        if stamp.kind == "R":
            return (va - vb) / stamp.value
        if stamp.kind == "C":
            if dc:
                return sympy.Integer(0)
            return stamp.value * (stamp.a.dV - stamp.b.dV)
        if stamp.kind == "V":
            return stamp.aux[0]
        if stamp.kind == "I":
            return stamp.value
        # "D"
        ideality = stamp.aux[0]
        return stamp.value * (sympy.exp((va - vb) / (ideality * config.THERMAL_VOLTAGE)) - 1)

    def node_currents(self, dc: bool = True) -> dict[Node, sympy.Expr]:
        """Net current leaving each non-ground node touched by a stamp."""
        currents: dict[Node, sympy.Expr] = {}
        for node in self._active_nodes():
            currents[node] = sympy.Integer(0)
        for node in self._internal_nodes:
            currents[node] = sympy.Integer(0)

        for stamp in self._stamps:
            i = self.branch_current(stamp, dc=dc)
            if not stamp.a.is_ground:
                currents[stamp.a] = currents.get(stamp.a, sympy.Integer(0)) + i
            if not stamp.b.is_ground:
                currents[stamp.b] = currents.get(stamp.b, sympy.Integer(0)) - i
        return currents

    def equations(self, dc: bool = True) -> list[sympy.Expr]:
        """
        Equations of the system, each an expression equal to zero.

        One KCL equation per non-ground node touched by a stamp (named nodes, then
        internal nodes), followed by one constraint per voltage source.
        """
        eqs = list(self.node_currents(dc=dc).values())
        for stamp in self._stamps:
            if stamp.kind == "V":
                eqs.append(stamp.a.V - stamp.b.V - stamp.value)
        return eqs


def analyze_circuit(circuit: Circuit) -> Analysis:
    """
    Run every device of ``circuit`` against a fresh Analysis.

    Raises:
        TopologyError: If a device has an unwired terminal or a terminal wired
            to a node of another circuit.
        ParameterError: If a device parameter is invalid.
    """
    for device in circuit.devices:
        for t in device.terminals:
            if t.node is not None and not circuit.owns(t.node):
                raise TopologyError(
                    f"terminal {device.name}.{t.name} is wired to {t.node.name!r}, "
                    f"which does not belong to {circuit.name!r}"
                )

    analysis = Analysis(circuit.nodes)
    for device in circuit.devices:
        device.analyze(analysis)
    logger.debug(
        f"{circuit.name}: analyzed {len(circuit.devices)} devices, "
        f"{len(analysis.stamps)} stamps, {len(analysis.internal_nodes)} internal nodes, "
        f"{len(analysis.unknowns)} unknowns"
    )
    return analysis
