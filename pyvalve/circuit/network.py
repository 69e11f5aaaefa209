"""Node, Terminal and Circuit classes for circuit topology."""

from __future__ import annotations
from typing import NamedTuple, TYPE_CHECKING

import sympy

from ..errors import TopologyError
from ..logging import logger

if TYPE_CHECKING:
    from .analysis import Analysis
    from .devices import Device, ParameterChange


GROUND_NAME = "0"


class Node(NamedTuple):
    """A node in the circuit (electrical connection point)."""
    name: str
    index: int  # handle into the circuit arena (0 = ground), or allocator id if internal
    internal: bool = False

    @property
    def is_ground(self) -> bool:
        return not self.internal and self.index == 0

    @property
    def V(self) -> sympy.Expr:
        """Voltage of this node relative to ground (symbolic)."""
        if self.is_ground:
            return sympy.Integer(0)
        return sympy.Symbol(f"V[{self.name}]")

    @property
    def dV(self) -> sympy.Expr:
        """Time derivative of the node voltage (symbolic)."""
        if self.is_ground:
            return sympy.Integer(0)
        return sympy.Symbol(f"dV[{self.name}]/dt")


class Terminal:
    """
    Connection point of a device.

    A terminal belongs to exactly one device and is wired to at most one
    node. Once wired, the connection cannot be changed.
    """

    __slots__ = ("owner", "name", "_node")

    def __init__(self, owner: Device, name: str):
        self.owner = owner
        self.name = name
        self._node: Node | None = None

    @property
    def node(self) -> Node | None:
        """Node this terminal is wired to, or None."""
        return self._node

    @property
    def connected(self) -> bool:
        return self._node is not None

    def connect(self, node: Node) -> None:
        """
        Wire this terminal to a node.

        Raises:
            TopologyError: If the terminal is already wired.
        """
        if self._node is not None:
            raise TopologyError(
                f"terminal {self.owner.name}.{self.name} is already connected to {self._node.name}"
            )
        self._node = node

    @property
    def V(self) -> sympy.Expr:
        """Voltage of the connected node relative to ground (symbolic)."""
        if self._node is None:
            raise TopologyError(f"terminal {self.owner.name}.{self.name} is not connected")
        return self._node.V

    def __repr__(self) -> str:
        target = self._node.name if self._node is not None else None
        return f"Terminal({self.owner.name}.{self.name} -> {target})"


class Circuit:
    """
    Device and node graph of one circuit.

    Named nodes live in an arena owned by the circuit; ``circuit.node(name)``
    returns the existing node of that name or creates it. Devices are
    registered with ``add`` and wired with ``connect``:

        circuit = Circuit("preamp")
        r1 = circuit.add(Resistor("R1", resistance=100e3))
        circuit.connect(r1, "N003", "N004")
        analysis = circuit.analyze()
    """

    def __init__(self, name: str = "circuit"):
        self.name = name
        self._nodes: list[Node] = [Node(GROUND_NAME, 0)]
        self._node_by_name: dict[str, Node] = {GROUND_NAME: self._nodes[0]}
        self._devices: list[Device] = []
        self.topology_revision = 0
        self._cache_key: tuple | None = None
        self._cache: Analysis | None = None

    @property
    def gnd(self) -> Node:
        """Ground node (reference, always 0V)."""
        return self._nodes[0]

    @property
    def nodes(self) -> tuple[Node, ...]:
        """All named nodes, ground first."""
        return tuple(self._nodes)

    @property
    def num_nodes(self) -> int:
        """Number of non-ground named nodes."""
        return len(self._nodes) - 1

    @property
    def devices(self) -> tuple[Device, ...]:
        return tuple(self._devices)

    def node(self, name: str) -> Node:
        """Return the node called ``name``, creating it if needed."""
        existing = self._node_by_name.get(name)
        if existing is not None:
            return existing
        new_node = Node(name, len(self._nodes))
        self._nodes.append(new_node)
        self._node_by_name[name] = new_node
        return new_node

    def device(self, name: str) -> Device:
        """Look up a device by name."""
        for device in self._devices:
            if device.name == name:
                return device
        raise KeyError(name)

    def __contains__(self, device: Device) -> bool:
        return any(d is device for d in self._devices)

    def add(self, device: Device) -> Device:
        """
        Register a device with this circuit.

        Returns:
            The device, for chaining.

        Raises:
            TopologyError: If a device of the same name is already present.
        """
        if device in self:
            raise TopologyError(f"device {device.name!r} is already part of {self.name!r}")
        if any(d.name == device.name for d in self._devices):
            raise TopologyError(f"duplicate device name {device.name!r} in {self.name!r}")
        self._devices.append(device)
        device.subscribe(self._on_device_changed)
        self._topology_changed()
        return device

    def remove(self, device: Device) -> None:
        """Remove a device from this circuit."""
        self._devices = [d for d in self._devices if d is not device]
        device.unsubscribe(self._on_device_changed)
        self._topology_changed()

    def connect(self, device: Device, *nodes: Node | str) -> Device:
        """
        Wire every terminal of ``device``, in canonical terminal order.

        Args:
            device: Device to wire (added to the circuit if it is not yet)
            nodes: One Node or node name per terminal

        Returns:
            The device.
        """
        if len(nodes) != len(device.terminals):
            raise TopologyError(
                f"{device.name} has {len(device.terminals)} terminals, got {len(nodes)} nodes"
            )
        # Nothing is wired or registered unless every terminal can be
        for terminal in device.terminals:
            if terminal.connected:
                raise TopologyError(
                    f"terminal {device.name}.{terminal.name} is already connected to {terminal.node.name}"
                )
        for node in nodes:
            if isinstance(node, Node) and not self.owns(node):
                raise TopologyError(f"node {node.name!r} does not belong to {self.name!r}")
        if device not in self:
            self.add(device)
        for terminal, node in zip(device.terminals, nodes):
            terminal.connect(self._resolve(node))
        self._topology_changed()
        return device

    def owns(self, node: Node) -> bool:
        """True if ``node`` is a named node of this circuit."""
        return self._node_by_name.get(node.name) == node

    def _resolve(self, node: Node | str) -> Node:
        if isinstance(node, Node):
            if not self.owns(node):
                raise TopologyError(f"node {node.name!r} does not belong to {self.name!r}")
            return node
        return self.node(node)

    def _topology_changed(self) -> None:
        self.topology_revision += 1
        self._cache = None
        self._cache_key = None

    def _on_device_changed(self, change: ParameterChange) -> None:
        if self._cache is not None:
            logger.debug(f"{self.name}: {change.device}.{change.parameter} changed, dropping cached analysis")
        self._cache = None
        self._cache_key = None

    def _analysis_key(self) -> tuple:
        return (
            self.topology_revision,
            tuple(
                (id(d), d.revision, tuple(t.node for t in d.terminals))
                for d in self._devices
            ),
        )

    def analyze(self) -> Analysis:
        """
        Build (or reuse) the equation system of this circuit.

        The result is cached and recomputed when a device parameter changes
        or the topology changes.

        Raises:
            TopologyError: If a device has an unwired terminal.
            ParameterError: If a device parameter is invalid.
        """
        key = self._analysis_key()
        if self._cache is not None and self._cache_key == key:
            return self._cache

        from .analysis import analyze_circuit
        analysis = analyze_circuit(self)
        self._cache = analysis
        self._cache_key = key
        return analysis

    def __repr__(self) -> str:
        return f"Circuit({self.name!r}, nodes={self.num_nodes}, devices={len(self._devices)})"
