"""
Numeric boundary between the symbolic equation system and a solver.

Expressions are compiled to JAX callables with ``sympy.lambdify``, so a
downstream Newton iteration can evaluate the residual and get its Jacobian
from ``jax.jacfwd`` without any hand-written derivatives.
"""

from __future__ import annotations
from typing import NamedTuple, Callable, Sequence

import jax
import jax.numpy as jnp
from jax import Array
import sympy

from ..logging import logger
from .analysis import Analysis


def lambdify(expr, symbols: Sequence[sympy.Symbol]) -> Callable:
    """
    Compile a SymPy expression (or list of expressions) into a JAX function.

    The returned function takes one positional argument per symbol, in order.
    """
    return sympy.lambdify(list(symbols), expr, modules="jax")


class CompiledSystem(NamedTuple):
    """
    Equation system compiled for a Newton solver.

    ``residual(x, u)`` is zero at a solution; ``jacobian(x, u)`` is
    d(residual)/dx. ``x`` follows ``unknowns``, ``u`` follows ``inputs``.
    """
    unknowns: tuple[sympy.Symbol, ...]
    inputs: tuple[sympy.Symbol, ...]
    equations: tuple[sympy.Expr, ...]
    residual: Callable[[Array, Array], Array]
    jacobian: Callable[[Array, Array], Array]

    def index(self, symbol: sympy.Symbol) -> int:
        """Position of an unknown in ``x``."""
        return self.unknowns.index(symbol)


def compile_system(analysis: Analysis, inputs: Sequence[sympy.Symbol] = ()) -> CompiledSystem:
    """
    Compile the DC equations of an analysis.

    Args:
        analysis: Result of ``Circuit.analyze()``
        inputs: Free symbols that are not unknowns (e.g. ``Input.signal``)

    Returns:
        CompiledSystem with residual and jacobian functions
    """
    unknowns = analysis.unknowns
    inputs = tuple(inputs)
    equations = tuple(analysis.equations(dc=True))

    unresolved = set().union(*(eq.free_symbols for eq in equations)) - set(unknowns) - set(inputs)
    if unresolved:
        names = ", ".join(sorted(str(s) for s in unresolved))
        raise ValueError(f"Equations depend on symbols that are neither unknowns nor inputs: {names}")

    fn = lambdify(list(equations), unknowns + inputs)
    n_inputs = len(inputs)

    def residual(x: Array, u: Array | None = None) -> Array:
        if u is None:
            u = jnp.zeros(n_inputs)
        values = fn(*x, *u)
        return jnp.stack([jnp.asarray(v, dtype=jnp.result_type(x)) for v in values])

    logger.debug(f"compiled {len(equations)} equations in {len(unknowns)} unknowns")

    return CompiledSystem(
        unknowns=unknowns,
        inputs=inputs,
        equations=equations,
        residual=residual,
        jacobian=jax.jacfwd(residual, argnums=0),
    )
