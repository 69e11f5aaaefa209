"""
Test: JAX compilation of the equation system.

This validates:
- Residual is zero at the known solution of a linear circuit
- One Newton step from zero solves a linear circuit
- Jacobian of a triode stage is finite at a plausible operating point
- Input signals are passed through ``u``
"""
import pytest
import jax
import jax.numpy as jnp
import sympy


def _divider():
    from pyvalve.circuit import Circuit, R, VSource

    circuit = Circuit("divider")
    VSource(circuit, "in", "0", name="VS", value=10.0)
    R(circuit, "in", "mid", name="R1", value="1k")
    R(circuit, "mid", "0", name="R2", value="1k")
    return circuit


def test_divider_residual_zero_at_solution():
    from pyvalve.circuit.numeric import compile_system

    system = compile_system(_divider().analyze())
    x = jnp.array([10.0, 5.0, -5e-3])

    r = system.residual(x)
    assert r.shape == (3,)
    assert jnp.allclose(r, 0.0, atol=1e-6), f"residual at solution: {r}"


def test_divider_newton_step():
    from pyvalve.circuit.numeric import compile_system

    system = compile_system(_divider().analyze())
    x0 = jnp.zeros(len(system.unknowns))

    J = system.jacobian(x0)
    assert J.shape == (3, 3)
    x1 = x0 - jnp.linalg.solve(J, system.residual(x0))

    v_mid = float(x1[system.index(sympy.Symbol("V[mid]"))])
    i_vs = float(x1[system.index(sympy.Symbol("I[VS]"))])
    assert v_mid == pytest.approx(5.0, rel=1e-4)
    assert i_vs == pytest.approx(-5e-3, rel=1e-4)


def test_input_signal():
    from pyvalve.circuit import Circuit, R, SignalInput
    from pyvalve.circuit.numeric import compile_system

    circuit = Circuit("follower")
    src = SignalInput(circuit, "in", "0", name="IN")
    R(circuit, "in", "0", name="RL", value=100.0)
    system = compile_system(circuit.analyze(), inputs=[src.signal])

    x0 = jnp.zeros(len(system.unknowns))
    u = jnp.array([2.0])
    x1 = x0 - jnp.linalg.solve(system.jacobian(x0, u), system.residual(x0, u))

    assert float(x1[system.index(sympy.Symbol("V[in]"))]) == pytest.approx(2.0, rel=1e-5)


def test_removed_devices_leave_full_rank_system():
    from pyvalve.circuit import Circuit, R, VSource
    from pyvalve.circuit.numeric import compile_system

    circuit = Circuit("trimmed")
    VSource(circuit, "a", "0", name="VS", value=1.0)
    R(circuit, "a", "0", name="R1", value="1k")
    r2 = R(circuit, "a", "b", name="R2", value="1k")
    r3 = R(circuit, "b", "0", name="R3", value="1k")
    circuit.remove(r2)
    circuit.remove(r3)
    circuit.node("unused")

    system = compile_system(circuit.analyze())
    assert system.unknowns == (sympy.Symbol("V[a]"), sympy.Symbol("I[VS]"))
    assert len(system.equations) == len(system.unknowns)

    J = system.jacobian(jnp.zeros(len(system.unknowns)))
    assert int(jnp.linalg.matrix_rank(J)) == len(system.unknowns)


def test_unresolved_symbol_rejected():
    from pyvalve.circuit import Circuit, R, SignalInput
    from pyvalve.circuit.numeric import compile_system

    circuit = Circuit()
    SignalInput(circuit, "in", "0", name="IN")
    R(circuit, "in", "0", name="RL", value=100.0)

    with pytest.raises(ValueError):
        compile_system(circuit.analyze())


class TestTriodeStage:
    """Numeric evaluation of a common-cathode stage."""

    def _system(self):
        from pyvalve.circuit import Circuit, VSource, CommonCathodeStage
        from pyvalve.circuit.numeric import compile_system

        circuit = Circuit("stage")
        VSource(circuit, "B+", "0", name="VB", value=250.0)
        stage = CommonCathodeStage(circuit, "G", "B+", "P", prefix="v1")
        return compile_system(circuit.analyze()), stage

    def _operating_point(self, system):
        guess = {"V[B+]": 250.0, "V[P]": 150.0, "V[v1_K]": 1.5}
        x = [guess.get(str(s), 0.0) for s in system.unknowns]
        return jnp.array(x)

    def test_jacobian_finite(self):
        system, _ = self._system()
        x = self._operating_point(system)

        r = system.residual(x)
        J = system.jacobian(x)
        assert jnp.all(jnp.isfinite(r)), f"residual not finite: {r}"
        assert jnp.all(jnp.isfinite(J)), "jacobian not finite"

    def test_plate_current_sensitivity(self):
        system, stage = self._system()
        x = self._operating_point(system)
        J = system.jacobian(x)

        # KCL row of the plate node: d/dV[G] is the transconductance
        row = system.index(stage.tube.plate.V)
        gm = float(J[row, system.index(sympy.Symbol("V[G]"))])
        assert gm > 0, f"plate current must rise with grid voltage, got dI/dVg = {gm}"

    def test_jit(self):
        system, _ = self._system()
        x = self._operating_point(system)

        residual = jax.jit(system.residual)
        assert jnp.allclose(residual(x), system.residual(x))


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
