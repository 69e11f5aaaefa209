"""
Test: SPICE netlist export.

This validates:
- SI value formatting and parsing
- One line per supported device with canonical terminal order
- Triode pinout Plate, Grid, Cathode regardless of wiring order
- Unsupported kinds are skipped and logged
- Header and footer
"""
import logging

import pytest


class TestUnits:
    """format_si / parse_si"""

    @pytest.mark.parametrize("value,expected", [
        (100e3, "100k"),
        (4.7e-7, "470n"),
        (1500.0, "1.5k"),
        (22e-6, "22u"),
        (1e6, "1M"),
        (250.0, "250"),
        (0.0, "0"),
        (999.996, "1k"),
        (-2.2e3, "-2.2k"),
        (8.0, "8"),
        (1e-3, "1m"),
        (123456.0, "123.46k"),
    ])
    def test_format_si(self, value, expected):
        from pyvalve.export import format_si

        assert format_si(value) == expected

    def test_format_si_clamps_prefix(self):
        from pyvalve.export import format_si

        assert format_si(1e15) == "1000T"
        assert format_si(1e-18) == "0.001f"

    def test_format_si_nan(self):
        from pyvalve.export import format_si

        assert format_si(float("nan")) == "nan"

    @pytest.mark.parametrize("text,expected", [
        ("10k", 10e3),
        ("25m", 25e-3),
        (".47µ", 0.47e-6),
        ("1Meg", 1e6),
        ("1MEG", 1e6),
        ("100", 100.0),
        ("2.2uF", 2.2e-6),
        ("1e3", 1e3),
        ("4.7n", 4.7e-9),
    ])
    def test_parse_si(self, text, expected):
        from pyvalve.export import parse_si

        assert parse_si(text) == pytest.approx(expected)

    def test_parse_si_rejects_garbage(self):
        from pyvalve.export import parse_si

        with pytest.raises(ValueError):
            parse_si("k10")


def _preamp():
    from pyvalve.circuit import Circuit, CommonCathodeStage, SignalInput, VSource, C

    circuit = Circuit("preamp")
    VSource(circuit, "B+", "0", name="VB", value=250.0)
    SignalInput(circuit, "in", "0", name="IN")
    C(circuit, "in", "G", name="C1", value="22n")
    stage = CommonCathodeStage(circuit, "G", "B+", "P", prefix="v1")
    return circuit, stage


class TestNetlist:
    """Device lines and framing."""

    def test_common_cathode_stage(self):
        from pyvalve.export import netlist_lines

        circuit, _ = _preamp()
        lines = netlist_lines(circuit)

        assert lines[0] == "* preamp"
        assert lines[1:9] == [
            "V_SRC_VB B+ 0 250 DC",
            "V_SRC_IN in 0 SINE(0 0.6447 440) AC",
            "CC1 in G 22n",
            "Rv1_RG G 0 1M",
            "Rv1_RP B+ P 100k",
            "XUv1_V P G v1_K NH12AX7",
            "Rv1_RK v1_K 0 1.5k",
            "Cv1_CK v1_K 0 22u",
        ]

    def test_footer(self):
        from pyvalve import config
        from pyvalve.export import netlist_lines

        circuit, _ = _preamp()
        lines = netlist_lines(circuit)

        assert lines[-1] == ".tran 100m"
        assert ".INC dmtriodep.inc" in lines
        start = lines.index(".INC dmtriodep.inc") + 1
        assert tuple(lines[start:start + len(config.POTENTIOMETER_SUBCKT)]) == config.POTENTIOMETER_SUBCKT
        assert ".subckt potentiometer A C W" in lines

    @pytest.mark.parametrize("order", [
        ("G", "K", "P"),
        ("K", "P", "G"),
        ("P", "G", "K"),
        ("G", "P", "K"),
    ])
    def test_triode_pinout_independent_of_wiring_order(self, order):
        from pyvalve.circuit import Circuit, KurtBlum12AX7
        from pyvalve.export import format_device

        circuit = Circuit()
        tube = circuit.add(KurtBlum12AX7("V2"))
        nets = {"P": "plate", "G": "grid", "K": "cathode"}
        for pin in order:
            tube.terminal(pin).connect(circuit.node(nets[pin]))

        assert format_device(tube) == "XUV2 plate grid cathode NH12AX7"

    def test_minimal_stage_netlist(self):
        from pyvalve.circuit import Circuit, KurtBlum12AX7, R, VSource
        from pyvalve.export import to_netlist

        circuit = Circuit("minimal")
        VSource(circuit, "B+", "0", name="VB", value=250.0)
        R(circuit, "B+", "plate", name="RP", value="100k")
        tube = circuit.add(KurtBlum12AX7("V1"))
        tube.cathode.connect(circuit.gnd)
        tube.plate.connect(circuit.node("plate"))
        tube.grid.connect(circuit.node("grid"))

        circuit.analyze()
        lines = to_netlist(circuit).splitlines()
        assert "XUV1 plate grid 0 NH12AX7" in lines

    def test_potentiometer_lines(self):
        from pyvalve.circuit import Circuit, Pot, VarR
        from pyvalve.export import format_device

        circuit = Circuit()
        pot = Pot(circuit, "a", "c", "w", name="VOL", value="1Meg", wipe=0.25)
        rv = VarR(circuit, "x", "y", name="TONE", value="250k", wipe=0.5)

        assert format_device(pot) == "XR_VOL a c w potentiometer R=1M wiper=0.25"
        assert format_device(rv) == "XR_TONE x y x potentiometer R=250k wiper=0.5"

    def test_speaker_line(self):
        from pyvalve.circuit import Circuit, Load
        from pyvalve.export import format_device

        circuit = Circuit()
        spk = Load(circuit, "out", "0", name="1")
        assert format_device(spk) == "R_SPKR_1 out 0 8"

    def test_unsupported_devices_skipped(self, caplog):
        from pyvalve.circuit import Circuit, D, ISource, R
        from pyvalve.errors import UnsupportedDeviceError
        from pyvalve.export import format_device, netlist_lines

        circuit = Circuit("mixed")
        R(circuit, "a", "0", name="1", value=10.0)
        diode = D(circuit, "a", "b", name="D1")
        ISource(circuit, "b", "0", name="I1", value=1e-3)

        with pytest.raises(UnsupportedDeviceError):
            format_device(diode)

        with caplog.at_level(logging.INFO, logger="pyvalve"):
            lines = netlist_lines(circuit)

        assert lines[:2] == ["* mixed", "R1 a 0 10"]
        assert lines[2] == ".INC dmtriodep.inc"
        assert "D1" in caplog.text
        assert "I1" in caplog.text

    def test_unwired_device_raises(self):
        from pyvalve.circuit import Circuit, Resistor
        from pyvalve.errors import TopologyError
        from pyvalve.export import to_netlist

        circuit = Circuit()
        circuit.add(Resistor("R1"))

        with pytest.raises(TopologyError):
            to_netlist(circuit)

    def test_netlist_does_not_analyze(self):
        from pyvalve.circuit import Circuit, R
        from pyvalve.export import to_netlist

        circuit = Circuit()
        r = R(circuit, "a", "0", name="1")
        r.resistance = -1.0

        assert "R1 a 0 -1" in to_netlist(circuit)


def test_write_netlist(tmp_path):
    from pyvalve.export import to_netlist, write_netlist

    circuit, _ = _preamp()
    path = write_netlist(circuit, tmp_path / "preamp.cir")

    assert path.exists()
    text = path.read_text(encoding="ascii")
    assert text == to_netlist(circuit)
    assert text.endswith(".tran 100m\n")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
