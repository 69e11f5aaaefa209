"""
Test: Package logger.

This validates:
- Quiet by default
- Analysis progress appears at DEBUG
"""
import io
import logging

import pytest


@pytest.fixture
def restore_logger():
    from pyvalve.logging import logger

    level = logger.level
    handlers = [(h, h.level) for h in logger.handlers]
    yield logger
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
    for handler, handler_level in handlers:
        handler.setLevel(handler_level)
        logger.addHandler(handler)
    logger.setLevel(level)


def test_default_level(restore_logger):
    assert restore_logger.name == "pyvalve"
    assert restore_logger.level == logging.WARNING


def test_debug_logging_reports_analysis(restore_logger):
    from pyvalve.circuit import Circuit, R, VSource
    from pyvalve.logging import enable_debug_logging

    stream = io.StringIO()
    enable_debug_logging(stream)

    circuit = Circuit("logged")
    VSource(circuit, "a", "0", name="VS", value=1.0)
    R(circuit, "a", "0", name="R1")
    circuit.analyze()

    text = stream.getvalue()
    assert "logged: analyzed 2 devices" in text
    assert "2 stamps" in text


def test_set_log_level(restore_logger):
    from pyvalve.logging import set_log_level

    set_log_level(logging.INFO)
    assert restore_logger.level == logging.INFO
    assert all(h.level == logging.INFO for h in restore_logger.handlers)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
