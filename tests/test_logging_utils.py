import logging

import numpy as np

from circuit_layout.logging_utils import apply_debug_logging, debug_log_call
from circuit_layout.solver import Network, OffsetBranch, solve_network


def test_solver_calls_are_logged_at_debug(caplog):
    network = Network()
    network.add(OffsetBranch("o", "0", "a", 2.0, 1e-3))
    with caplog.at_level(logging.DEBUG, logger="circuit_layout.solver.dc"):
        solve_network(network)

    messages = [record.getMessage() for record in caplog.records]
    assert any(message.startswith("Entering solve_network(") for message in messages)
    assert any(message.startswith("Exiting assemble -> ") for message in messages)


def test_arrays_are_summarized(caplog):
    logger = logging.getLogger("circuit_layout.test_logging")

    @debug_log_call(logger)
    def scale(values, factor=2.0):
        return values * factor

    with caplog.at_level(logging.DEBUG, logger="circuit_layout.test_logging"):
        scale(np.arange(100.0))

    entering, exiting = [record.getMessage() for record in caplog.records]
    assert "ndarray(shape=(100,), dtype=float64) min=0 max=99" in entering
    assert "max=198" in exiting


def test_namespace_wrapping_skips_foreign_and_skipped_functions():
    def local():
        return 1

    def skipped():
        return 2

    namespace = {"__name__": local.__module__, "local": local, "skipped": skipped, "join": "".join}
    apply_debug_logging(namespace, skip=["skipped"])

    assert getattr(namespace["local"], "_debug_logging_wrapped", False)
    assert namespace["skipped"] is skipped
    assert namespace["local"]() == 1
