import argparse
import json
import logging
from typing import Dict, Optional, Sequence

from circuit_layout import (
    GraphicalCircuit,
    LocatedPresence,
    LoggingDiagnosticHandler,
    SolverError,
    Wire,
    load_circuit,
)
from circuit_layout.solver import NetworkValidationError

logger = logging.getLogger(__name__)


def _configure_logging(level: str) -> None:
    log_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=log_level,
        format="%(levelname)s:%(name)s:%(message)s",
    )


def _collect_locations(circuit: GraphicalCircuit) -> Dict[str, object]:
    result: Dict[str, object] = {}
    for presence in circuit:
        if isinstance(presence, Wire):
            result[presence.name] = [point.as_tuple() for point in presence.points]
            continue
        if not isinstance(presence, LocatedPresence):
            continue
        result[presence.name] = presence.location.as_tuple()
        for pin in getattr(presence, "pins", []):
            result[str(pin)] = pin.location.as_tuple()
    return result


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Lay out a circuit description")
    parser.add_argument("path", help="Path to the JSON circuit description")
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (default: INFO)",
    )
    parser.add_argument(
        "--plot",
        help="Write a matplotlib preview of the solved layout to the given path",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the solved locations as JSON",
    )
    args = parser.parse_args(argv)

    _configure_logging(args.log_level)

    with open(args.path) as fin:
        data = json.load(fin)

    logger.info("Loading circuit from %s", args.path)
    circuit = load_circuit(data)
    diagnostics = LoggingDiagnosticHandler()
    try:
        circuit.solve(diagnostics)
    except (SolverError, NetworkValidationError) as exc:
        logger.error("Layout failed: %s", exc)
        raise SystemExit(1)

    locations = _collect_locations(circuit)
    if args.json:
        payload = {
            "locations": locations,
            "diagnostics": [
                {"severity": message.severity.name.lower(), "code": message.code, "message": message.message}
                for message in diagnostics
            ],
        }
        print(json.dumps(payload, indent=2))
    else:
        for name, value in locations.items():
            print(f"{name}: {value}")

    if args.plot:
        from circuit_layout.preview import MatplotlibBuilder

        builder = MatplotlibBuilder()
        try:
            circuit.render(builder, diagnostics)
            builder.save(args.plot)
        finally:
            builder.close()

    if diagnostics.has_errors:
        raise SystemExit(2)


if __name__ == "__main__":
    main()
