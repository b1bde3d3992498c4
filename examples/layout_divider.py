"""Example pipeline: lay out a resistor divider from a JSON-style description."""

from circuit_layout import DiagnosticHandler, load_circuit

DESCRIPTION = {
    "metadata": {"title": "Divider"},
    "components": [
        {
            "name": "R1",
            "pins": [
                {"name": "p", "kind": "fixed-oriented", "offset": [-6, 0], "orientation": "l"},
                {"name": "n", "kind": "fixed-oriented", "offset": [6, 0], "orientation": "r"},
            ],
        },
        {
            "name": "R2",
            "pins": [
                {"name": "p", "kind": "fixed-oriented", "offset": [-6, 0], "orientation": "l"},
                {"name": "n", "kind": "fixed-oriented", "offset": [6, 0], "orientation": "r"},
            ],
        },
    ],
    "points": ["OUT", "GND"],
    "wires": [
        {"name": "W1", "start": "R1[n]", "segments": ["r 5"], "end": "OUT"},
        {"name": "W2", "start": "OUT", "segments": ["d 10", "r"], "end": "R2[p]"},
        {"name": "W3", "start": "R2[n]", "segments": ["r 5", "d 10"], "end": "GND"},
    ],
    "constraints": [
        {"kind": "offset", "name": "anchor.x", "low": "0", "high": "R1.x"},
        {"kind": "offset", "name": "anchor.y", "low": "0", "high": "R1.y"},
    ],
}


def main() -> None:
    circuit = load_circuit(DESCRIPTION)
    diagnostics = DiagnosticHandler()
    circuit.solve(diagnostics)

    report = circuit.last_report
    print("Solved:", circuit.solved)
    print(f"Nodes: {report.nodes}  Branches: {report.branches}  Iterations: {report.iterations}")
    for message in diagnostics:
        print(f"  {message.code}: {message.message}")
    for presence in circuit:
        location = getattr(presence, "location", None)
        if location is not None:
            print(f"{presence.name}: ({location.x:.3f}, {location.y:.3f})")


if __name__ == "__main__":
    main()
