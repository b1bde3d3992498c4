"""Example: a black box whose pins are spread by the layout and saved as a preview."""

import sys

from circuit_layout import BlackBox, GraphicalCircuit, OffsetConstraint, Point, Vector2, Wire, WireSegmentInfo
from circuit_layout.pins import PinReference
from circuit_layout.preview import MatplotlibBuilder


def main(output: str = "black_box.png") -> None:
    circuit = GraphicalCircuit()
    circuit.metadata["title"] = "Black box"
    circuit.add(
        BlackBox("U1"),
        OffsetConstraint("anchor.x", "0", "U1.x"),
        OffsetConstraint("anchor.y", "0", "U1.y"),
    )
    for index, pin in enumerate(["w_in", "w_en", "e_out"]):
        direction = Vector2(1.0, 0.0) if pin.startswith("e") else Vector2(-1.0, 0.0)
        circuit.add(
            Point(f"P{index}"),
            Wire(f"W{index}", PinReference("U1", pin), [WireSegmentInfo(direction, 15.0)], PinReference(f"P{index}")),
        )

    builder = MatplotlibBuilder()
    try:
        circuit.render(builder)
        builder.save(output)
    finally:
        builder.close()

    box = circuit["U1"]
    print(f"Box size: ({box.size.x:.3f}, {box.size.y:.3f})")
    for pin in box.pins:
        print(f"{pin}: ({pin.location.x:.3f}, {pin.location.y:.3f})")
    print("Released minimums:", ", ".join(circuit.last_report.released) or "none")


if __name__ == "__main__":
    main(*sys.argv[1:2])
