import json

import pytest

import circuit_layout.__main__ as cli
from circuit_layout import SolverError


def _write_description(tmp_path, data):
    path = tmp_path / "circuit.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


_ANCHORED_WIRE = {
    "metadata": {"title": "Anchored"},
    "points": ["A", "B"],
    "wires": [{"name": "W", "start": "A", "segments": ["r =10", "d =5"], "end": "B"}],
    "constraints": [
        {"kind": "offset", "name": "ax", "low": "0", "high": "A.x"},
        {"kind": "offset", "name": "ay", "low": "0", "high": "A.y"},
    ],
}


def test_main_prints_locations_as_json(tmp_path, capsys):
    path = _write_description(tmp_path, _ANCHORED_WIRE)

    cli.main([str(path), "--json", "--log-level", "WARNING"])

    payload = json.loads(capsys.readouterr().out)
    assert payload["locations"]["B"] == pytest.approx([10.0, 5.0])
    assert payload["locations"]["W"][1] == pytest.approx([10.0, 0.0])
    assert payload["diagnostics"] == []


def test_main_writes_plot(tmp_path, capsys):
    path = _write_description(tmp_path, _ANCHORED_WIRE)
    plot_path = tmp_path / "layout.png"

    cli.main([str(path), "--plot", str(plot_path)])

    assert plot_path.exists()
    assert "B: " in capsys.readouterr().out


def test_main_exits_with_two_on_error_diagnostics(tmp_path, capsys):
    path = _write_description(
        tmp_path,
        {"points": ["A"], "wires": [{"name": "W", "start": "Missing", "segments": ["r"], "end": "A"}]},
    )

    with pytest.raises(SystemExit) as excinfo:
        cli.main([str(path), "--json"])

    assert excinfo.value.code == 2
    payload = json.loads(capsys.readouterr().out)
    assert "PIN001" in [item["code"] for item in payload["diagnostics"]]


def test_main_exits_with_one_on_solver_failure(tmp_path, monkeypatch):
    path = _write_description(tmp_path, _ANCHORED_WIRE)

    def _fail(self, diagnostics=None, force=False):
        raise SolverError("singular")

    monkeypatch.setattr(cli.GraphicalCircuit, "solve", _fail)

    with pytest.raises(SystemExit) as excinfo:
        cli.main([str(path)])

    assert excinfo.value.code == 1
