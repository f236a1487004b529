import importlib.util
from pathlib import Path

TOOL = Path(__file__).resolve().parents[1] / "tools" / "checkout_table.py"


def load_tool():
    spec = importlib.util.spec_from_file_location("checkout_table", TOOL)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_prints_double_out_range(capsys):
    tool = load_tool()
    assert tool.main(["--low", "168", "--high", "170"]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert lines[:3] == ["170: T20 T20 Bull", "169: -", "168: -"]
    assert lines[-1] == "1 of 3 scores have a double-out hint."


def test_simple_mode(capsys):
    tool = load_tool()
    assert tool.main(["--mode", "simple", "--low", "20", "--high", "20"]) == 0
    assert capsys.readouterr().out.splitlines()[0] == "20: S20"


def test_rejects_inverted_range(capsys):
    tool = load_tool()
    assert tool.main(["--low", "50", "--high", "10"]) == 2
    assert "ERROR" in capsys.readouterr().err
