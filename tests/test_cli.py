"""
Tests for the command line driver.
"""

import json

import pytest

from tmsim.cli import main


@pytest.fixture
def files(tmp_path, even_zeros_text):
    definition = tmp_path / "machine.tm"
    definition.write_text(even_zeros_text, encoding="utf-8")
    inputs = tmp_path / "inputs.txt"
    inputs.write_text("# tapes\n00\n0\n", encoding="utf-8")
    return definition, inputs


def test_text_trace(files, capsys):
    definition, inputs = files
    assert main([str(definition), str(inputs)]) == 0

    out = capsys.readouterr().out
    assert "   even    0" in out
    assert "originalTapeString:  00" in out
    assert "current tapeString:  00__" in out
    assert "ACCEPTED" in out
    assert "REJECTED" in out


def test_no_trace_prints_only_verdicts(files, capsys):
    definition, inputs = files
    assert main([str(definition), str(inputs), "--no-trace"]) == 0

    out = capsys.readouterr().out
    assert "^" not in out
    assert out.count("TM is halted now") == 2


def test_json_output(files, capsys):
    definition, inputs = files
    assert main([str(definition), str(inputs), "--json"]) == 0

    payload = json.loads(capsys.readouterr().out)
    assert [tape["verdict"] for tape in payload] == ["ACCEPTED", "REJECTED"]
    assert payload[0]["final_tape"] == "00__"
    assert payload[0]["steps"] == 3
    assert payload[0]["trace"][0] == {"state": "even", "read": "0", "tape": "00", "head": 1}


def test_definition_error_is_reported(tmp_path, capsys):
    definition = tmp_path / "bad.tm"
    definition.write_text("a b c\n0 1\n0 1 _\na\nb\n", encoding="utf-8")
    inputs = tmp_path / "inputs.txt"
    inputs.write_text("0\n", encoding="utf-8")

    assert main([str(definition), str(inputs)]) == 1
    err = capsys.readouterr().err
    assert "DefinitionError" in err
    assert "found 5" in err


def test_input_error_is_reported(files, capsys):
    definition, inputs = files
    inputs.write_text("012\n", encoding="utf-8")

    assert main([str(definition), str(inputs)]) == 1
    assert "found '2'" in capsys.readouterr().err


def test_missing_file(tmp_path, files):
    definition, _ = files
    with pytest.raises(SystemExit) as excinfo:
        main([str(definition), str(tmp_path / "missing.txt")])
    assert excinfo.value.code == 2


def test_step_limit_stops_looping_machine(tmp_path, capsys):
    definition = tmp_path / "loop.tm"
    definition.write_text("a b c\n0\n0 _\na\nb\nc\na 0 a 0 L\n", encoding="utf-8")
    inputs = tmp_path / "inputs.txt"
    inputs.write_text("0\n", encoding="utf-8")

    assert main([str(definition), str(inputs), "--max-steps", "25", "--no-trace"]) == 1
    assert "Step limit of 25 reached on tape 0" in capsys.readouterr().err


def test_step_limit_skips_to_following_tapes(tmp_path, capsys):
    definition = tmp_path / "loop.tm"
    definition.write_text("a b c\n0 1\n0 1 _\na\nb\nc\na 0 a 0 L\n", encoding="utf-8")
    inputs = tmp_path / "inputs.txt"
    inputs.write_text("0\n1\n", encoding="utf-8")

    assert main([str(definition), str(inputs), "--max-steps", "5", "--json"]) == 1

    captured = capsys.readouterr()
    payload = json.loads(captured.out)
    assert [tape["verdict"] for tape in payload] == ["STEP_LIMIT", "REJECTED_NO_TRANSITION"]
    assert payload[0]["halted"] is False
    assert payload[0]["steps"] == 5
    assert len(payload[0]["trace"]) == 5
    assert payload[1]["halted"] is True
    assert payload[1]["original_tape"] == "1"
    assert "Step limit of 5 reached on tape 0" in captured.err


def test_text_output_shows_halting_configuration(files, capsys):
    definition, inputs = files
    assert main([str(definition), str(inputs)]) == 0

    out = capsys.readouterr().out
    assert "   accept    _\n\n 00__\n    ^\n\nTM is halted now" in out


def test_left_edge_error_option(tmp_path, capsys):
    definition = tmp_path / "loop.tm"
    definition.write_text("a b c\n0\n0 _\na\nb\nc\na 0 a 0 L\n", encoding="utf-8")
    inputs = tmp_path / "inputs.txt"
    inputs.write_text("0\n", encoding="utf-8")

    assert main([str(definition), str(inputs), "--left-edge", "error"]) == 1
    assert "TapeBoundaryError" in capsys.readouterr().err


def test_strict_flag(tmp_path, capsys):
    definition = tmp_path / "dup.tm"
    definition.write_text("a b c\n0\n0 _\na\nb\nc\na 0 b 0 R\na 0 c 0 R\n", encoding="utf-8")
    inputs = tmp_path / "inputs.txt"
    inputs.write_text("0\n", encoding="utf-8")

    assert main([str(definition), str(inputs)]) == 0
    assert main([str(definition), str(inputs), "--strict"]) == 1
    assert "more than once" in capsys.readouterr().err


def test_config_file(tmp_path, files, capsys):
    definition, inputs = files
    config = tmp_path / "settings.yaml"
    config.write_text("engine:\n  max_steps: 1\n", encoding="utf-8")

    assert main([str(definition), str(inputs), "--config", str(config), "--no-trace"]) == 1
    assert "Step limit of 1" in capsys.readouterr().err
