from __future__ import annotations

import json
import math

from scripts.replay_recording import main


def _write_recording(path, pitches):
    records = []
    for i, p in enumerate(pitches):
        r = math.radians(p)
        records.append({"timestamp": i * 20, "x": 0.0, "y": math.sin(r), "z": math.cos(r)})
    path.write_text(json.dumps(records), encoding="utf-8")


def test_cli_prints_cycle_count(tmp_path, capsys):
    rec = tmp_path / "session.json"
    _write_recording(rec, [30.0] * 3 + [10.0] * 3 + [45.0] * 3 + [10.0] * 3 + [50.0] * 3 + [85.0] * 6)
    overrides = tmp_path / "thresholds.json"
    overrides.write_text(json.dumps({"debounceMs": 60, "risingStabilizeMs": 100}), encoding="utf-8")

    code = main([str(rec), "--overrides", str(overrides), "--timeline"])
    assert code == 0
    out = json.loads(capsys.readouterr().out)
    assert out["cycle_count"] == 1
    assert out["samples"] == 21
    assert out["state_timeline"][-1]["state"] == "STANDING"


def test_cli_rejects_bad_recording(tmp_path, capsys):
    rec = tmp_path / "broken.json"
    rec.write_text(json.dumps([{"timestamp": 0, "x": 1.0}]), encoding="utf-8")
    assert main([str(rec)]) == 2
    assert "Invalid recording" in capsys.readouterr().err


def test_cli_rejects_non_json_recording(tmp_path, capsys):
    rec = tmp_path / "notes.json"
    rec.write_text("not json", encoding="utf-8")
    assert main([str(rec)]) == 2
    assert "Cannot read recording" in capsys.readouterr().err


def test_cli_rejects_missing_overrides_file(tmp_path, capsys):
    rec = tmp_path / "session.json"
    _write_recording(rec, [85.0] * 3)
    assert main([str(rec), "--overrides", str(tmp_path / "absent.json")]) == 2
    assert "Cannot read overrides" in capsys.readouterr().err
