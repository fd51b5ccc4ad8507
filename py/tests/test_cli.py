"""Tests for the unisai command line."""

import json

import pytest

import sys
sys.path.insert(0, str(__file__).rsplit('/', 2)[0])

from unisai import cli


SCENE = {
    "name": "Main",
    "roots": [
        {"name": "Player", "label": "Unit", "attachments": ["Health"],
         "children": [{"name": "Weapon", "attachments": ["Health"]}]},
    ],
}


@pytest.fixture(autouse=True)
def quiet_logging(monkeypatch):
    # Keep the CLI from replacing pytest's log handlers
    monkeypatch.setattr(cli, "setup_logging", lambda level: None)


@pytest.fixture
def scene_file(tmp_path):
    path = tmp_path / "scene.json"
    path.write_text(json.dumps(SCENE), encoding="utf-8")
    return path


class TestMain:
    """Tests for cli.main."""

    def test_stdout(self, scene_file, capsys):
        assert cli.main([str(scene_file)]) == 0
        out = json.loads(capsys.readouterr().out)
        assert out["s"] == ["Player", "Unit", "Health", "Weapon"]
        assert out["o"][0]["h"][0]["n"] == 3

    def test_out_file(self, scene_file, tmp_path):
        target = tmp_path / "nested" / "compact.json"
        assert cli.main([str(scene_file), "-o", str(target)]) == 0
        out = json.loads(target.read_text(encoding="utf-8"))
        assert out["s"] == ["Player", "Unit", "Health", "Weapon"]

    def test_select(self, scene_file, capsys):
        assert cli.main([str(scene_file), "--select", "/Player/Weapon"]) == 0
        out = json.loads(capsys.readouterr().out)
        assert out == {"s": ["Weapon", "Health"], "o": [{"n": 0, "g": -1, "l": 0, "c": [1], "h": []}]}

    def test_select_missing(self, scene_file):
        assert cli.main([str(scene_file), "--select", "/Nobody"]) == 2

    def test_missing_file(self, tmp_path):
        assert cli.main([str(tmp_path / "absent.json")]) == 2

    def test_bad_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")
        assert cli.main([str(path)]) == 2

    def test_null_layer(self, tmp_path):
        path = tmp_path / "layer.json"
        path.write_text(json.dumps({"roots": [{"name": "A", "layer": None}]}), encoding="utf-8")
        assert cli.main([str(path)]) == 2

    def test_lone_surrogate_name(self, tmp_path):
        path = tmp_path / "surrogate.json"
        path.write_text('{"roots": [{"name": "A\\ud800"}]}', encoding="utf-8")
        target = tmp_path / "compact.json"
        assert cli.main([str(path), "-o", str(target)]) == 0
        text = target.read_text(encoding="utf-8")
        assert "A\\ud800" in text
        assert json.loads(text)["s"] == ["A\ud800"]

    def test_ascii(self, tmp_path, capsys):
        path = tmp_path / "cafe.json"
        path.write_text(json.dumps({"roots": [{"name": "Café"}]}), encoding="utf-8")
        assert cli.main([str(path), "--ascii"]) == 0
        text = capsys.readouterr().out
        assert "Caf\\u00e9" in text
        assert json.loads(text)["s"] == ["Café"]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
