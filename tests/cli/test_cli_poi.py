import json
from unittest.mock import patch

import pytest

from fjordguide.cli.poi import main as poi_main


def run_cli(*argv):
    with patch("sys.argv", ["poi.py", "--settings-file", "markers.ini", *argv]):
        with pytest.raises(SystemExit) as e:
            poi_main()
    return e.value.code


def add_marker(title="Mirador", lat="60.864", lon="7.119"):
    return run_cli("add", "--lat", lat, "--lon", lon, "--title", title)


def test_poi_add_and_list(capsys):
    assert add_marker() == 0
    out, _ = capsys.readouterr()
    assert "✓ Created marker: poi_" in out

    assert run_cli("list") == 0
    out, _ = capsys.readouterr()
    assert "Found 1 marker(s)" in out
    assert "Mirador" in out
    assert "60.86400, 7.11900" in out


def test_poi_list_json(capsys):
    add_marker()
    capsys.readouterr()

    assert run_cli("list", "--json") == 0
    out, _ = capsys.readouterr()
    data = json.loads(out)
    assert data[0]["title"] == "Mirador"
    assert data[0]["lat"] == 60.864


def test_poi_add_blank_title(capsys):
    assert add_marker(title="   ") == 1
    out, _ = capsys.readouterr()
    assert "✗ Error" in out


@pytest.mark.parametrize(
    "lat, lon", [("91", "7.119"), ("200", "nan"), ("60.864", "inf")]
)
def test_poi_add_rejects_invalid_position(capsys, lat, lon):
    assert add_marker(lat=lat, lon=lon) == 1
    out, _ = capsys.readouterr()
    assert "✗ Error" in out

    assert run_cli("list", "--json") == 0
    out, _ = capsys.readouterr()
    assert json.loads(out) == []


def test_poi_delete(capsys):
    add_marker()
    capsys.readouterr()
    run_cli("list", "--json")
    poi_id = json.loads(capsys.readouterr()[0])[0]["id"]

    assert run_cli("delete", "--id", poi_id, "--force") == 0
    out, _ = capsys.readouterr()
    assert f"✓ Deleted marker: {poi_id}" in out

    run_cli("list", "--json")
    assert json.loads(capsys.readouterr()[0]) == []


def test_poi_delete_asks_for_confirmation(capsys):
    add_marker()
    capsys.readouterr()
    run_cli("list", "--json")
    poi_id = json.loads(capsys.readouterr()[0])[0]["id"]

    with patch("builtins.input", return_value="n"):
        assert run_cli("delete", "--id", poi_id) == 0

    run_cli("list", "--json")
    assert len(json.loads(capsys.readouterr()[0])) == 1


def test_poi_delete_unknown(capsys):
    assert run_cli("delete", "--id", "poi_missing", "--force") == 1
    out, _ = capsys.readouterr()
    assert "Marker not found" in out


def test_poi_export_geojson(tmp_path, capsys):
    add_marker()
    output = tmp_path / "markers.geojson"

    assert run_cli("export", "--output", str(output)) == 0
    out, _ = capsys.readouterr()
    assert "Exported 1 marker(s)" in out

    collection = json.loads(output.read_text(encoding="utf-8"))
    assert collection["type"] == "FeatureCollection"
    feature = collection["features"][0]
    assert feature["geometry"] == {"type": "Point", "coordinates": [7.119, 60.864]}
    assert feature["properties"]["title"] == "Mirador"


def test_no_command_prints_help(capsys):
    with patch("sys.argv", ["poi.py"]):
        with pytest.raises(SystemExit) as e:
            poi_main()
    assert e.value.code == 1
