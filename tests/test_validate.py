from __future__ import annotations

import json
from pathlib import Path

import yaml

from conftest import make_feature
from roulette.cli import main
from roulette.config import load_config
from roulette.validate import Validator, format_report_lines


def _config(tmp_path: Path, features: list | None) -> Path:
    if features is not None:
        (tmp_path / "world.geojson").write_text(
            json.dumps({"type": "FeatureCollection", "features": features}), encoding="utf-8"
        )
    cfg = {
        "paths": {"geojson": "world.geojson", "device_id_file": "device_id", "logs_dir": "logs"},
        "server": {
            "host": "127.0.0.1",
            "port": 5000,
            "database": "selections.db",
            "max_countries_per_device": 10,
        },
        "client": {"base_url": "http://127.0.0.1:5000", "request_timeout_s": 1},
    }
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump(cfg), encoding="utf-8")
    return path


def test_clean_catalog_validates(tmp_path: Path, features):
    report = Validator(load_config(_config(tmp_path, features))).run()
    assert report.ok
    assert any("Loaded 3 countries" in msg for msg in report.infos)
    assert any("CCC" in msg for msg in report.warnings)
    assert list(format_report_lines(report))[-1] == "[OK] Validation completed with no errors."


def test_missing_geojson_is_an_error(tmp_path: Path):
    report = Validator(load_config(_config(tmp_path, None))).run()
    assert not report.ok
    assert "Missing GeoJSON file" in report.errors[0]


def test_empty_catalog_is_an_error(tmp_path: Path):
    report = Validator(load_config(_config(tmp_path, []))).run()
    assert not report.ok


def test_duplicate_and_sentinel_ids_warn_or_fail(tmp_path: Path):
    features = [
        make_feature({"ISO_A3": "AAA"}, [0, 0], kind="Point"),
        make_feature({"ISO_A3": "AAA"}, [1, 1], kind="Point"),
        make_feature({}, [2, 2], kind="Point"),
    ]
    cfg = load_config(_config(tmp_path, features))
    lenient = Validator(cfg).run()
    assert lenient.ok
    assert any("Duplicate country ids: AAA" in msg for msg in lenient.warnings)
    assert any("UNKNOWN" in msg for msg in lenient.warnings)

    strict = Validator(cfg).run(strict=True)
    assert not strict.ok
    assert len(strict.errors) == 2
    assert any(line.startswith("[ERROR]") for line in format_report_lines(strict))


def test_cli_validate_exit_codes(tmp_path: Path, features):

    config_path = _config(tmp_path, features)
    assert main(["validate", "--config", str(config_path)]) == 0

    (tmp_path / "world.geojson").unlink()
    assert main(["validate", "--config", str(config_path)]) == 1
    assert main(["validate", "--config", str(tmp_path / "nope.yaml")]) == 1
