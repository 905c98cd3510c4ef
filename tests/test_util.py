from __future__ import annotations

import uuid
from pathlib import Path

from roulette.util import load_or_create_device_id


def test_device_id_is_generated_once(tmp_path: Path):
    path = tmp_path / "state" / "device_id"
    first = load_or_create_device_id(path)
    assert uuid.UUID(first).version == 4
    assert load_or_create_device_id(path) == first


def test_empty_device_id_file_is_regenerated(tmp_path: Path):
    path = tmp_path / "device_id"
    path.write_text("\n", encoding="utf-8")
    device_id = load_or_create_device_id(path)
    assert device_id
    assert path.read_text(encoding="utf-8").strip() == device_id
