from __future__ import annotations

import json
from pathlib import Path

from image_conversion.settings_manager import SettingsManager


def test_defaults_without_file() -> None:
    sm = SettingsManager()
    assert sm.image_driver == "vips"
    assert sm.temporary_directory is None


def test_json_file_overrides_defaults(tmp_path: Path) -> None:
    settings_path = tmp_path / "settings.json"
    settings_path.write_text(
        json.dumps({"image_driver": "custom", "temporary_directory": str(tmp_path / "work")}), encoding="utf-8"
    )

    sm = SettingsManager(str(settings_path))

    assert sm.image_driver == "custom"
    assert sm.temporary_directory == str(tmp_path / "work")


def test_env_beats_file(tmp_path: Path, monkeypatch) -> None:
    settings_path = tmp_path / "settings.json"
    settings_path.write_text(json.dumps({"image_driver": "custom"}), encoding="utf-8")
    monkeypatch.setenv("IMAGE_CONVERSION_DRIVER", "from-env")

    assert SettingsManager(str(settings_path)).image_driver == "from-env"


def test_blank_env_is_ignored(monkeypatch) -> None:
    monkeypatch.setenv("IMAGE_CONVERSION_TEMP_DIR", "   ")
    assert SettingsManager().temporary_directory is None


def test_broken_file_falls_back_to_defaults(tmp_path: Path) -> None:
    settings_path = tmp_path / "settings.json"
    settings_path.write_text("{not json", encoding="utf-8")

    sm = SettingsManager(str(settings_path))

    assert sm.image_driver == "vips"
    assert sm.temporary_directory is None


def test_non_object_file_is_ignored(tmp_path: Path) -> None:
    settings_path = tmp_path / "settings.json"
    settings_path.write_text("[1, 2]", encoding="utf-8")
    assert SettingsManager(str(settings_path)).image_driver == "vips"


def test_missing_file_is_fine(tmp_path: Path) -> None:
    assert SettingsManager(str(tmp_path / "missing.json")).image_driver == "vips"
