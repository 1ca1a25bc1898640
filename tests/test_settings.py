"""Tests for persisting user preferences.

:func:`load_settings` must never stop a run: missing, unreadable or malformed
files yield an empty dictionary and log an error where appropriate.
"""

import importlib
import json
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

comp_generator = importlib.import_module("comp_generator")


def test_round_trip(tmp_path):
    path = tmp_path / "settings.json"
    comp_generator.save_settings({"pattern": "whole", "velocity": 40}, path)
    assert comp_generator.load_settings(path) == {"pattern": "whole", "velocity": 40}


def test_missing_file_returns_empty(tmp_path, caplog):
    with caplog.at_level(logging.ERROR):
        assert comp_generator.load_settings(tmp_path / "absent.json") == {}
    assert caplog.text == ""


def test_invalid_json_is_logged(tmp_path, caplog):
    path = tmp_path / "settings.json"
    path.write_text("{not json")
    with caplog.at_level(logging.ERROR):
        assert comp_generator.load_settings(path) == {}
    assert "Could not load settings" in caplog.text


def test_non_object_json_is_ignored(tmp_path, caplog):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps([1, 2, 3]))
    with caplog.at_level(logging.ERROR):
        assert comp_generator.load_settings(path) == {}
    assert "JSON object" in caplog.text


def test_save_failure_is_logged(tmp_path, caplog):
    path = tmp_path / "missing_dir" / "settings.json"
    with caplog.at_level(logging.ERROR):
        comp_generator.save_settings({"pattern": "whole"}, path)
    assert "Could not save settings" in caplog.text
    assert not path.exists()


def test_environment_overrides_default_path(monkeypatch, tmp_path):
    """``COMP_GENERATOR_SETTINGS_FILE`` is honoured when the package is imported."""

    target = tmp_path / "custom.json"
    monkeypatch.setenv("COMP_GENERATOR_SETTINGS_FILE", str(target))
    try:
        reloaded = importlib.reload(comp_generator)
        assert reloaded.DEFAULT_SETTINGS_FILE == target
    finally:
        monkeypatch.delenv("COMP_GENERATOR_SETTINGS_FILE")
        importlib.reload(comp_generator)


def test_version_matches():
    assert comp_generator.__version__ == "0.1.0"
