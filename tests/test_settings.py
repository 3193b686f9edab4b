from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1]))

from siteeditor.core.logs import configure_logging
from siteeditor.core.settings import SettingsManager, app_data_dir


def test_defaults_are_written_back(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    settings = SettingsManager(path)
    assert settings.get("storage_bucket") == "site-assets"
    assert settings.max_upload_bytes == 5 * 1024 * 1024
    assert json.loads(path.read_text(encoding="utf-8"))["cache_control"] == "3600"


def test_environment_wins_but_is_not_persisted(tmp_path: Path, monkeypatch) -> None:
    path = tmp_path / "settings.json"
    settings = SettingsManager(path)
    settings.set("backend_url", "https://file.example")
    monkeypatch.setenv("SITEEDITOR_BACKEND_URL", "https://env.example")
    assert settings.get("backend_url") == "https://env.example"
    assert json.loads(path.read_text(encoding="utf-8"))["backend_url"] == "https://file.example"


def test_bad_numbers_fall_back(tmp_path: Path) -> None:
    settings = SettingsManager(tmp_path / "settings.json")
    settings.set("max_upload_mb", "veel")
    assert settings.max_upload_bytes == 5 * 1024 * 1024


def test_data_dir_override(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setenv("SITEEDITOR_DATA_DIR", str(tmp_path / "data"))
    assert app_data_dir() == tmp_path / "data"
    assert (tmp_path / "data").is_dir()


def test_configure_logging_is_idempotent(tmp_path: Path) -> None:
    logger = logging.getLogger("siteeditor")
    before = list(logger.handlers)
    try:
        configure_logging(path=tmp_path / "siteeditor.log")
        configure_logging(path=tmp_path / "other.log")
        added = [h for h in logger.handlers if h not in before]
        assert len(added) == 1
        logging.getLogger("siteeditor.preview.editable").info("hallo")
        added[0].flush()
        assert "[INFO] siteeditor.preview.editable: hallo" in (tmp_path / "siteeditor.log").read_text(encoding="utf-8")
    finally:
        for handler in logger.handlers[:]:
            if handler not in before:
                logger.removeHandler(handler)
                handler.close()
