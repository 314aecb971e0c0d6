import logging
from pathlib import Path

import pytest
from pydantic import ValidationError

from config.log import configure_logging
from config.settings import AppSettings, RemoteSettings, StorageSettings


def test_defaults():
    settings = AppSettings()

    assert settings.storage.root == Path("storage/badges")
    assert settings.storage.metadata_path == Path("storage/badges/metadata.json")
    assert settings.remote.identify_url is None
    assert settings.remote.request_timeout == 30.0
    assert settings.remote.upload_timeout == 60.0
    assert settings.remote.identify_max_tries == 3
    assert settings.stats_window_days == 30


def test_from_env_reads_prefixed_variables(monkeypatch, clean_env, tmp_path):
    monkeypatch.setenv("ANIMALDEX_STORAGE_ROOT", str(tmp_path / "dex"))
    monkeypatch.setenv("ANIMALDEX_IDENTIFY_URL", "http://identify.local/upload")
    monkeypatch.setenv("ANIMALDEX_REQUEST_TIMEOUT", "12.5")
    monkeypatch.setenv("ANIMALDEX_STATS_WINDOW_DAYS", "7")
    monkeypatch.setenv("ANIMALDEX_LOG_LEVEL", "DEBUG")

    settings = AppSettings.from_env(tmp_path / "absent.env")

    assert settings.storage.root == tmp_path / "dex"
    assert settings.remote.identify_url == "http://identify.local/upload"
    assert settings.remote.generate_url is None
    assert settings.remote.request_timeout == 12.5
    assert settings.stats_window_days == 7
    assert settings.log_level == "DEBUG"


def test_from_env_loads_dotenv_file(clean_env, tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("ANIMALDEX_GENERATE_URL=http://generate.local/badge\nANIMALDEX_UPLOAD_TIMEOUT=90\n")

    settings = AppSettings.from_env(env_file)

    assert settings.remote.generate_url == "http://generate.local/badge"
    assert settings.remote.upload_timeout == 90.0


def test_from_env_rejects_invalid_values(monkeypatch, clean_env, tmp_path):
    monkeypatch.setenv("ANIMALDEX_REQUEST_TIMEOUT", "soon")

    with pytest.raises(ValidationError):
        AppSettings.from_env(tmp_path / "absent.env")


def test_retry_settings_are_bounded():
    with pytest.raises(ValidationError):
        RemoteSettings(identify_max_tries=0)
    with pytest.raises(ValidationError):
        RemoteSettings(generate_retry_delay=-1)


def test_storage_settings_naming():
    settings = StorageSettings(root=Path("/data/dex"))
    assert settings.image_prefix == "badge_"
    assert settings.original_suffix == ".jpg"
    assert settings.metadata_path == Path("/data/dex/metadata.json")


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


def test_configure_logging_installs_one_handler(restore_root_logger):
    configure_logging("debug")
    configure_logging("WARNING")

    installed = [handler for handler in restore_root_logger.handlers if getattr(handler, "_animaldex", False)]
    assert len(installed) == 1
    assert restore_root_logger.level == logging.WARNING


def test_configure_logging_falls_back_to_info_for_unknown_levels(restore_root_logger):
    configure_logging("chatty")
    assert restore_root_logger.level == logging.INFO
