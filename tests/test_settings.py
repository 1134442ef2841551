"""Tests for responder settings loading, validation and persistence."""

import configparser
import logging

import pytest

from cogs.respond.core import (
    ChatScope,
    ConfigurationException,
    OutputMode,
    RespondSettings,
    SettingsStore,
)


@pytest.fixture(autouse=True)
def no_env_key(monkeypatch):
    monkeypatch.delenv(SettingsStore.API_KEY_ENV, raising=False)


def _write(path, text):
    path.write_text(text, encoding="utf-8")
    return path


def test_missing_file_uses_defaults(tmp_path):
    store = SettingsStore(str(tmp_path / "respond.ini"))

    assert store.settings == RespondSettings()
    assert store.settings.context_length == 20
    assert store.settings.chat_scope is ChatScope.BOTH
    assert store.settings.output_mode is OutputMode.EPHEMERAL
    assert store.settings.show_token_count is True
    assert store.settings.api_key == ""


def test_loads_values_from_file(tmp_path):
    path = _write(tmp_path / "respond.ini", "\n".join([
        "[respond]",
        "context_length = 50",
        "model = rekaai/reka-flash-3:free",
        "chat_scope = dms",
        "system_instructions = Reply like a pirate, 100% of the time.",
        "output_mode = typebar",
        "[debug]",
        "show_debug_info = true",
        "log_errors = no",
        "[openrouter]",
        "api_key = sk-or-file",
    ]))

    settings = SettingsStore(str(path)).settings

    assert settings.context_length == 50
    assert settings.model == "rekaai/reka-flash-3:free"
    assert settings.chat_scope is ChatScope.DMS
    assert settings.system_instructions == "Reply like a pirate, 100% of the time."
    assert settings.output_mode is OutputMode.TYPEBAR
    assert settings.show_debug_info is True
    assert settings.log_errors is False
    assert settings.api_key == "sk-or-file"


def test_invalid_values_fall_back_per_field(tmp_path, caplog):
    path = _write(tmp_path / "respond.ini", "\n".join([
        "[respond]",
        "context_length = -3",
        "model = some/paid-model",
        "chat_scope = everywhere",
        "output_mode = typebar",
    ]))

    with caplog.at_level(logging.ERROR):
        settings = SettingsStore(str(path)).settings

    assert settings.context_length == 20
    assert settings.model == RespondSettings().model
    assert settings.chat_scope is ChatScope.BOTH
    assert settings.output_mode is OutputMode.TYPEBAR
    assert "some/paid-model" in caplog.text


def test_update_saves_and_round_trips(tmp_path):
    path = tmp_path / "respond.ini"
    store = SettingsStore(str(path))

    store.update(context_length=100, chat_scope="channels", output_mode=OutputMode.TYPEBAR, api_key="sk-or-new")

    reloaded = SettingsStore(str(path)).settings
    assert reloaded.context_length == 100
    assert reloaded.chat_scope is ChatScope.CHANNELS
    assert reloaded.output_mode is OutputMode.TYPEBAR
    assert reloaded.api_key == "sk-or-new"


def test_multiline_instructions_round_trip(tmp_path):
    path = tmp_path / "respond.ini"
    store = SettingsStore(str(path))

    store.update(system_instructions="Line one.\nLine two.")

    assert SettingsStore(str(path)).settings.system_instructions == "Line one.\nLine two."


def test_invalid_update_is_rejected_and_not_saved(tmp_path):
    path = tmp_path / "respond.ini"
    store = SettingsStore(str(path))

    with pytest.raises(ConfigurationException) as exc_info:
        store.update(model="openai/gpt-4o")

    assert exc_info.value.config_key == "model"
    assert store.settings == RespondSettings()
    assert not path.exists()


@pytest.mark.parametrize("changes", [
    {"context_length": 0},
    {"context_length": True},
    {"chat_scope": "guilds"},
    {"output_mode": "dm"},
    {"unknown_option": 1},
])
def test_replace_validates(changes):
    with pytest.raises(ConfigurationException):
        RespondSettings().replace(**changes)


def test_api_key_from_environment_is_not_written(tmp_path, monkeypatch):
    monkeypatch.setenv(SettingsStore.API_KEY_ENV, "sk-or-env")
    path = tmp_path / "respond.ini"
    store = SettingsStore(str(path))
    assert store.settings.api_key == "sk-or-env"

    store.update(context_length=5)

    parser = configparser.ConfigParser(interpolation=None)
    parser.read(path, encoding="utf-8")
    assert parser.get("openrouter", "api_key") == ""
    assert parser.getint("respond", "context_length") == 5


def test_describe_masks_api_key(tmp_path):
    store = SettingsStore(str(tmp_path / "respond.ini"))
    store.update(api_key="sk-or-v1-secretvalue1234")

    rows = dict(store.describe())

    assert "secretvalue" not in rows["API Key"]
    assert rows["API Key"].endswith("1234")


def test_reload_picks_up_external_edits(tmp_path):
    path = tmp_path / "respond.ini"
    store = SettingsStore(str(path))
    store.update(context_length=10)

    _write(path, path.read_text(encoding="utf-8").replace("context_length = 10", "context_length = 30"))

    assert store.reload().context_length == 30
