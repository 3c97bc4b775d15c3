import json
import os
from unittest.mock import patch

import pytest

from buzzword.config import GEMINI_ENDPOINT, GameSettings, Secrets, load_secrets


@pytest.mark.unit
def test_defaults():
    settings = GameSettings()
    assert settings.starting_lives == 10
    assert settings.clue_timeout == 30.0
    assert settings.phrase_watchdog == 35.0
    assert settings.gemini_endpoint == GEMINI_ENDPOINT.format(model="gemini-2.0-flash")
    settings.validate()


@pytest.mark.unit
def test_from_env_reads_overrides():
    with patch.dict('os.environ', {
        'STARTING_LIVES': '5',
        'BASE_TIME_LIMIT_S': '45',
        'OFFLINE_MODE': 'true',
        'DEFAULT_LANGUAGE': 'es-MX',
        'GEMINI_MODEL': 'gemini-test',
        'GEMINI_ENDPOINT': '',
        'BEST_SCORE_SINK': 'DynamoDB',
    }):
        settings = GameSettings.from_env()
    assert settings.starting_lives == 5
    assert settings.base_time_limit == 45.0
    assert settings.offline_mode is True
    assert settings.default_language == "es"
    assert "gemini-test" in settings.gemini_endpoint
    assert settings.best_score_sink == "dynamodb"


@pytest.mark.unit
def test_invalid_numbers_fall_back_to_defaults():
    with patch.dict('os.environ', {'STARTING_LIVES': 'lots', 'CREATIVITY_RAMP': 'high'}):
        settings = GameSettings.from_env()
    assert settings.starting_lives == 10
    assert settings.creativity_ramp == 0.1


@pytest.mark.unit
def test_watchdog_must_exceed_client_timeout():
    with pytest.raises(ValueError):
        GameSettings(clue_timeout=30, phrase_watchdog=30).validate()
    with patch.dict('os.environ', {'PHRASE_WATCHDOG_S': '10'}):
        with pytest.raises(ValueError):
            GameSettings.from_env()


@pytest.mark.unit
def test_inconsistent_time_limits_rejected():
    with pytest.raises(ValueError):
        GameSettings(base_time_limit=10, min_time_limit=20).validate()


@pytest.mark.unit
def test_secrets_from_json_env(tmp_path):
    blob = json.dumps({"geminiApiKey": " key-1 ", "playFabTitleId": "T1"})
    with patch.dict('os.environ', {'BUZZWORD_SECRETS_JSON': blob, 'GEMINI_API_KEY': 'other'}, clear=True):
        secrets = load_secrets(project_root=tmp_path, user_dir=tmp_path)
    assert secrets.gemini_api_key == "key-1"
    assert secrets.playfab_title_id == "T1"
    assert secrets.source == "BUZZWORD_SECRETS_JSON"


@pytest.mark.unit
def test_secrets_from_env_vars(tmp_path):
    with patch.dict('os.environ', {'BUZZWORD_SECRETS_JSON': '{broken', 'GEMINI_API_KEY': 'env-key'}, clear=True):
        secrets = load_secrets(project_root=tmp_path, user_dir=tmp_path)
    assert secrets.gemini_api_key == "env-key"
    assert secrets.source == "environment"


@pytest.mark.unit
def test_secrets_from_local_settings_file(tmp_path):
    local = tmp_path / "LocalSettings"
    local.mkdir()
    (local / "buzzword-secrets.json").write_text(json.dumps({"geminiApiKey": "file-key"}), encoding="utf-8")
    with patch.dict('os.environ', {}, clear=True):
        secrets = load_secrets(project_root=tmp_path, user_dir=tmp_path / "home")
    assert secrets.gemini_api_key == "file-key"


@pytest.mark.unit
def test_secrets_from_user_dir(tmp_path):
    home = tmp_path / "home"
    home.mkdir()
    (home / "buzzword-secrets.json").write_text(json.dumps({"playFabApiKey": "pf"}), encoding="utf-8")
    with patch.dict('os.environ', {}, clear=True):
        secrets = load_secrets(project_root=tmp_path, user_dir=home)
    assert secrets.playfab_api_key == "pf"
    assert secrets.gemini_api_key == ""


@pytest.mark.unit
def test_no_secrets_means_offline(tmp_path):
    with patch.dict('os.environ', {}, clear=True):
        secrets = load_secrets(project_root=tmp_path, user_dir=tmp_path)
    assert secrets == Secrets()
    assert not secrets.has_any_value()
