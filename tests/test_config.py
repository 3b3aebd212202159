"""Tests for configuration and persona loading."""

import json
import os
from pathlib import Path
from tempfile import TemporaryDirectory

import pytest
import yaml
from pydantic import ValidationError

from vitalis.config.loader import (
    ConfigError,
    load_config,
    load_env_file,
    load_persona,
    save_config,
)
from vitalis.config.schema import Persona, VitalisConfig


def test_default_config():
    """Test that default config has expected values."""
    config = VitalisConfig()

    assert config.chat.base_url == "https://api.deepseek.com"
    assert config.chat.model == "deepseek-chat"
    assert config.chat.api_key_env == "DEEPSEEK_API_KEY"
    assert config.chat.temperature == 0.7
    assert config.chat.timeout is None

    assert config.extraction.enabled is True
    assert config.extraction.model == "gemini-1.5-flash"
    assert config.extraction.api_key_env == "GEMINI_API_KEY"

    assert config.memory.history_limit == 5
    assert config.persona.path is None

    assert config.server.host == "127.0.0.1"
    assert config.server.port == 3000
    assert config.server.cors_origins == ["*"]


def test_load_config_nonexistent_returns_defaults():
    """Test that loading a nonexistent config returns defaults."""
    with TemporaryDirectory() as tmpdir:
        config = load_config(Path(tmpdir) / "nonexistent.yaml")

        assert config.chat.model == "deepseek-chat"
        assert config.memory.history_limit == 5


def test_load_config_empty_file_returns_defaults():
    """Test that an empty config file returns defaults."""
    with TemporaryDirectory() as tmpdir:
        config_path = Path(tmpdir) / "empty.yaml"
        config_path.write_text("")

        config = load_config(config_path)
        assert config.chat.model == "deepseek-chat"


def test_load_config_partial_override():
    """Test that partial config overrides only specified values."""
    with TemporaryDirectory() as tmpdir:
        config_path = Path(tmpdir) / "partial.yaml"

        with open(config_path, "w") as f:
            yaml.safe_dump({"chat": {"model": "deepseek-reasoner", "temperature": 0.2}}, f)

        config = load_config(config_path)

        assert config.chat.model == "deepseek-reasoner"
        assert config.chat.temperature == 0.2
        assert config.chat.base_url == "https://api.deepseek.com"
        assert config.extraction.model == "gemini-1.5-flash"


def test_load_config_invalid_yaml():
    """Test that invalid YAML raises ConfigError."""
    with TemporaryDirectory() as tmpdir:
        config_path = Path(tmpdir) / "invalid.yaml"
        config_path.write_text("chat: [unclosed")

        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_config(config_path)


def test_load_config_validation_error():
    """Test that out-of-range values raise ConfigError."""
    with TemporaryDirectory() as tmpdir:
        config_path = Path(tmpdir) / "bad.yaml"
        config_path.write_text("memory:\n  history_limit: 0\n")

        with pytest.raises(ConfigError, match="validation failed"):
            load_config(config_path)


def test_load_config_non_mapping():
    with TemporaryDirectory() as tmpdir:
        config_path = Path(tmpdir) / "list.yaml"
        config_path.write_text("- just\n- a list\n")

        with pytest.raises(ConfigError, match="mapping"):
            load_config(config_path)


def test_save_and_reload_config():
    """Test that a saved config loads back with the same values."""
    with TemporaryDirectory() as tmpdir:
        config_path = Path(tmpdir) / "nested" / "vitalis.yaml"

        config = VitalisConfig()
        config.server.port = 8080
        config.persona.path = "/etc/vitalis/persona.json"
        save_config(config, str(config_path))

        loaded = load_config(config_path)
        assert loaded.server.port == 8080
        assert loaded.persona.path == "/etc/vitalis/persona.json"


def test_load_persona_default():
    """No path means the built-in persona."""
    persona = load_persona(None)

    assert persona == Persona()
    assert persona.name
    assert len(persona.directives) > 0


def test_load_persona_from_json(tmp_path):
    persona_path = tmp_path / "personality.json"
    persona_path.write_text(
        json.dumps(
            {
                "name": "Dr. Aria",
                "role": "an empathetic health assistant",
                "tone": "Gentle",
                "directives": ["Be brief", "Never diagnose"],
            }
        )
    )

    persona = load_persona(persona_path)

    assert persona.name == "Dr. Aria"
    assert persona.role == "an empathetic health assistant"
    assert persona.tone == "Gentle"
    assert persona.directives == ("Be brief", "Never diagnose")


def test_load_persona_is_immutable(tmp_path):
    persona = load_persona(None)

    with pytest.raises(ValidationError):
        persona.name = "Someone else"


def test_load_persona_missing_file(tmp_path):
    with pytest.raises(ConfigError, match="not found"):
        load_persona(tmp_path / "missing.json")


def test_load_persona_invalid(tmp_path):
    persona_path = tmp_path / "persona.yaml"
    persona_path.write_text("name: Aria\ndirectives: 12\n")

    with pytest.raises(ConfigError, match="Persona validation failed"):
        load_persona(persona_path)


def test_relative_persona_path_resolves_against_config_dir(tmp_path, monkeypatch):
    config_dir = tmp_path / "conf"
    config_dir.mkdir()
    (config_dir / "personality.json").write_text(
        json.dumps({"name": "Dr. Aria", "role": "a guide", "tone": "Calm", "directives": []})
    )
    config_path = config_dir / "vitalis.yaml"
    config_path.write_text("persona:\n  path: personality.json\n")

    elsewhere = tmp_path / "elsewhere"
    elsewhere.mkdir()
    monkeypatch.chdir(elsewhere)

    config = load_config(config_path)

    assert config.persona.path == str(config_dir / "personality.json")
    assert load_persona(config.persona.path).name == "Dr. Aria"


def test_home_relative_persona_path_is_kept(tmp_path):
    config_path = tmp_path / "vitalis.yaml"
    config_path.write_text("persona:\n  path: ~/.vitalis/personality.json\n")

    config = load_config(config_path)

    assert config.persona.path == "~/.vitalis/personality.json"


def test_load_env_file_reads_dotenv_from_cwd(tmp_path, monkeypatch):
    # Registered with monkeypatch so values loaded from the file are undone
    monkeypatch.setenv("DEEPSEEK_API_KEY", "")
    monkeypatch.delenv("DEEPSEEK_API_KEY")
    (tmp_path / ".env").write_text("DEEPSEEK_API_KEY=sk-from-dotenv\n")
    monkeypatch.chdir(tmp_path)

    env_path = load_env_file()

    assert Path(env_path).resolve() == (tmp_path / ".env").resolve()
    assert os.environ["DEEPSEEK_API_KEY"] == "sk-from-dotenv"


def test_load_env_file_keeps_exported_values(tmp_path, monkeypatch):
    monkeypatch.setenv("DEEPSEEK_API_KEY", "sk-from-shell")
    (tmp_path / ".env").write_text("DEEPSEEK_API_KEY=sk-from-dotenv\n")
    monkeypatch.chdir(tmp_path)

    load_env_file()

    assert os.environ["DEEPSEEK_API_KEY"] == "sk-from-shell"
