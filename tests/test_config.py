"""Tests for YAML config loading."""

import pytest

from turnero.config import Config, load_config

CONFIG_YAML = """
business:
  name: "Barbería Centro"

slots:
  opening_time: "10:00"
  closing_time: "18:00"
  step_minutes: 45

classifier:
  enabled: "true"
  provider: openai
  model: gpt-4o-mini

channels:
  telegram:
    enabled: true
    bot_token: "${TEST_TURNERO_TOKEN}"
  web:
    enabled: false
    port: 9000

services:
  - name: "Corte clásico"
    duration_minutes: 30
    price: 5000
  - description: "sin nombre, se ignora"
"""


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.delenv("DATABASE_PATH", raising=False)
    monkeypatch.setenv("TEST_TURNERO_TOKEN", "123:abc")


def _write(tmp_path, text):
    path = tmp_path / "config.yaml"
    path.write_text(text, encoding="utf-8")
    return path


def test_load_full_config(tmp_path):
    config = load_config(_write(tmp_path, CONFIG_YAML))

    assert config.business.name == "Barbería Centro"
    assert config.business.default_customer_name == "Cliente"
    assert config.slots.opening_time == "10:00"
    assert config.slots.step_minutes == 45
    assert config.slots.max_suggestions == 3
    assert config.classifier.enabled is True
    assert config.classifier.provider == "openai"


def test_env_vars_resolved_in_channels(tmp_path):
    config = load_config(_write(tmp_path, CONFIG_YAML))

    telegram = config.channels["telegram"]
    assert telegram.enabled is True
    assert telegram.get("bot_token") == "123:abc"
    assert "enabled" not in telegram.extra
    assert config.channels["web"].enabled is False
    assert config.channels["web"].get("port") == 9000


def test_services_without_name_skipped(tmp_path):
    config = load_config(_write(tmp_path, CONFIG_YAML))
    assert [s.name for s in config.services] == ["Corte clásico"]
    assert config.services[0].price == 5000


def test_env_file_beside_config(tmp_path, monkeypatch):
    monkeypatch.delenv("TEST_TURNERO_TOKEN")
    (tmp_path / ".env").write_text("TEST_TURNERO_TOKEN=from-dotenv\n", encoding="utf-8")

    config = load_config(_write(tmp_path, CONFIG_YAML))
    assert config.channels["telegram"].get("bot_token") == "from-dotenv"


def test_database_path_env_override(tmp_path, monkeypatch):
    monkeypatch.setenv("DATABASE_PATH", "/data/turnos.db")
    config = load_config(_write(tmp_path, "database:\n  path: local.db\n"))
    assert config.database.path == "/data/turnos.db"


def test_empty_file_gives_defaults(tmp_path):
    config = load_config(_write(tmp_path, ""))
    assert config.slots == Config().slots
    assert config.database.path == "turnero.db"
    assert config.classifier.enabled is False
    assert config.channels == {}


def test_invalid_step_rejected(tmp_path):
    with pytest.raises(ValueError):
        load_config(_write(tmp_path, "slots:\n  step_minutes: 0\n"))


@pytest.mark.parametrize("slots_yaml", [
    "max_suggestions: -1",
    "opening_time: \"9h\"",
    "closing_time: \"25:00\"",
    "opening_time: \"19:00\"\n  closing_time: \"09:00\"",
])
def test_invalid_slots_rejected(tmp_path, slots_yaml):
    with pytest.raises(ValueError):
        load_config(_write(tmp_path, f"slots:\n  {slots_yaml}\n"))


def test_zero_suggestions_allowed(tmp_path):
    config = load_config(_write(tmp_path, "slots:\n  max_suggestions: 0\n"))
    assert config.slots.max_suggestions == 0


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "nope.yaml")
