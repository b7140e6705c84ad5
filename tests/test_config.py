"""Tests for settings and logging configuration."""

import json
import logging

from chat_core.config import PROJECT_ROOT, load_settings, resolve_db_path
from chat_core.logging_config import JSONFormatter, build_logging_config


class TestLoadSettings:
    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-test")
        monkeypatch.setenv("CONTEXT_MAX_TOKENS", "4000")
        monkeypatch.setenv("CORS_ORIGINS", "https://a.test, https://b.test")
        monkeypatch.setenv("BCRYPT_ROUNDS", "10")

        settings = load_settings()

        assert settings.anthropic_api_key == "sk-test"
        assert settings.context_max_tokens == 4000
        assert settings.cors_origins == ["https://a.test", "https://b.test"]
        assert settings.bcrypt_rounds == 10

    def test_defaults(self, monkeypatch):
        for name in ("MEM0_API_KEY", "CONTEXT_MAX_TOKENS", "CORS_ORIGINS"):
            monkeypatch.delenv(name, raising=False)

        settings = load_settings()

        assert settings.mem0_api_key is None
        assert settings.context_max_tokens == 8000
        assert "http://localhost:3000" in settings.cors_origins


class TestResolveDbPath:
    def test_memory(self):
        assert resolve_db_path(":memory:") == ":memory:"

    def test_relative_path_is_under_project_root(self):
        assert resolve_db_path("data/test.db") == PROJECT_ROOT / "data" / "test.db"


class TestJSONFormatter:
    def test_includes_context(self):
        record = logging.LogRecord(
            "chat_core.test", logging.INFO, __file__, 1, "Saved %s", ("c1",), None
        )
        record.context = {"conversation_id": "c1"}

        payload = json.loads(JSONFormatter().format(record))

        assert payload["message"] == "Saved c1"
        assert payload["level"] == "INFO"
        assert payload["context"] == {"conversation_id": "c1"}


class TestBuildLoggingConfig:
    def test_file_and_json_console(self):
        config = build_logging_config("debug", "/tmp/app.log")

        assert config["root"] == {"level": "DEBUG", "handlers": ["console", "file"]}
        assert config["handlers"]["console"]["formatter"] == "json"
        assert config["loggers"]["httpx"] == {"level": "WARNING"}
        assert config["loggers"]["uvicorn.access"]["propagate"] is True

    def test_text_console_without_file(self):
        config = build_logging_config("INFO", None, console_format="text")

        assert config["root"]["handlers"] == ["console"]
        assert config["handlers"]["console"]["formatter"] == "text"
