"""Tests for environment-driven configuration."""

from tutorchat.config import TutorConfig


class TestTutorConfig:
    def test_defaults(self):
        config = TutorConfig()
        assert config.port == 8080
        assert config.default_grade_level == 8
        assert config.recent_lessons_limit == 20

    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("TUTORCHAT_MODEL", "other-model")
        monkeypatch.setenv("TUTORCHAT_PORT", "9001")
        config = TutorConfig()
        assert config.model == "other-model"
        assert config.port == 9001

    def test_ask_doubt_url(self):
        config = TutorConfig(backend_url="http://localhost:8080/")
        assert config.ask_doubt_url == "http://localhost:8080/functions/v1/ask-doubt"
