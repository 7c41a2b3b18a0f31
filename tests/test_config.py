"""Tests for configuration loading."""

import json

from codewire.config import DEFAULT_CONFIG, Config, get_api_key


def test_defaults():
    config = Config()
    assert config.get("feed.page_size") == 15
    assert config.get("llm.model") == "claude-sonnet-4-6"
    assert len(config.get("rss_feeds")) == 3


def test_missing_key_default():
    assert Config().get("feed.nope", "fallback") == "fallback"
    assert Config().get("feed.page_size.deeper") is None


def test_yaml_file_overrides(tmp_path):
    path = tmp_path / "codewire.yaml"
    path.write_text("feed:\n  page_size: 5\nllm:\n  target_language: French\n")

    config = Config(str(path))
    assert config.get("feed.page_size") == 5
    assert config.get("feed.ticker_size") == 20
    assert config.get("llm.target_language") == "French"


def test_json_file_overrides(tmp_path):
    path = tmp_path / "codewire.json"
    path.write_text(json.dumps({"sources": {"hn_limit": 10}}))
    assert Config(str(path)).get("sources.hn_limit") == 10


def test_missing_file_uses_defaults(tmp_path):
    assert Config(str(tmp_path / "absent.yaml")).get("feed.page_size") == 15


def test_unsupported_format_uses_defaults(tmp_path):
    path = tmp_path / "codewire.ini"
    path.write_text("[feed]\npage_size = 3\n")
    assert Config(str(path)).get("feed.page_size") == 15


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("CODEWIRE_FEED_PAGE_SIZE", "7")
    monkeypatch.setenv("CODEWIRE_LLM_MODEL", "some-other-model")

    config = Config()
    assert config.get("feed.page_size") == 7
    assert config.get("llm.model") == "some-other-model"


def test_defaults_are_not_mutated(tmp_path):
    path = tmp_path / "codewire.yaml"
    path.write_text("feed:\n  page_size: 99\n")
    Config(str(path))
    assert DEFAULT_CONFIG["feed"]["page_size"] == 15


def test_api_key(monkeypatch):
    assert get_api_key() is None
    monkeypatch.setenv("ANTHROPIC_API_KEY", "   ")
    assert get_api_key() is None
    monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-test")
    assert get_api_key() == "sk-test"


def test_non_mapping_file_uses_defaults(tmp_path):
    path = tmp_path / "codewire.yaml"
    path.write_text("- page_size\n- 5\n")
    assert Config(str(path)).get("feed.page_size") == 15
