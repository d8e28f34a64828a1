"""
Tests for chat client configuration.
"""

import pytest

from tutorchat.client.config import DEFAULT_MODEL, ChatConfig, FileConfig, load_yaml_config
from tutorchat.rendering.block_renderer import TitleCleanup
from tutorchat.rendering.segmenter import SeparatorPolicy


class MockArgs:
    config = None
    base_url = "http://test:8000/"
    model = "test-model"
    api_key_env = None
    temperature = 0.8
    max_tokens = 256
    system_prompt_path = None
    title_cleanup = "numbering"
    separator_policy = None
    debug = True


def test_defaults():
    config = ChatConfig()
    assert config.model == DEFAULT_MODEL
    assert config.temperature == 0.4
    assert config.title_cleanup == TitleCleanup.SYMBOLS
    assert config.separator_policy == SeparatorPolicy.CONTAINS
    assert not config.debug


def test_config_from_args():
    config = ChatConfig.from_args(MockArgs())
    assert config.base_url == "http://test:8000"
    assert config.model == "test-model"
    assert config.temperature == 0.8
    assert config.max_tokens == 256
    assert config.title_cleanup == TitleCleanup.NUMBERING
    assert config.separator_policy == SeparatorPolicy.CONTAINS
    assert config.debug


def test_yaml_file_is_overridden_by_arguments(tmp_path):
    path = tmp_path / "tutorchat.yaml"
    path.write_text(
        "model:\n"
        "  model: file-model\n"
        "  temperature: 1.2\n"
        "  api_key_env: MY_KEY\n"
        "display:\n"
        "  separator_policy: exact\n"
        "  refresh_per_second: 4\n",
        encoding="utf-8",
    )

    class Args(MockArgs):
        config = str(path)
        model = None

    config = ChatConfig.from_args(Args())
    assert config.model == "file-model"
    assert config.temperature == 0.8
    assert config.api_key_env == "MY_KEY"
    assert config.separator_policy == SeparatorPolicy.EXACT
    assert config.refresh_per_second == 4


def test_yaml_validation(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("model:\n  temperature: 5\n", encoding="utf-8")
    with pytest.raises(ValueError):
        FileConfig.from_yaml(str(path))


def test_yaml_loader_errors(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_yaml_config(str(tmp_path / "missing.yaml"))

    empty = tmp_path / "empty.yaml"
    empty.write_text("", encoding="utf-8")
    with pytest.raises(ValueError):
        load_yaml_config(str(empty))

    listing = tmp_path / "list.yaml"
    listing.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_yaml_config(str(listing))


def test_api_key_from_environment(monkeypatch):
    monkeypatch.delenv("API_KEY", raising=False)
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    config = ChatConfig()
    assert config.resolve_api_key() is None

    monkeypatch.setenv("GEMINI_API_KEY", "gemini-key")
    assert config.resolve_api_key() == "gemini-key"

    monkeypatch.setenv("API_KEY", "api-key")
    assert config.resolve_api_key() == "api-key"

    monkeypatch.setenv("MY_KEY", "mine")
    assert ChatConfig(api_key_env="MY_KEY").resolve_api_key() == "mine"


def test_system_prompt(tmp_path):
    assert "TOÁN LỚP 8" in ChatConfig().load_system_prompt()

    override = tmp_path / "prompt.txt"
    override.write_text("Bạn là trợ lý.", encoding="utf-8")
    assert ChatConfig(system_prompt_path=str(override)).load_system_prompt() == "Bạn là trợ lý."
