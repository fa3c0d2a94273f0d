import pytest

from config.config import Config
from models.settings import Settings

ENV_VARS = [
    "MODEL_TYPE",
    "OPENAI_API_KEY",
    "DEEPSEEK_API_KEY",
    "GROK_API_KEY",
    "DEFAULT_MODEL",
    "DEFAULT_OPENAI_MODEL",
    "DEFAULT_DEEPSEEK_MODEL",
    "SEARCH_ENGINE",
    "TAVILY_API_KEY",
    "ENABLE_STREAMING",
    "ENABLE_COT",
    "SHOW_THINKING",
    "AUTO_READ",
]


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestSettings:
    def test_defaults(self):
        assert Settings().to_dict() == {
            "streaming": False,
            "enable_cot": False,
            "show_thinking": True,
            "auto_read": True,
        }

    def test_with_update_returns_new_snapshot(self):
        original = Settings()
        updated = original.with_update(streaming=True, enable_cot=True)
        assert updated.streaming is True
        assert updated.enable_cot is True
        assert original.streaming is False

    def test_with_update_ignores_unknown_and_none(self):
        updated = Settings(auto_read=False).with_update(auto_read=None, verbose=True)
        assert updated == Settings(auto_read=False)

    def test_with_update_skips_non_bool_values(self):
        updated = Settings().with_update(streaming="false", auto_read="no", enable_cot=1)
        assert updated == Settings()

    def test_is_frozen(self):
        with pytest.raises(AttributeError):
            Settings().streaming = True


class TestConfig:
    def test_openai_defaults(self, clean_env):
        clean_env.setenv("MODEL_TYPE", "openai")
        clean_env.setenv("OPENAI_API_KEY", "sk-test")

        config = Config()

        assert config.validate() is True
        assert config.DEFAULT_MODEL == "gpt-4o-mini"
        assert config.SEARCH_ENGINE == "duckduckgo"
        assert config.get_model_info() == "OpenAI (gpt-4o-mini)"
        assert config.initial_settings() == Settings()

    def test_provider_model_override(self, clean_env):
        clean_env.setenv("MODEL_TYPE", "DeepSeek")
        clean_env.setenv("DEEPSEEK_API_KEY", "ds-test")
        clean_env.setenv("DEFAULT_DEEPSEEK_MODEL", "deepseek-reasoner")

        config = Config()

        assert config.MODEL_TYPE == "deepseek"
        assert config.API_KEY == "ds-test"
        assert config.get_model_info() == "DeepSeek (deepseek-reasoner)"

    def test_missing_api_key(self, clean_env, capsys):
        clean_env.setenv("MODEL_TYPE", "grok")
        assert Config().validate() is False
        assert "GROK_API_KEY is not set" in capsys.readouterr().out

    def test_unknown_provider(self, clean_env):
        clean_env.setenv("MODEL_TYPE", "llama")
        config = Config()
        assert config.validate() is False
        assert config.get_model_info() == "Unknown"

    def test_tavily_needs_a_key(self, clean_env):
        clean_env.setenv("MODEL_TYPE", "openai")
        clean_env.setenv("OPENAI_API_KEY", "sk-test")
        clean_env.setenv("SEARCH_ENGINE", "tavily")
        assert Config().validate() is False

        clean_env.setenv("TAVILY_API_KEY", "tvly-test")
        assert Config().validate() is True

    def test_settings_flags_from_env(self, clean_env):
        clean_env.setenv("ENABLE_STREAMING", "true")
        clean_env.setenv("ENABLE_COT", "1")
        clean_env.setenv("SHOW_THINKING", "off")
        clean_env.setenv("AUTO_READ", "no")

        assert Config().initial_settings() == Settings(
            streaming=True, enable_cot=True, show_thinking=False, auto_read=False
        )
