import os
from enum import Enum
from pathlib import Path

from dotenv import load_dotenv

from models.settings import Settings


class ModelType(Enum):
    """Supported model providers (all OpenAI-compatible)."""

    OPENAI = "openai"
    DEEPSEEK = "deepseek"
    GROK = "grok"


class SearchEngine(Enum):
    """Supported web_search backends."""

    DUCKDUCKGO = "duckduckgo"
    TAVILY = "tavily"


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


class Config:
    """Configuration management for the application."""

    API_KEY_VARS = {
        ModelType.OPENAI.value: "OPENAI_API_KEY",
        ModelType.DEEPSEEK.value: "DEEPSEEK_API_KEY",
        ModelType.GROK.value: "GROK_API_KEY",
    }

    DEFAULT_MODELS = {
        ModelType.OPENAI.value: "gpt-4o-mini",
        ModelType.DEEPSEEK.value: "deepseek-chat",
        ModelType.GROK.value: "grok-4-latest",
    }

    def __init__(self):
        """Initialize configuration with environment variables."""
        # Load environment variables from .env file if it exists
        env_path = Path(__file__).parent.parent / ".env"
        if env_path.exists():
            load_dotenv(dotenv_path=env_path)

        # Model Configuration
        self.MODEL_TYPE = os.getenv("MODEL_TYPE", ModelType.OPENAI.value).lower()
        self.API_KEY = os.getenv(self.API_KEY_VARS.get(self.MODEL_TYPE, "OPENAI_API_KEY"))
        default_model = self.DEFAULT_MODELS.get(self.MODEL_TYPE, "gpt-4o-mini")
        self.DEFAULT_MODEL = os.getenv(
            f"DEFAULT_{self.MODEL_TYPE.upper()}_MODEL", os.getenv("DEFAULT_MODEL", default_model)
        )

        # Tool Configuration
        self.SEARCH_ENGINE = os.getenv("SEARCH_ENGINE", SearchEngine.DUCKDUCKGO.value).lower()
        self.TAVILY_API_KEY = os.getenv("TAVILY_API_KEY")
        self.HTTP_TIMEOUT_S = float(os.getenv("HTTP_TIMEOUT_S", "15"))

        # Chat Settings (initial snapshot; changed at runtime via update_settings)
        self.ENABLE_STREAMING = _env_flag("ENABLE_STREAMING", False)
        self.ENABLE_COT = _env_flag("ENABLE_COT", False)
        self.SHOW_THINKING = _env_flag("SHOW_THINKING", True)
        self.AUTO_READ = _env_flag("AUTO_READ", True)

    def validate(self) -> bool:
        """
        Validate that all required configuration is present for the selected
        provider and search engine.

        Returns:
            bool: True if configuration is valid, False otherwise
        """
        if self.MODEL_TYPE not in self.API_KEY_VARS:
            print(
                f"Error: Unknown MODEL_TYPE '{self.MODEL_TYPE}'. "
                f"Must be one of: {', '.join(e.value for e in ModelType)}"
            )
            return False

        if not self.API_KEY:
            print(
                f"Error: {self.API_KEY_VARS[self.MODEL_TYPE]} is not set. "
                "Please set it in the .env file."
            )
            return False

        if self.SEARCH_ENGINE not in {e.value for e in SearchEngine}:
            print(
                f"Error: Unknown SEARCH_ENGINE '{self.SEARCH_ENGINE}'. "
                f"Must be one of: {', '.join(e.value for e in SearchEngine)}"
            )
            return False

        if self.SEARCH_ENGINE == SearchEngine.TAVILY.value and not self.TAVILY_API_KEY:
            print("Error: TAVILY_API_KEY is not set but SEARCH_ENGINE=tavily.")
            return False

        return True

    def initial_settings(self) -> Settings:
        """Build the starting chat settings from the environment."""
        return Settings(
            streaming=self.ENABLE_STREAMING,
            enable_cot=self.ENABLE_COT,
            show_thinking=self.SHOW_THINKING,
            auto_read=self.AUTO_READ,
        )

    def get_model_info(self) -> str:
        """
        Get information about the currently selected model.

        Returns:
            str: Formatted string with model information
        """
        labels = {
            ModelType.OPENAI.value: "OpenAI",
            ModelType.DEEPSEEK.value: "DeepSeek",
            ModelType.GROK.value: "Grok",
        }
        label = labels.get(self.MODEL_TYPE)
        if not label:
            return "Unknown"
        return f"{label} ({self.DEFAULT_MODEL})"
