from config.config import Config, ModelType
from utils.logger import get_logger

from .base_client import BaseAIClient

logger = get_logger(__name__)


def initialize_client(config: Config) -> BaseAIClient:
    """
    Initialize the model client for the configured provider.

    Args:
        config: Loaded application configuration

    Returns:
        An instance of the appropriate AI client

    Raises:
        ValueError: If the provider is unsupported or its API key is missing
    """
    model_type = (config.MODEL_TYPE or "").lower().strip()
    api_key = config.API_KEY
    if not api_key:
        raise ValueError(
            f"API key for MODEL_TYPE '{model_type}' not found in environment variables"
        )

    if model_type == ModelType.OPENAI.value:
        from .openai_client import OpenAIClient

        client = OpenAIClient(api_key=api_key, model_name=config.DEFAULT_MODEL)

    elif model_type == ModelType.DEEPSEEK.value:
        from .deepseek_client import DeepSeekClient

        client = DeepSeekClient(api_key=api_key, model_name=config.DEFAULT_MODEL)

    elif model_type == ModelType.GROK.value:
        from .grok_client import GrokClient

        client = GrokClient(api_key=api_key, model_name=config.DEFAULT_MODEL)

    else:
        raise ValueError(
            f"Unsupported MODEL_TYPE: {model_type}. "
            f"Must be one of: {', '.join(e.value for e in ModelType)}"
        )

    logger.info(
        "Initialized client",
        extra={"extra_fields": {"provider": model_type, "model": config.DEFAULT_MODEL}},
    )
    return client
