from .openai_client import OpenAIClient


class DeepSeekClient(OpenAIClient):
    """
    DeepSeek API client.

    Uses the OpenAI SDK with a custom base URL since the DeepSeek API is
    OpenAI-compatible. Models:
    - "deepseek-chat": general chat and discussion
    - "deepseek-reasoner": reasoning, math and coding
    """

    provider_name = "deepseek"
    base_url = "https://api.deepseek.com/v1"

    def __init__(self, api_key: str, model_name: str = "deepseek-chat", **kwargs):
        super().__init__(api_key, model_name=model_name, **kwargs)
