from .openai_client import OpenAIClient


class GrokClient(OpenAIClient):
    """
    Grok API client (X.AI), OpenAI-compatible endpoint.
    """

    provider_name = "grok"
    base_url = "https://api.x.ai/v1"

    def __init__(self, api_key: str, model_name: str = "grok-4-latest", **kwargs):
        super().__init__(api_key, model_name=model_name, **kwargs)
