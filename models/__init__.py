"""
Models package for normalized model replies and chat settings.
"""

from .model_reply import ModelReply, ModelRequestError, NormalizedError, TokenUsage
from .settings import Settings

__all__ = ["ModelReply", "ModelRequestError", "NormalizedError", "Settings", "TokenUsage"]
