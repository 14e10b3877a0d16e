"""Batch translation backends."""

from .base import Translator
from .bedrock import BedrockTranslator
from .http_service import HttpTranslator
from .retry import retry_on_connection_error

__all__ = [
    "Translator",
    "BedrockTranslator",
    "HttpTranslator",
    "retry_on_connection_error",
]
