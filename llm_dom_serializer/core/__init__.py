"""Core package components - configuration, logging, and exceptions."""

from llm_dom_serializer.core.config import Config, IframeConfig, SerializerConfig
from llm_dom_serializer.core.exceptions import (
    ConfigurationError,
    DOMError,
    DOMSerializerError,
    DOMStructureError,
    IframeProcessingError,
    SerializationFailed,
    StaleIndexError,
)
from llm_dom_serializer.core.logging import setup_logging, get_logger

__all__ = [
    "Config",
    "SerializerConfig",
    "IframeConfig",
    "DOMSerializerError",
    "DOMError",
    "DOMStructureError",
    "SerializationFailed",
    "StaleIndexError",
    "IframeProcessingError",
    "ConfigurationError",
    "setup_logging",
    "get_logger",
]
