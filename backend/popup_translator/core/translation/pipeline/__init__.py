"""Translation pipeline components.

This module provides the core pipeline components for translation:
- model_profile: Classifies a model identifier (kind and declared size)
- PromptEngine: Builds prompts from declarative template tables
- OllamaGateway: Chat, streaming and health calls against the runtime
- StreamDispatcher: Decodes streamed fragments into ordered events
- OutputProcessor: Strips labels, quotes and echoed source text
- TranslationPipeline: Orchestrates the complete flow
"""

from .llm_gateway import OllamaGateway, close_http_client, get_http_client
from .model_profile import ModelKind, ModelProfile, classify, require_advanced_capability
from .output_processor import OutputProcessor
from .pipeline import TranslationPipeline
from .prompt_engine import PromptEngine
from .reply_splitter import split_reply
from .stream_decoder import StreamDecoder, StreamDispatcher

__all__ = [
    "OllamaGateway",
    "close_http_client",
    "get_http_client",
    "ModelKind",
    "ModelProfile",
    "classify",
    "require_advanced_capability",
    "OutputProcessor",
    "TranslationPipeline",
    "PromptEngine",
    "split_reply",
    "StreamDecoder",
    "StreamDispatcher",
]
