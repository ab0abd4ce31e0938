from .engine import OpenAIChatEngine, OpenAICompletionEngine
from .model_constants import CHAT_MODELS, COMPLETION_MODELS
