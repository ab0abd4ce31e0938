from .client import BingChatSession
from .engine import MODEL_PREFIX, BingEngine, variant_for_model
