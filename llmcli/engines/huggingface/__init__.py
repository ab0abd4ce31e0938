from .engine import HuggingFaceEngine
