from .base import BaseEngine
