# src/flexpro/schemas/__init__.py
from .base import APIModel, Message
