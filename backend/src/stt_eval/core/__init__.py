"""Core utilities for STT Eval"""

from stt_eval.core.config import settings
from stt_eval.core.logging import configure_logging

__all__ = ["settings", "configure_logging"]
