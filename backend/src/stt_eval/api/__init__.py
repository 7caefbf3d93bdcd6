"""HTTP routes for the evaluation service."""

from stt_eval.api.routes import router

__all__ = ["router"]
