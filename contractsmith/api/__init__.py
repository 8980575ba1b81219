"""
Contractsmith transports: the function-style handler
(`contractsmith.api.function`) and the FastAPI app
(`contractsmith.api.main:app`, imported on demand so that loading the handler
does not build the HTTP application).
"""

from .function import build_response, get_pipeline, handler, reset_pipeline

__all__ = [
    "handler",
    "build_response",
    "get_pipeline",
    "reset_pipeline",
]
