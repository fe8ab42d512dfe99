"""
HTTP layer - FastAPI application for the voice agent.
"""

from .app import create_app

__all__ = ["create_app"]
