"""Web interface for Reeltrack.

This module provides the FastAPI application serving the project API and
the script and media generation proxies.
"""

from __future__ import annotations

from reeltrack.web.app import create_app
from reeltrack.web.middleware import RequestLoggingMiddleware

__all__ = [
    "RequestLoggingMiddleware",
    "create_app",
]
