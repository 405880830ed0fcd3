"""Reeltrack - Project tracking for short-form video production.

This package provides a project store for video-production records, an
HTTP API over it, and proxies to a chat-completion model (scripts and
prompts) and to the Higgsfield media-generation API (images and videos).
"""

__version__ = "0.1.0"
