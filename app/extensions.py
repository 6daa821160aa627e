"""
Shared client instances — OpenAI.

Lazily initialized on first access so importing this module is always safe
(even when env vars are missing during tests).
"""
import logging

from app import config

logger = logging.getLogger('app.extensions')

_openai_client = None


def get_openai_client():
    """Return the shared OpenAI client, or None when OPENAI_API_KEY is not set."""
    global _openai_client
    if _openai_client is not None:
        return _openai_client
    if not config.OPENAI_API_KEY:
        logger.warning("OPENAI_API_KEY not set")
        return None

    from openai import OpenAI
    _openai_client = OpenAI(api_key=config.OPENAI_API_KEY)
    logger.info("OpenAI client initialized successfully")
    return _openai_client
