"""
Generated league content (commentary, reports, recaps, headshots).
"""

from .content_client import ContentClient, ContentGenerationError

__all__ = [
    'ContentClient',
    'ContentGenerationError',
]
