"""
HTTP API for the league transaction service.
"""

from .api_server import app, get_league_context, set_league_context

__all__ = [
    'app',
    'get_league_context',
    'set_league_context',
]
