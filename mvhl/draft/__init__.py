"""
Entry draft subsystem.

Prospects are drafted one slot at a time, in straight or snake order, under a
per-pick countdown. Drafted prospects become players on the picking team.
"""

from .draft_models import DraftPhase, DraftOrderStyle, DraftProspect, DraftPick, DraftSettings
from .draft_order import build_draft_order
from .draft_engine import DraftEngine

__all__ = [
    'DraftPhase',
    'DraftOrderStyle',
    'DraftProspect',
    'DraftPick',
    'DraftSettings',
    'build_draft_order',
    'DraftEngine',
]
