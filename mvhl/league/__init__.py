"""
League core: teams, players, rosters and standings.

The RosterStore is the shared state that the draft, trade and waiver engines
all write through. LeagueContext (league_context) wires everything together
for a season.
"""

from .errors import (
    LeagueError,
    NotFoundError,
    InvalidStateError,
    NotYourTurnError,
    AlreadyDraftedError,
    InvalidOwnershipError,
    OwnershipConflictError,
    StaleTradeError,
    WindowClosedError,
    NotPermittedError,
)
from .league_state import Team, Player, Position, Availability, SkaterStats, GoalieStats
from .roster_store import RosterStore
from .standings_calculator import calculate_standings, waiver_priority_order, reverse_standings_order

__all__ = [
    'LeagueError',
    'NotFoundError',
    'InvalidStateError',
    'NotYourTurnError',
    'AlreadyDraftedError',
    'InvalidOwnershipError',
    'OwnershipConflictError',
    'StaleTradeError',
    'WindowClosedError',
    'NotPermittedError',
    'Team',
    'Player',
    'Position',
    'Availability',
    'SkaterStats',
    'GoalieStats',
    'RosterStore',
    'calculate_standings',
    'waiver_priority_order',
    'reverse_standings_order',
]
