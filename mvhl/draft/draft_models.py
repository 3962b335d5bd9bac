"""
Core data structures for the entry draft.

A DraftProspect is a player-shaped entity that is not yet in the league. A
DraftPick is one slot in the draft order. DraftSettings is the per-season draft
context: it is created when the season's draft is set up and passed to the
DraftEngine rather than living as process-wide state.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, Optional

from .. import config
from ..league.errors import AlreadyDraftedError
from ..league.league_state import Player, Position

RATING_NAMES = (
    'skating', 'shooting', 'passing', 'checking',
    'defense', 'puck_handling', 'overall', 'potential'
)


class DraftPhase(str, Enum):
    NOT_STARTED = 'not_started'
    ACTIVE = 'active'
    PAUSED = 'paused'
    COMPLETED = 'completed'


class DraftOrderStyle(str, Enum):
    STRAIGHT = 'straight'   # same team sequence every round
    SNAKE = 'snake'         # sequence reverses each round


@dataclass
class DraftProspect:
    """An undrafted player with scouting ratings."""

    id: str
    name: str
    position: Position
    age: int
    draft_rank: Optional[int] = None
    height: Optional[str] = None
    weight: Optional[str] = None
    country: Optional[str] = None
    league: Optional[str] = None
    ratings: Dict[str, int] = field(default_factory=dict)

    # Set once, when drafted
    is_drafted: bool = False
    drafted_by: Optional[str] = None
    draft_round: Optional[int] = None
    draft_pick: Optional[int] = None

    def __post_init__(self):
        self.position = Position(self.position)
        for name, value in self.ratings.items():
            if name not in RATING_NAMES:
                raise ValueError(f"Unknown rating '{name}' for prospect {self.id}")
            if not config.MIN_RATING <= value <= config.MAX_RATING:
                raise ValueError(
                    f"Rating {name}={value} for prospect {self.id} outside "
                    f"{config.MIN_RATING}-{config.MAX_RATING}"
                )

    def mark_drafted(self, team_id: str, draft_round: int, draft_pick: int) -> None:
        """
        Record the draft selection.

        Raises:
            AlreadyDraftedError: If the prospect was drafted before
        """
        if self.is_drafted:
            raise AlreadyDraftedError(f"{self.name} has already been drafted")
        self.is_drafted = True
        self.drafted_by = team_id
        self.draft_round = draft_round
        self.draft_pick = draft_pick

    def to_player(self) -> Player:
        """Promote to a league Player with no team; the caller assigns it."""
        return Player(id=self.id, name=self.name, position=self.position)

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'name': self.name,
            'position': self.position.value,
            'age': self.age,
            'draft_rank': self.draft_rank,
            'height': self.height,
            'weight': self.weight,
            'country': self.country,
            'league': self.league,
            'ratings': dict(self.ratings),
            'is_drafted': self.is_drafted,
            'drafted_by': self.drafted_by,
            'draft_round': self.draft_round,
            'draft_pick': self.draft_pick,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'DraftProspect':
        return cls(
            id=data['id'],
            name=data['name'],
            position=Position(data['position']),
            age=data['age'],
            draft_rank=data.get('draft_rank'),
            height=data.get('height'),
            weight=data.get('weight'),
            country=data.get('country'),
            league=data.get('league'),
            ratings=dict(data.get('ratings', {})),
        )


@dataclass
class DraftPick:
    """One slot in the draft order."""

    pick_number: int          # Overall pick number, unique across the draft
    round: int
    team_id: str              # Team that owns the slot
    player_id: Optional[str] = None
    player_name: Optional[str] = None
    is_selected: bool = False
    time_remaining: int = config.DRAFT_PICK_TIME_LIMIT
    requeued: int = 0         # times moved to the end of its round
    forfeited: bool = False
    selected_at: Optional[datetime] = None

    @property
    def is_resolved(self) -> bool:
        return self.is_selected or self.forfeited

    def to_dict(self) -> dict:
        return {
            'pick_number': self.pick_number,
            'round': self.round,
            'team_id': self.team_id,
            'player_id': self.player_id,
            'player_name': self.player_name,
            'is_selected': self.is_selected,
            'time_remaining': self.time_remaining,
            'requeued': self.requeued,
            'forfeited': self.forfeited,
            'selected_at': self.selected_at.isoformat() if self.selected_at else None,
        }


@dataclass
class DraftSettings:
    """Draft configuration and progress for one season."""

    season: str = '2024-25'
    pick_time_limit: int = config.DRAFT_PICK_TIME_LIMIT
    total_rounds: int = config.DRAFT_TOTAL_ROUNDS
    picks_per_round: int = config.DRAFT_PICKS_PER_ROUND
    order_style: DraftOrderStyle = DraftOrderStyle(config.DRAFT_ORDER_STYLE)

    phase: DraftPhase = DraftPhase.NOT_STARTED
    current_round: int = 1
    current_pick: int = 1     # position within the current round, 1-based
    start_time: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        self.order_style = DraftOrderStyle(self.order_style)
        self.phase = DraftPhase(self.phase)
        if self.pick_time_limit <= 0:
            raise ValueError("pick_time_limit must be positive")
        if self.total_rounds <= 0:
            raise ValueError("total_rounds must be positive")
        if self.picks_per_round <= 0:
            raise ValueError("picks_per_round must be positive")

    @property
    def is_active(self) -> bool:
        return self.phase is DraftPhase.ACTIVE

    @property
    def total_picks(self) -> int:
        return self.total_rounds * self.picks_per_round

    def to_dict(self) -> dict:
        return {
            'season': self.season,
            'is_active': self.is_active,
            'phase': self.phase.value,
            'current_round': self.current_round,
            'current_pick': self.current_pick,
            'pick_time_limit': self.pick_time_limit,
            'total_rounds': self.total_rounds,
            'picks_per_round': self.picks_per_round,
            'order_style': self.order_style.value,
            'start_time': self.start_time.isoformat() if self.start_time else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }
