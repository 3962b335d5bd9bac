"""
Core data structures for teams and players.

These dataclasses represent the league's teams, their records, and the players
on their rosters. Season statistics are position dependent: skaters carry
SkaterStats, goalies carry GoalieStats.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Union

from .. import config


def utc_now() -> datetime:
    """Timezone-aware current time; the default clock for all engines."""
    return datetime.now(timezone.utc)


class Position(str, Enum):
    C = 'C'
    LW = 'LW'
    RW = 'RW'
    LD = 'LD'
    RD = 'RD'
    D = 'D'
    G = 'G'

    @property
    def is_goalie(self) -> bool:
        return self is Position.G


class Availability(str, Enum):
    AVAILABLE = 'available'
    MAYBE = 'maybe'
    UNAVAILABLE = 'unavailable'


@dataclass
class SkaterStats:
    """Season statistics for a skater."""

    games_played: int = 0
    goals: int = 0
    assists: int = 0
    plus_minus: int = 0
    penalty_minutes: int = 0
    hits: int = 0
    blocks: int = 0
    shots_on_goal: int = 0

    kind = 'skater'

    @property
    def points(self) -> int:
        return self.goals + self.assists

    def to_dict(self) -> dict:
        return {
            'kind': self.kind,
            'games_played': self.games_played,
            'goals': self.goals,
            'assists': self.assists,
            'points': self.points,
            'plus_minus': self.plus_minus,
            'penalty_minutes': self.penalty_minutes,
            'hits': self.hits,
            'blocks': self.blocks,
            'shots_on_goal': self.shots_on_goal,
        }


@dataclass
class GoalieStats:
    """Season statistics for a goalie."""

    games_played: int = 0
    wins: int = 0
    losses: int = 0
    ot_losses: int = 0
    shots_against: int = 0
    goals_against: int = 0
    minutes_played: int = 0
    shutouts: int = 0

    kind = 'goalie'

    @property
    def save_percentage(self) -> float:
        if self.shots_against == 0:
            return 0.0
        return round((self.shots_against - self.goals_against) / self.shots_against, 3)

    @property
    def goals_against_average(self) -> float:
        if self.minutes_played == 0:
            return 0.0
        return round(self.goals_against * 60 / self.minutes_played, 2)

    def to_dict(self) -> dict:
        return {
            'kind': self.kind,
            'games_played': self.games_played,
            'wins': self.wins,
            'losses': self.losses,
            'ot_losses': self.ot_losses,
            'shots_against': self.shots_against,
            'goals_against': self.goals_against,
            'minutes_played': self.minutes_played,
            'shutouts': self.shutouts,
            'save_percentage': self.save_percentage,
            'goals_against_average': self.goals_against_average,
        }


PlayerStats = Union[SkaterStats, GoalieStats]


def stats_from_dict(data: Optional[dict], position: Position) -> PlayerStats:
    """Build the stats variant that matches a position."""
    data = dict(data or {})
    data.pop('kind', None)
    if position.is_goalie:
        names = GoalieStats.__dataclass_fields__
        return GoalieStats(**{k: v for k, v in data.items() if k in names})
    names = SkaterStats.__dataclass_fields__
    return SkaterStats(**{k: v for k, v in data.items() if k in names})


@dataclass
class Team:
    """A league team and its cumulative record."""

    id: str
    name: str
    city: str
    abbreviation: str
    conference: str
    division: str
    wins: int = 0
    losses: int = 0
    ot_losses: int = 0

    @property
    def points(self) -> int:
        return config.POINTS_PER_WIN * self.wins + config.POINTS_PER_OT_LOSS * self.ot_losses

    @property
    def games_played(self) -> int:
        return self.wins + self.losses + self.ot_losses

    def record_win(self) -> None:
        self.wins += 1

    def record_loss(self, overtime: bool = False) -> None:
        if overtime:
            self.ot_losses += 1
        else:
            self.losses += 1

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'name': self.name,
            'city': self.city,
            'abbreviation': self.abbreviation,
            'conference': self.conference,
            'division': self.division,
            'wins': self.wins,
            'losses': self.losses,
            'ot_losses': self.ot_losses,
            'points': self.points,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Team':
        return cls(
            id=data['id'],
            name=data['name'],
            city=data['city'],
            abbreviation=data['abbreviation'],
            conference=data['conference'],
            division=data['division'],
            wins=data.get('wins', 0),
            losses=data.get('losses', 0),
            ot_losses=data.get('ot_losses', 0),
        )


@dataclass
class Player:
    """A player in the league, optionally owned by a team."""

    id: str
    name: str
    position: Position
    number: Optional[int] = None
    team_id: Optional[str] = None          # None = free agent / on waivers
    availability: Availability = Availability.AVAILABLE
    stats: Optional[PlayerStats] = None
    gamertag: Optional[str] = None
    bio: Optional[str] = None

    def __post_init__(self):
        self.position = Position(self.position)
        self.availability = Availability(self.availability)
        if self.stats is None:
            self.stats = GoalieStats() if self.position.is_goalie else SkaterStats()
        expected = GoalieStats if self.position.is_goalie else SkaterStats
        if not isinstance(self.stats, expected):
            raise ValueError(
                f"Player {self.id} at {self.position.value} requires "
                f"{expected.__name__}, got {type(self.stats).__name__}"
            )

    @property
    def is_free_agent(self) -> bool:
        return self.team_id is None

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'name': self.name,
            'number': self.number,
            'position': self.position.value,
            'team_id': self.team_id,
            'availability': self.availability.value,
            'gamertag': self.gamertag,
            'bio': self.bio,
            'stats': self.stats.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Player':
        position = Position(data['position'])
        return cls(
            id=data['id'],
            name=data['name'],
            position=position,
            number=data.get('number'),
            team_id=data.get('team_id'),
            availability=Availability(data.get('availability', 'available')),
            stats=stats_from_dict(data.get('stats'), position),
            gamertag=data.get('gamertag'),
            bio=data.get('bio'),
        )
