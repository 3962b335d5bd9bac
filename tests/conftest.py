"""Pytest configuration and fixtures for league tests."""

from datetime import datetime, timedelta, timezone

import pytest

from mvhl.draft.draft_models import DraftProspect, DraftSettings
from mvhl.league.league_context import LeagueContext
from mvhl.league.league_state import GoalieStats, Player, SkaterStats, Team

# 08:00 Eastern (daylight time); waivers process at 14:00 Eastern = 18:00 UTC
START = datetime(2024, 10, 15, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    """Controllable clock passed to the engines."""

    def __init__(self, start: datetime = START):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float = 0, **kwargs) -> datetime:
        self.now += timedelta(seconds=seconds, **kwargs)
        return self.now


def make_teams():
    # Points: BOS 20, TOR 16, NYR 11, MTL 7
    return [
        Team(id='BOS', name='Boston Bruins', city='Boston', abbreviation='BOS',
             conference='Eastern', division='Atlantic', wins=10, losses=2),
        Team(id='TOR', name='Toronto Maple Leafs', city='Toronto', abbreviation='TOR',
             conference='Eastern', division='Atlantic', wins=8, losses=4),
        Team(id='MTL', name='Montreal Canadiens', city='Montreal', abbreviation='MTL',
             conference='Eastern', division='Atlantic', wins=3, losses=8, ot_losses=1),
        Team(id='NYR', name='New York Rangers', city='New York', abbreviation='NYR',
             conference='Eastern', division='Metropolitan', wins=5, losses=6, ot_losses=1),
    ]


PLAYER_NAMES = {
    'BOS': ('Connor Walsh', 'Derek Hall', 'Trevor King'),
    'TOR': ('Mason Clark', 'Logan Price', 'Austin Reed'),
    'MTL': ('Blake Martin', 'Hunter Young', 'Cole Wright'),
    'NYR': ('Kyle Lewis', 'Jordan Hill', 'Ryan Allen'),
}


def make_players():
    players = []
    for team_id, (center, defense, goalie) in PLAYER_NAMES.items():
        players.append(Player(id=f'{team_id}-C', name=center, position='C', number=19,
                              team_id=team_id, stats=SkaterStats(games_played=12, goals=6, assists=9)))
        players.append(Player(id=f'{team_id}-D', name=defense, position='LD', number=4,
                              team_id=team_id, stats=SkaterStats(games_played=12, assists=5)))
        players.append(Player(id=f'{team_id}-G', name=goalie, position='G', number=30,
                              team_id=team_id, stats=GoalieStats(games_played=10, wins=6)))
    return players


def make_prospects():
    positions = ['C', 'LW', 'RW', 'LD', 'RD', 'G', 'C', 'LW', 'RW', 'LD']
    prospects = [
        DraftProspect(id=f'P{rank:02d}', name=f'Prospect {rank:02d}', position=positions[rank - 1],
                      age=18, draft_rank=rank, ratings={'overall': 8, 'potential': 9})
        for rank in range(1, 11)
    ]
    prospects.append(DraftProspect(id='PXX', name='Walk On', position='D', age=19))
    return prospects


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def league(clock):
    """A four-team league with a small prospect pool and a fake clock."""
    settings = DraftSettings(pick_time_limit=60, total_rounds=2, picks_per_round=4)
    return LeagueContext.create(
        make_teams(),
        make_players(),
        make_prospects(),
        draft_settings=settings,
        clock=clock,
    )


@pytest.fixture
def store(league):
    return league.store
