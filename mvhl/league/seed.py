"""
Demo league data.

Builds the 32-team league (two conferences, four divisions of eight), a
15-player roster per team and a ranked prospect pool. Names and statistics are
drawn from a seeded random generator so the same seed always yields the same
league.
"""

import logging
import random
from typing import List, Tuple

from ..draft.draft_models import RATING_NAMES, DraftProspect
from .league_state import GoalieStats, Player, Position, SkaterStats, Team

logger = logging.getLogger(__name__)

# (name, city, abbreviation, conference, division)
TEAMS = [
    ("Boston Bruins", "Boston", "BOS", "Eastern", "Atlantic"),
    ("Buffalo Sabres", "Buffalo", "BUF", "Eastern", "Atlantic"),
    ("Detroit Red Wings", "Detroit", "DET", "Eastern", "Atlantic"),
    ("Florida Panthers", "Florida", "FLA", "Eastern", "Atlantic"),
    ("Montreal Canadiens", "Montreal", "MTL", "Eastern", "Atlantic"),
    ("Ottawa Senators", "Ottawa", "OTT", "Eastern", "Atlantic"),
    ("Tampa Bay Lightning", "Tampa Bay", "TB", "Eastern", "Atlantic"),
    ("Toronto Maple Leafs", "Toronto", "TOR", "Eastern", "Atlantic"),
    ("Carolina Hurricanes", "Carolina", "CAR", "Eastern", "Metropolitan"),
    ("Columbus Blue Jackets", "Columbus", "CBJ", "Eastern", "Metropolitan"),
    ("New Jersey Devils", "New Jersey", "NJ", "Eastern", "Metropolitan"),
    ("New York Islanders", "New York", "NYI", "Eastern", "Metropolitan"),
    ("New York Rangers", "New York", "NYR", "Eastern", "Metropolitan"),
    ("Philadelphia Flyers", "Philadelphia", "PHI", "Eastern", "Metropolitan"),
    ("Pittsburgh Penguins", "Pittsburgh", "PIT", "Eastern", "Metropolitan"),
    ("Washington Capitals", "Washington", "WSH", "Eastern", "Metropolitan"),
    ("Arizona Coyotes", "Arizona", "ARI", "Western", "Central"),
    ("Chicago Blackhawks", "Chicago", "CHI", "Western", "Central"),
    ("Colorado Avalanche", "Colorado", "COL", "Western", "Central"),
    ("Dallas Stars", "Dallas", "DAL", "Western", "Central"),
    ("Minnesota Wild", "Minnesota", "MIN", "Western", "Central"),
    ("Nashville Predators", "Nashville", "NSH", "Western", "Central"),
    ("St. Louis Blues", "St. Louis", "STL", "Western", "Central"),
    ("Winnipeg Jets", "Winnipeg", "WPG", "Western", "Central"),
    ("Anaheim Ducks", "Anaheim", "ANA", "Western", "Pacific"),
    ("Calgary Flames", "Calgary", "CGY", "Western", "Pacific"),
    ("Edmonton Oilers", "Edmonton", "EDM", "Western", "Pacific"),
    ("Los Angeles Kings", "Los Angeles", "LA", "Western", "Pacific"),
    ("San Jose Sharks", "San Jose", "SJ", "Western", "Pacific"),
    ("Seattle Kraken", "Seattle", "SEA", "Western", "Pacific"),
    ("Vancouver Canucks", "Vancouver", "VAN", "Western", "Pacific"),
    ("Vegas Golden Knights", "Vegas", "VGK", "Western", "Pacific"),
]

# 15-man roster: 3 C, 3 LW, 3 RW, 3 LD, 2 RD, 1 G
ROSTER_POSITIONS = ['C'] * 3 + ['LW'] * 3 + ['RW'] * 3 + ['LD'] * 3 + ['RD'] * 2 + ['G']

FIRST_NAMES = [
    "Alex", "Connor", "Nathan", "Tyler", "Jake", "Ryan", "Matt", "Mike", "David", "Chris",
    "Brandon", "Kyle", "Jordan", "Justin", "Andrew", "Sean", "Derek", "Mark", "Patrick", "Kevin",
    "Dylan", "Zach", "Logan", "Trevor", "Austin", "Blake", "Cole", "Mason", "Hunter", "Carter",
]

LAST_NAMES = [
    "Johnson", "Williams", "Brown", "Davis", "Miller", "Wilson", "Moore", "Taylor", "Anderson", "Thomas",
    "Jackson", "White", "Harris", "Martin", "Thompson", "Garcia", "Martinez", "Robinson", "Clark", "Rodriguez",
    "Lewis", "Lee", "Walker", "Hall", "Allen", "Young", "King", "Wright", "Lopez", "Hill",
]

PROSPECT_COUNTRIES = ["Canada", "USA", "Sweden", "Finland", "Czechia", "Slovakia", "Germany", "Switzerland"]
PROSPECT_LEAGUES = ["OHL", "WHL", "QMJHL", "USHL", "NCAA", "SHL", "Liiga"]
PROSPECT_POSITIONS = ['C', 'LW', 'RW', 'LD', 'RD', 'G']


def build_teams() -> List[Team]:
    return [
        Team(id=abbr, name=name, city=city, abbreviation=abbr, conference=conf, division=div)
        for name, city, abbr, conf, div in TEAMS
    ]


def _random_name(rng: random.Random) -> str:
    return f"{rng.choice(FIRST_NAMES)} {rng.choice(LAST_NAMES)}"


def _random_stats(rng: random.Random, position: Position):
    if position.is_goalie:
        games = rng.randint(10, 39)
        shots = games * rng.randint(24, 34)
        return GoalieStats(
            games_played=games,
            wins=rng.randint(5, 24),
            losses=rng.randint(3, 17),
            ot_losses=rng.randint(0, 4),
            shots_against=shots,
            goals_against=int(shots * rng.uniform(0.05, 0.15)),
            minutes_played=games * 60,
            shutouts=rng.randint(0, 4),
        )
    return SkaterStats(
        games_played=rng.randint(15, 44),
        goals=rng.randint(0, 24),
        assists=rng.randint(0, 29),
        plus_minus=rng.randint(-10, 10),
        penalty_minutes=rng.randint(0, 49),
        hits=rng.randint(0, 99),
        blocks=rng.randint(0, 49),
        shots_on_goal=rng.randint(20, 169),
    )


def build_rosters(teams: List[Team], rng: random.Random) -> List[Player]:
    players = []
    for team in teams:
        for i, position in enumerate(ROSTER_POSITIONS):
            position = Position(position)
            players.append(Player(
                id=f"{team.id}-{i + 1:02d}",
                name=_random_name(rng),
                position=position,
                number=i + 1,
                team_id=team.id,
                stats=_random_stats(rng, position),
                gamertag=f"{team.abbreviation}_{i + 1}",
            ))
    return players


def build_prospects(count: int, rng: random.Random) -> List[DraftProspect]:
    prospects = []
    for rank in range(1, count + 1):
        ratings = {name: rng.randint(4, 10) for name in RATING_NAMES}
        prospects.append(DraftProspect(
            id=f"P{rank:03d}",
            name=_random_name(rng),
            position=Position(rng.choice(PROSPECT_POSITIONS)),
            age=rng.randint(17, 19),
            draft_rank=rank,
            height=f"6'{rng.randint(0, 4)}\"",
            weight=f"{rng.randint(170, 215)} lbs",
            country=rng.choice(PROSPECT_COUNTRIES),
            league=rng.choice(PROSPECT_LEAGUES),
            ratings=ratings,
        ))
    return prospects


def build_demo_league(
    seed: int = 42,
    prospect_count: int = 200
) -> Tuple[List[Team], List[Player], List[DraftProspect]]:
    """
    Build the demo league.

    Args:
        seed: Random seed; the same seed gives the same league
        prospect_count: Size of the draft prospect pool

    Returns:
        (teams, players, prospects)
    """
    rng = random.Random(seed)
    teams = build_teams()
    players = build_rosters(teams, rng)
    prospects = build_prospects(prospect_count, rng)

    logger.info(
        f"Built demo league: {len(teams)} teams, {len(players)} players, "
        f"{len(prospects)} prospects"
    )
    return teams, players, prospects
