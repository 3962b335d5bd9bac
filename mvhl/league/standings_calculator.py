"""
Standings calculator for league tables and waiver priority.

Standings rank teams by points, then wins. Waiver priority uses the reverse
ordering: the team with the fewest points claims first, ties going to the team
with fewer wins, then to the lower team id.
"""

import logging
from typing import Dict, Iterable, List, Optional

import pandas as pd

from .league_state import Team

logger = logging.getLogger(__name__)

STANDINGS_COLUMNS = [
    'team_id', 'name', 'abbreviation', 'conference', 'division',
    'games_played', 'wins', 'losses', 'ot_losses', 'points', 'points_pct'
]


def build_standings_table(teams: Iterable[Team]) -> pd.DataFrame:
    """
    Build a standings DataFrame sorted best record first.

    Args:
        teams: Teams to rank

    Returns:
        DataFrame with one row per team and a 1-based 'rank' column
    """
    rows = []
    for team in teams:
        games = team.games_played
        rows.append({
            'team_id': team.id,
            'name': team.name,
            'abbreviation': team.abbreviation,
            'conference': team.conference,
            'division': team.division,
            'games_played': games,
            'wins': team.wins,
            'losses': team.losses,
            'ot_losses': team.ot_losses,
            'points': team.points,
            # Share of the points available from games played
            'points_pct': round(team.points / (2 * games), 3) if games else 0.0,
        })

    df = pd.DataFrame(rows, columns=STANDINGS_COLUMNS)
    if df.empty:
        df['rank'] = pd.Series(dtype=int)
        return df

    df = df.sort_values(
        ['points', 'wins', 'team_id'],
        ascending=[False, False, True]
    ).reset_index(drop=True)
    df['rank'] = range(1, len(df) + 1)
    return df


def _to_records(df: pd.DataFrame) -> List[Dict]:
    """Convert a DataFrame to plain-Python records for JSON responses."""
    records = df.to_dict('records')
    for record in records:
        for key, value in record.items():
            if hasattr(value, 'item'):  # numpy types
                record[key] = value.item()
    return records


def calculate_standings(
    teams: Iterable[Team],
    group_by: Optional[str] = None
) -> Dict[str, List[Dict]]:
    """
    Calculate standings, optionally grouped by conference or division.

    Args:
        teams: Teams to rank
        group_by: None, 'conference' or 'division'

    Returns:
        Dict mapping group name ('league' when ungrouped) to ranked team dicts
    """
    if group_by not in (None, 'conference', 'division'):
        raise ValueError(f"Unknown standings grouping: {group_by}")

    table = build_standings_table(teams)
    if group_by is None:
        return {'league': _to_records(table)}

    grouped = {}
    for group_name, group_df in table.groupby(group_by, sort=True):
        group_df = group_df.reset_index(drop=True).copy()
        group_df['rank'] = range(1, len(group_df) + 1)
        grouped[group_name] = _to_records(group_df)

    logger.debug(f"Calculated standings for {len(grouped)} {group_by} groups")
    return grouped


def waiver_priority_order(teams: Iterable[Team]) -> List[str]:
    """
    Order teams for waiver priority, first claim first.

    Worst record claims first: points ascending, then fewer wins, then team id.
    """
    ordered = sorted(teams, key=lambda t: (t.points, t.wins, t.id))
    return [team.id for team in ordered]


def reverse_standings_order(teams: Iterable[Team]) -> List[str]:
    """Draft order by record, worst team picking first."""
    return waiver_priority_order(teams)
