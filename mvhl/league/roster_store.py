"""
Authoritative player-to-team assignment store.

The RosterStore is the single shared-state boundary for the draft, trade and
waiver engines. ``assign`` is the only primitive that changes ownership. It
supports optimistic concurrency: callers pass the owner they validated against
and the write only commits if that owner is still current.

All mutation happens under one re-entrant lock. Engines that need to read,
validate and then write several players as one unit hold ``store.lock`` for the
whole sequence.
"""

import logging
import threading
from typing import Dict, Iterable, List, Optional, Tuple

import pandas as pd
from fuzzywuzzy import fuzz, process

from .errors import NotFoundError, OwnershipConflictError
from .league_state import Availability, Player, Team

logger = logging.getLogger(__name__)

# Sentinel for "do not check the current owner"
ANY_OWNER = object()

# (player_id, new_team_id, expected_current_team_id)
RosterMove = Tuple[str, Optional[str], Optional[str]]


class RosterStore:
    """In-memory roster store guarded by a re-entrant lock."""

    def __init__(
        self,
        teams: Optional[Iterable[Team]] = None,
        players: Optional[Iterable[Player]] = None
    ):
        self.lock = threading.RLock()
        self._teams: Dict[str, Team] = {}
        self._players: Dict[str, Player] = {}

        for team in teams or []:
            self.add_team(team)
        for player in players or []:
            self.add_player(player)

    # ----- Teams -----

    def add_team(self, team: Team) -> Team:
        with self.lock:
            if team.id in self._teams:
                raise ValueError(f"Duplicate team_id: {team.id}")
            self._teams[team.id] = team
        return team

    def get_team(self, team_id: str) -> Team:
        team = self._teams.get(team_id)
        if team is None:
            raise NotFoundError(f"Team {team_id} not found")
        return team

    def has_team(self, team_id: str) -> bool:
        return team_id in self._teams

    def list_teams(self) -> List[Team]:
        with self.lock:
            teams = list(self._teams.values())
        return sorted(teams, key=lambda t: t.id)

    def team_ids(self) -> List[str]:
        with self.lock:
            return sorted(self._teams)

    # ----- Players -----

    def add_player(self, player: Player) -> Player:
        """
        Register a new player.

        A player created with a team_id is placed directly on that roster;
        this is only used for league setup. Later ownership changes go through
        assign().
        """
        with self.lock:
            if player.id in self._players:
                raise ValueError(f"Duplicate player_id: {player.id}")
            if player.team_id is not None and player.team_id not in self._teams:
                raise NotFoundError(f"Team {player.team_id} not found")
            self._players[player.id] = player
        return player

    def get_player(self, player_id: str) -> Player:
        player = self._players.get(player_id)
        if player is None:
            raise NotFoundError(f"Player {player_id} not found")
        return player

    def _snapshot_players(self) -> List[Player]:
        # Readers iterate a copy; picks add players concurrently
        with self.lock:
            return list(self._players.values())

    def list_players(self, free_agents_only: bool = False) -> List[Player]:
        players = self._snapshot_players()
        if free_agents_only:
            players = [p for p in players if p.is_free_agent]
        return sorted(players, key=lambda p: (p.name, p.id))

    def get_roster(self, team_id: str) -> List[Player]:
        self.get_team(team_id)
        roster = [p for p in self._snapshot_players() if p.team_id == team_id]
        return sorted(roster, key=lambda p: (p.position.value, p.name))

    def owner_of(self, player_id: str) -> Optional[str]:
        return self.get_player(player_id).team_id

    # ----- Ownership mutation -----

    def assign(
        self,
        player_id: str,
        team_id: Optional[str],
        expected_team_id=ANY_OWNER
    ) -> Player:
        """
        Move a player to a team (or to no team when team_id is None).

        Args:
            player_id: Player to move
            team_id: Destination team, None for free agency / waivers
            expected_team_id: Owner the caller validated against; the write is
                rejected if the player has moved since

        Raises:
            NotFoundError: Unknown player or destination team
            OwnershipConflictError: Current owner differs from expected_team_id
        """
        with self.lock:
            player = self.get_player(player_id)
            if team_id is not None:
                self.get_team(team_id)

            if expected_team_id is not ANY_OWNER and player.team_id != expected_team_id:
                raise OwnershipConflictError(
                    f"Player {player.name} is no longer with the expected team"
                )

            previous = player.team_id
            player.team_id = team_id

        logger.debug(f"Assigned {player.name}: {previous} → {team_id}")
        return player

    def assign_many(self, moves: List[RosterMove]) -> List[Player]:
        """
        Apply several ownership changes as one all-or-nothing unit.

        Every move is validated before any assign() call is made, so a failed
        check never leaves a partially applied set.
        """
        with self.lock:
            for player_id, team_id, expected in moves:
                player = self.get_player(player_id)
                if team_id is not None:
                    self.get_team(team_id)
                if player.team_id != expected:
                    raise OwnershipConflictError(
                        f"Player {player.name} is no longer with the expected team"
                    )

            return [
                self.assign(player_id, team_id, expected)
                for player_id, team_id, expected in moves
            ]

    # ----- Player details -----

    def set_availability(self, player_id: str, availability: str) -> Player:
        with self.lock:
            player = self.get_player(player_id)
            player.availability = Availability(availability)
        logger.info(f"{player.name} availability set to {player.availability.value}")
        return player

    def update_profile(
        self,
        player_id: str,
        gamertag: Optional[str] = None,
        bio: Optional[str] = None
    ) -> Player:
        with self.lock:
            player = self.get_player(player_id)
            if gamertag is not None:
                player.gamertag = gamertag
            if bio is not None:
                player.bio = bio
        return player

    def search_players(self, query: str, limit: int = 10, min_score: int = 60) -> List[Tuple[Player, int]]:
        """
        Fuzzy search players by name.

        Returns:
            List of (player, score) pairs, best match first
        """
        players = {p.id: p for p in self._snapshot_players()}
        if not query or not players:
            return []

        choices = {pid: p.name for pid, p in players.items()}
        matches = process.extract(
            query,
            choices,
            scorer=fuzz.token_sort_ratio,
            limit=limit
        )

        results = []
        for _name, score, player_id in matches:
            if score >= min_score:
                results.append((players[player_id], score))

        logger.debug(f"Search '{query}': {len(results)} matches")
        return results

    # ----- Records -----

    def record_game_result(
        self,
        home_team_id: str,
        away_team_id: str,
        home_score: int,
        away_score: int,
        overtime: bool = False
    ) -> Tuple[Team, Team]:
        """
        Apply a completed game to both teams' records.

        Raises:
            ValueError: If the teams are the same or the score is tied
        """
        if home_team_id == away_team_id:
            raise ValueError("A team cannot play itself")
        if home_score == away_score:
            raise ValueError("Games cannot end in a tie")

        with self.lock:
            home = self.get_team(home_team_id)
            away = self.get_team(away_team_id)
            winner, loser = (home, away) if home_score > away_score else (away, home)
            winner.record_win()
            loser.record_loss(overtime=overtime)

        logger.info(
            f"Result: {away.abbreviation} {away_score} @ {home.abbreviation} {home_score}"
            f"{' (OT)' if overtime else ''}"
        )
        return home, away

    def get_team_summary(self) -> pd.DataFrame:
        """
        Get roster counts for all teams.

        Returns:
            DataFrame with team_id, abbreviation, skaters, goalies, roster_size
        """
        players = self._snapshot_players()
        summary_data = []
        for team in self.list_teams():
            roster = [p for p in players if p.team_id == team.id]
            goalies = sum(1 for p in roster if p.position.is_goalie)
            summary_data.append({
                'team_id': team.id,
                'abbreviation': team.abbreviation,
                'skaters': len(roster) - goalies,
                'goalies': goalies,
                'roster_size': len(roster)
            })

        return pd.DataFrame(
            summary_data,
            columns=['team_id', 'abbreviation', 'skaters', 'goalies', 'roster_size']
        )
