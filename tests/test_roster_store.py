"""Tests for teams, players and the roster store."""

import threading

import pandas as pd
import pytest

from mvhl.league.errors import NotFoundError, OwnershipConflictError
from mvhl.league.league_state import (
    Availability,
    GoalieStats,
    Player,
    Position,
    SkaterStats,
    Team,
    stats_from_dict,
)
from mvhl.league.roster_store import RosterStore


class TestEntities:
    """Tests for Team and Player invariants."""

    def test_team_points_follow_record(self):
        team = Team(id='X', name='X', city='X', abbreviation='X', conference='E', division='A',
                    wins=4, losses=2, ot_losses=3)
        assert team.points == 11

        team.record_win()
        team.record_loss(overtime=True)
        assert team.points == 14
        assert team.games_played == 11

    def test_player_gets_stats_variant_for_position(self):
        assert isinstance(Player(id='g', name='G', position='G').stats, GoalieStats)
        assert isinstance(Player(id='s', name='S', position='RW').stats, SkaterStats)

    def test_player_rejects_mismatched_stats(self):
        with pytest.raises(ValueError):
            Player(id='x', name='X', position='C', stats=GoalieStats())

    def test_player_rejects_unknown_position(self):
        with pytest.raises(ValueError):
            Player(id='x', name='X', position='QB')

    def test_player_round_trips_through_dict(self):
        player = Player(id='x', name='X', position='G', team_id='BOS',
                        stats=GoalieStats(shots_against=100, goals_against=8))
        restored = Player.from_dict(player.to_dict())
        assert restored.position is Position.G
        assert restored.stats.save_percentage == 0.92
        assert restored.team_id == 'BOS'

    def test_stats_from_dict_ignores_derived_fields(self):
        stats = stats_from_dict({'kind': 'skater', 'goals': 3, 'assists': 4, 'points': 7}, Position.C)
        assert stats.points == 7


class TestRosterStore:
    """Tests for ownership changes and lookups."""

    def test_get_roster(self, store):
        roster = store.get_roster('BOS')
        assert {p.id for p in roster} == {'BOS-C', 'BOS-D', 'BOS-G'}

    def test_unknown_ids_raise_not_found(self, store):
        with pytest.raises(NotFoundError):
            store.get_player('nobody')
        with pytest.raises(NotFoundError):
            store.get_roster('XXX')
        with pytest.raises(NotFoundError):
            store.assign('BOS-C', 'XXX')

    def test_assign_moves_player(self, store):
        store.assign('BOS-C', 'TOR')
        assert store.owner_of('BOS-C') == 'TOR'
        assert 'BOS-C' not in {p.id for p in store.get_roster('BOS')}

    def test_assign_to_none_makes_free_agent(self, store):
        store.assign('BOS-C', None)
        assert store.get_player('BOS-C').is_free_agent
        assert [p.id for p in store.list_players(free_agents_only=True)] == ['BOS-C']

    def test_assign_checks_expected_owner(self, store):
        with pytest.raises(OwnershipConflictError):
            store.assign('BOS-C', 'TOR', expected_team_id='MTL')
        assert store.owner_of('BOS-C') == 'BOS'

    def test_assign_many_is_all_or_nothing(self, store):
        moves = [
            ('BOS-C', 'TOR', 'BOS'),
            ('TOR-C', 'BOS', 'MTL'),   # wrong expected owner
        ]
        with pytest.raises(OwnershipConflictError):
            store.assign_many(moves)

        assert store.owner_of('BOS-C') == 'BOS'
        assert store.owner_of('TOR-C') == 'TOR'

    def test_duplicate_ids_rejected(self, store):
        with pytest.raises(ValueError):
            store.add_player(Player(id='BOS-C', name='Copy', position='C'))
        with pytest.raises(ValueError):
            store.add_team(Team(id='BOS', name='B', city='B', abbreviation='B',
                                conference='E', division='A'))

    def test_set_availability(self, store):
        player = store.set_availability('TOR-D', 'maybe')
        assert player.availability is Availability.MAYBE

        with pytest.raises(ValueError):
            store.set_availability('TOR-D', 'injured')

    def test_update_profile_leaves_omitted_fields(self, store):
        store.update_profile('MTL-G', gamertag='MTL_30', bio='Butterfly goalie')
        player = store.update_profile('MTL-G', bio='Hybrid goalie')
        assert player.gamertag == 'MTL_30'
        assert player.bio == 'Hybrid goalie'

    def test_fuzzy_search_finds_misspelled_name(self, store):
        results = store.search_players('Conor Walsh')
        assert results
        player, score = results[0]
        assert player.id == 'BOS-C'
        assert score >= 90

    def test_search_empty_query(self, store):
        assert store.search_players('') == []

    def test_record_game_result_overtime(self, store):
        home, away = store.record_game_result('BOS', 'TOR', 3, 2, overtime=True)
        assert home.wins == 11
        assert away.ot_losses == 1
        assert away.points == 17

    def test_record_game_result_away_win(self, store):
        home, away = store.record_game_result('MTL', 'NYR', 1, 4)
        assert home.losses == 9
        assert away.wins == 6

    def test_record_game_result_rejects_bad_scores(self, store):
        with pytest.raises(ValueError):
            store.record_game_result('BOS', 'TOR', 2, 2)
        with pytest.raises(ValueError):
            store.record_game_result('BOS', 'BOS', 3, 2)

    def test_team_summary(self, store):
        summary = store.get_team_summary()
        assert isinstance(summary, pd.DataFrame)
        assert len(summary) == 4
        assert set(summary['skaters']) == {2}
        assert set(summary['goalies']) == {1}

    def test_empty_store(self):
        store = RosterStore()
        assert store.list_teams() == []
        assert store.search_players('anyone') == []


class TestConcurrentReads:
    """Tests for reads that overlap with new players being added."""

    def test_reads_survive_concurrent_additions(self, store):
        errors = []
        done = threading.Event()

        def add_players():
            try:
                for i in range(2000):
                    store.add_player(Player(id=f'N{i}', name=f'Rookie {i}', position='C',
                                            team_id='BOS', stats=SkaterStats()))
            finally:
                done.set()

        writer = threading.Thread(target=add_players)
        writer.start()
        while not done.is_set():
            try:
                store.get_roster('BOS')
                store.search_players('Walsh')
                store.list_players(free_agents_only=True)
                store.get_team_summary()
            except RuntimeError as e:
                errors.append(str(e))
        writer.join(timeout=10)

        assert errors == []
        assert len(store.get_roster('BOS')) == 2003
