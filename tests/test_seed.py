"""Tests for the demo league builder."""

from collections import Counter

from mvhl.league.league_context import LeagueContext
from mvhl.league.seed import ROSTER_POSITIONS, build_demo_league


class TestDemoLeague:
    """Tests for the generated teams, rosters and prospects."""

    def test_league_shape(self):
        teams, players, prospects = build_demo_league(prospect_count=200)

        assert len(teams) == 32
        assert len(players) == 32 * len(ROSTER_POSITIONS) == 480
        assert len(prospects) == 200
        assert len({t.id for t in teams}) == 32

    def test_eight_teams_per_division(self):
        teams, _players, _prospects = build_demo_league()
        divisions = Counter(t.division for t in teams)
        assert set(divisions.values()) == {8}
        assert len(divisions) == 4

    def test_every_roster_is_full(self):
        _teams, players, _prospects = build_demo_league()
        per_team = Counter(p.team_id for p in players)
        assert set(per_team.values()) == {15}
        goalies = [p for p in players if p.team_id == 'BOS' and p.position.value == 'G']
        assert len(goalies) == 1

    def test_same_seed_same_league(self):
        _t1, first_players, first_prospects = build_demo_league(seed=7)
        _t2, second_players, second_prospects = build_demo_league(seed=7)

        assert [p.name for p in first_players] == [p.name for p in second_players]
        assert [p.ratings for p in first_prospects] == [p.ratings for p in second_prospects]

    def test_prospects_ranked_in_order(self):
        _teams, _players, prospects = build_demo_league(prospect_count=10)
        assert [p.draft_rank for p in prospects] == list(range(1, 11))
        assert prospects[0].id == 'P001'


class TestDemoContext:
    """Tests for a context built from the demo league."""

    def test_demo_context_wires_engines(self):
        context = LeagueContext.demo(seed=3)

        assert len(context.store.list_teams()) == 32
        assert len(context.draft.available_prospects()) == 200
        assert len(context.default_draft_order()) == 32
        assert context.log.count() == 0
