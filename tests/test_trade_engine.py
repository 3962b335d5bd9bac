"""Tests for the trade engine."""

import threading

import pytest

from conftest import FakeClock, make_players, make_prospects, make_teams

from mvhl.league.errors import (
    InvalidOwnershipError,
    InvalidStateError,
    LeagueError,
    NotFoundError,
    NotPermittedError,
    OwnershipConflictError,
    StaleTradeError,
)
from mvhl.league.league_context import LeagueContext
from mvhl.transactions.transaction_event import TradeStatus, TransactionType


@pytest.fixture
def trades(league):
    return league.trades


class TestPropose:
    """Tests for trade proposals."""

    def test_propose_creates_pending_trade(self, trades):
        trade = trades.propose('BOS', 'TOR', ['BOS-C', 'BOS-D'], ['TOR-C'])
        assert trade.status is TradeStatus.PENDING
        assert trade.players_offered == ('BOS-C', 'BOS-D')
        assert trade.players_wanted == ('TOR-C',)

    def test_offered_player_must_belong_to_proposer(self, trades):
        with pytest.raises(InvalidOwnershipError):
            trades.propose('BOS', 'TOR', ['MTL-C'], ['TOR-C'])

    def test_wanted_player_must_belong_to_receiver(self, trades):
        with pytest.raises(InvalidOwnershipError):
            trades.propose('BOS', 'TOR', ['BOS-C'], ['NYR-C'])

    def test_unknown_team_or_player(self, trades):
        with pytest.raises(NotFoundError):
            trades.propose('BOS', 'XXX', ['BOS-C'], [])
        with pytest.raises(NotFoundError):
            trades.propose('BOS', 'TOR', ['ghost'], [])

    def test_malformed_proposals(self, trades):
        with pytest.raises(ValueError):
            trades.propose('BOS', 'BOS', ['BOS-C'], ['BOS-D'])
        with pytest.raises(ValueError):
            trades.propose('BOS', 'TOR', [], [])

    def test_one_sided_trade_allowed(self, trades):
        trade = trades.propose('BOS', 'TOR', ['BOS-G'], [])
        trades.accept(trade.id)
        assert trades.store.owner_of('BOS-G') == 'TOR'


class TestAccept:
    """Tests for accepting trades."""

    def test_accept_swaps_all_players(self, trades, store, league):
        trade = trades.propose('BOS', 'TOR', ['BOS-C', 'BOS-D'], ['TOR-C'])
        accepted = trades.accept(trade.id)

        assert accepted.status is TradeStatus.ACCEPTED
        assert store.owner_of('BOS-C') == 'TOR'
        assert store.owner_of('BOS-D') == 'TOR'
        assert store.owner_of('TOR-C') == 'BOS'

        entries = league.log.query(type=TransactionType.TRADE)
        assert len(entries) == 1
        assert set(entries[0].team_ids) == {'BOS', 'TOR'}
        assert set(entries[0].player_ids) == {'BOS-C', 'BOS-D', 'TOR-C'}
        assert entries[0].reference_id == trade.id

    def test_stale_trade_leaves_rosters_unchanged(self, trades, store, league):
        trade = trades.propose('BOS', 'TOR', ['BOS-C', 'BOS-D'], ['TOR-C'])
        store.assign('BOS-D', 'MTL')

        with pytest.raises(StaleTradeError) as exc_info:
            trades.accept(trade.id)

        assert isinstance(exc_info.value, OwnershipConflictError)
        assert "rosters have changed" in exc_info.value.message
        assert store.owner_of('BOS-C') == 'BOS'
        assert store.owner_of('TOR-C') == 'TOR'
        assert trades.get_trade(trade.id).status is TradeStatus.PENDING
        assert league.log.query(type=TransactionType.TRADE) == []

    def test_stale_after_earlier_trade_moves_player(self, trades, store):
        first = trades.propose('BOS', 'TOR', ['BOS-C'], [])
        second = trades.propose('BOS', 'MTL', ['BOS-C'], ['MTL-C'])

        trades.accept(first.id)
        with pytest.raises(StaleTradeError):
            trades.accept(second.id)
        assert store.owner_of('MTL-C') == 'MTL'

    def test_only_receiving_team_accepts(self, trades):
        trade = trades.propose('BOS', 'TOR', ['BOS-C'], ['TOR-C'])
        with pytest.raises(NotPermittedError):
            trades.accept(trade.id, acting_team_id='BOS')
        trades.accept(trade.id, acting_team_id='TOR')

    def test_unknown_trade(self, trades):
        with pytest.raises(NotFoundError):
            trades.accept('missing')


class TestTerminalStates:
    """Tests for reject, cancel and terminal-state rules."""

    def test_reject_has_no_roster_effect(self, trades, store):
        trade = trades.propose('BOS', 'TOR', ['BOS-C'], ['TOR-C'])
        rejected = trades.reject(trade.id)

        assert rejected.status is TradeStatus.REJECTED
        assert store.owner_of('BOS-C') == 'BOS'
        assert rejected.resolved_at is not None

    def test_terminal_trades_are_immutable(self, trades):
        trade = trades.propose('BOS', 'TOR', ['BOS-C'], ['TOR-C'])
        trades.accept(trade.id)

        with pytest.raises(InvalidStateError):
            trades.reject(trade.id)
        with pytest.raises(InvalidStateError):
            trades.accept(trade.id)
        with pytest.raises(InvalidStateError):
            trades.cancel(trade.id, 'BOS')

    def test_proposer_cancels(self, trades):
        trade = trades.propose('BOS', 'TOR', ['BOS-C'], ['TOR-C'])
        with pytest.raises(NotPermittedError):
            trades.cancel(trade.id, 'TOR')

        cancelled = trades.cancel(trade.id, 'BOS')
        assert cancelled.status is TradeStatus.CANCELLED
        with pytest.raises(InvalidStateError):
            trades.accept(trade.id)

    def test_list_trades_filters(self, trades, clock):
        first = trades.propose('BOS', 'TOR', ['BOS-C'], [])
        clock.advance(5)
        second = trades.propose('MTL', 'NYR', ['MTL-C'], [])
        trades.reject(second.id)

        assert [t.id for t in trades.list_trades()] == [second.id, first.id]
        assert [t.id for t in trades.list_trades(team_id='TOR')] == [first.id]
        assert [t.id for t in trades.list_trades(status='rejected')] == [second.id]


class TestConcurrentAccept:
    """Tests for an accept racing a waiver on the same player."""

    def test_accept_and_waive_race(self):
        for _attempt in range(25):
            league = LeagueContext.create(make_teams(), make_players(), make_prospects(),
                                          clock=FakeClock())
            trade = league.trades.propose('BOS', 'TOR', ['BOS-C'], ['TOR-C'])
            barrier = threading.Barrier(2)
            outcomes = {}

            def run(name, action):
                barrier.wait()
                try:
                    action()
                    outcomes[name] = 'ok'
                except LeagueError as e:
                    outcomes[name] = e.code

            threads = [
                threading.Thread(target=run, args=('accept', lambda: league.trades.accept(trade.id))),
                threading.Thread(target=run, args=('waive', lambda: league.waivers.waive('BOS-C', 'BOS'))),
            ]
            for thread in threads:
                thread.start()
            for thread in threads:
                thread.join(timeout=5)

            assert list(outcomes.values()).count('ok') == 1
            store = league.store
            if outcomes['accept'] == 'ok':
                assert store.owner_of('BOS-C') == 'TOR'
                assert store.owner_of('TOR-C') == 'BOS'
                assert league.waivers.list_claims() == []
            else:
                assert outcomes['accept'] == 'stale_trade'
                assert store.get_player('BOS-C').is_free_agent
                assert store.owner_of('TOR-C') == 'TOR'
                assert league.trades.get_trade(trade.id).status is TradeStatus.PENDING
