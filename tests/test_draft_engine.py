"""Tests for the entry draft engine and draft order."""

import threading

import pytest

from mvhl.draft.draft_models import DraftOrderStyle, DraftPhase, DraftProspect, DraftSettings
from mvhl.draft.draft_order import build_draft_order
from mvhl.league.errors import (
    AlreadyDraftedError,
    InvalidStateError,
    NotFoundError,
    NotYourTurnError,
)
from mvhl.transactions.transaction_event import TransactionType

ORDER = ['MTL', 'NYR', 'TOR', 'BOS']


@pytest.fixture
def draft(league):
    return league.draft


@pytest.fixture
def started(draft):
    draft.start(team_order=ORDER)
    return draft


class TestDraftOrder:
    """Tests for straight and snake slot generation."""

    def test_straight_order_repeats(self):
        rounds = build_draft_order(['A', 'B', 'C'], 2)
        assert [p.team_id for p in rounds[1]] == ['A', 'B', 'C']
        assert [p.pick_number for p in rounds[1]] == [4, 5, 6]

    def test_snake_order_reverses_even_rounds(self):
        rounds = build_draft_order(['A', 'B', 'C'], 3, style=DraftOrderStyle.SNAKE)
        assert [p.team_id for p in rounds[0]] == ['A', 'B', 'C']
        assert [p.team_id for p in rounds[1]] == ['C', 'B', 'A']
        assert [p.team_id for p in rounds[2]] == ['A', 'B', 'C']
        assert [p.pick_number for p in rounds[1]] == [4, 5, 6]

    def test_invalid_orders_rejected(self):
        with pytest.raises(ValueError):
            build_draft_order([], 2)
        with pytest.raises(ValueError):
            build_draft_order(['A', 'A'], 2)


class TestDraftModels:
    """Tests for prospect and settings validation."""

    def test_rating_out_of_range(self):
        with pytest.raises(ValueError):
            DraftProspect(id='x', name='X', position='C', age=18, ratings={'overall': 11})

    def test_unknown_rating(self):
        with pytest.raises(ValueError):
            DraftProspect(id='x', name='X', position='C', age=18, ratings={'charisma': 5})

    def test_settings_require_positive_values(self):
        with pytest.raises(ValueError):
            DraftSettings(pick_time_limit=0)


class TestDraftLifecycle:
    """Tests for start, pause, resume and reset."""

    def test_start(self, started):
        settings = started.get_settings()
        assert settings.phase is DraftPhase.ACTIVE
        assert settings.is_active
        assert settings.current_round == 1
        assert settings.current_pick == 1
        assert started.current_slot().team_id == 'MTL'
        assert started.time_remaining() == 60

    def test_start_twice_fails(self, started):
        with pytest.raises(InvalidStateError):
            started.start(team_order=ORDER)

    def test_start_requires_order(self, draft):
        with pytest.raises(ValueError):
            draft.start()

    def test_start_rejects_unknown_team(self, draft):
        with pytest.raises(NotFoundError):
            draft.start(team_order=['MTL', 'XXX'])

    def test_failed_start_keeps_previous_setup(self, draft):
        before = draft.get_settings()
        with pytest.raises(NotFoundError):
            draft.start(settings=DraftSettings(pick_time_limit=10, total_rounds=7),
                        team_order=['MTL', 'XXX'])

        assert draft.get_settings() is before
        assert before.pick_time_limit == 60
        assert before.phase is DraftPhase.NOT_STARTED
        with pytest.raises(ValueError):
            draft.start()

        draft.start(team_order=ORDER)
        assert len(draft.list_picks()) == 8

    def test_pick_before_start_fails(self, draft):
        with pytest.raises(InvalidStateError):
            draft.pick('MTL', 'P01')

    def test_pause_freezes_countdown(self, started, clock):
        clock.advance(20)
        started.pause()
        assert started.get_settings().phase is DraftPhase.PAUSED

        clock.advance(300)
        assert started.time_remaining() == 40
        assert started.tick() is False

        started.resume()
        assert started.time_remaining() == 40
        clock.advance(39)
        assert started.tick() is False
        assert started.current_slot().pick_number == 1

    def test_pick_while_paused_fails(self, started):
        started.pause()
        with pytest.raises(InvalidStateError):
            started.pick('MTL', 'P01')

    def test_pause_and_resume_require_matching_phase(self, draft, started):
        with pytest.raises(InvalidStateError):
            started.resume()
        started.pause()
        with pytest.raises(InvalidStateError):
            started.pause()

    def test_reset_before_any_pick(self, started):
        started.reset()
        assert started.get_settings().phase is DraftPhase.NOT_STARTED
        assert started.current_slot() is None
        started.start(team_order=ORDER)
        assert started.current_slot().team_id == 'MTL'

    def test_reset_after_pick_fails(self, started):
        started.pick('MTL', 'P01')
        with pytest.raises(InvalidStateError):
            started.reset()


class TestDraftPicks:
    """Tests for the turn invariant and prospect promotion."""

    def test_pick_promotes_prospect(self, started, store, league):
        slot, player = started.pick('MTL', 'P01')

        assert slot.is_selected
        assert slot.player_id == 'P01'
        assert player.team_id == 'MTL'
        assert store.owner_of('P01') == 'MTL'

        prospect = started.get_prospect('P01')
        assert prospect.is_drafted
        assert (prospect.drafted_by, prospect.draft_round, prospect.draft_pick) == ('MTL', 1, 1)

        entries = league.log.query(type=TransactionType.DRAFT)
        assert len(entries) == 1
        assert entries[0].team_ids == ('MTL',)
        assert entries[0].player_ids == ('P01',)

    def test_pick_advances_turn(self, started):
        started.pick('MTL', 'P01')
        settings = started.get_settings()
        assert settings.current_pick == 2
        assert started.current_slot().team_id == 'NYR'

    def test_wrong_team_cannot_pick(self, started, store):
        with pytest.raises(NotYourTurnError) as exc_info:
            started.pick('BOS', 'P01')
        assert exc_info.value.message == "It is not your turn to pick"
        assert not started.get_prospect('P01').is_drafted
        assert store.list_players(free_agents_only=True) == []

    def test_every_out_of_turn_pick_fails(self, started):
        for team_id in ['NYR', 'TOR', 'BOS']:
            with pytest.raises(NotYourTurnError):
                started.pick(team_id, 'P05')
        started.pick('MTL', 'P05')
        for team_id in ['MTL', 'TOR', 'BOS']:
            with pytest.raises(NotYourTurnError):
                started.pick(team_id, 'P06')

    def test_prospect_drafted_once(self, started):
        started.pick('MTL', 'P01')
        with pytest.raises(AlreadyDraftedError):
            started.pick('NYR', 'P01')
        assert started.current_slot().team_id == 'NYR'

    def test_unknown_prospect(self, started):
        with pytest.raises(NotFoundError):
            started.pick('MTL', 'NOPE')

    def test_draft_completes_after_all_picks(self, started):
        prospects = iter(['P01', 'P02', 'P03', 'P04', 'P05', 'P06', 'P07', 'P08'])
        for _round in range(2):
            for team_id in ORDER:
                started.pick(team_id, next(prospects))

        settings = started.get_settings()
        assert settings.phase is DraftPhase.COMPLETED
        assert not settings.is_active
        assert started.picks_made() == 8
        assert started.current_slot() is None
        with pytest.raises(InvalidStateError):
            started.pick('MTL', 'P09')

    def test_snake_second_round_starts_with_last_team(self, draft):
        draft.start(
            settings=DraftSettings(pick_time_limit=60, total_rounds=2, order_style='snake'),
            team_order=ORDER
        )
        for team_id, prospect_id in zip(ORDER, ['P01', 'P02', 'P03', 'P04']):
            draft.pick(team_id, prospect_id)

        settings = draft.get_settings()
        assert settings.current_round == 2
        assert settings.current_pick == 1
        assert draft.current_slot().team_id == 'BOS'
        assert draft.current_slot().pick_number == 5

    def test_picks_per_round_follows_order(self, draft):
        draft.start(team_order=['MTL', 'NYR'])
        assert draft.get_settings().picks_per_round == 2
        assert len(draft.list_picks()) == 4

    def test_available_prospects_by_rank(self, started):
        started.pick('MTL', 'P02')
        available = [p.id for p in started.available_prospects()]
        assert available[0] == 'P01'
        assert 'P02' not in available
        assert available[-1] == 'PXX'


class TestDraftTimer:
    """Tests for pick-clock expiry."""

    def test_expired_slot_moves_to_end_of_round(self, started, clock):
        clock.advance(61)
        assert started.tick() is True

        slot = started.current_slot()
        assert slot.team_id == 'NYR'
        picks = started.list_picks()
        assert picks[0].requeued == 1
        assert not picks[0].forfeited

    def test_second_expiry_forfeits(self, started, clock):
        clock.advance(61)
        started.tick()
        for team_id, prospect_id in [('NYR', 'P01'), ('TOR', 'P02'), ('BOS', 'P03')]:
            started.pick(team_id, prospect_id)

        assert started.current_slot().team_id == 'MTL'
        assert started.get_settings().current_pick == 1

        clock.advance(61)
        assert started.tick() is True

        assert started.list_picks()[0].forfeited
        settings = started.get_settings()
        assert settings.current_round == 2
        assert settings.current_pick == 1
        assert started.current_slot().pick_number == 5

    def test_turn_pointer_follows_slot_on_the_clock(self, started, clock):
        clock.advance(61)
        started.tick()

        settings = started.get_settings()
        owner = {(p.round, p.pick_number - (p.round - 1) * settings.picks_per_round): p.team_id
                 for p in started.list_picks()}
        assert owner[(settings.current_round, settings.current_pick)] == 'NYR'
        assert started.current_slot().team_id == 'NYR'

        with pytest.raises(NotYourTurnError):
            started.pick('MTL', 'P01')
        started.pick('NYR', 'P01')

        settings = started.get_settings()
        assert settings.current_pick == 3
        assert owner[(settings.current_round, settings.current_pick)] == started.current_slot().team_id

    def test_requeued_team_can_still_pick(self, started, clock):
        clock.advance(61)
        started.tick()
        for team_id, prospect_id in [('NYR', 'P01'), ('TOR', 'P02'), ('BOS', 'P03')]:
            started.pick(team_id, prospect_id)
        slot, player = started.pick('MTL', 'P04')
        assert slot.pick_number == 1
        assert player.team_id == 'MTL'

    def test_early_firing_is_noop(self, started, clock):
        clock.advance(30)
        assert started.on_timer_expire(pick_number=1) is False
        assert started.current_slot().pick_number == 1

    def test_stale_firing_is_noop(self, started, clock):
        started.pick('MTL', 'P01')
        clock.advance(61)
        assert started.on_timer_expire(pick_number=1) is False
        assert started.current_slot().pick_number == 2

    def test_firing_twice_does_not_double_advance(self, started, clock):
        clock.advance(61)
        assert started.on_timer_expire(pick_number=1) is True
        assert started.on_timer_expire(pick_number=1) is False
        assert started.current_slot().pick_number == 2

    def test_firing_without_active_draft_is_noop(self, draft):
        assert draft.on_timer_expire() is False
        assert draft.tick() is False

    def test_explicit_advance_forfeits_slot(self, started):
        started.advance()
        assert started.list_picks()[0].forfeited
        assert started.current_slot().team_id == 'NYR'


class TestDraftNotifications:
    """Tests for subscriber callbacks."""

    def test_listeners_receive_snapshots(self, started):
        seen = []
        started.subscribe(seen.append)
        started.pick('MTL', 'P01')

        assert len(seen) == 1
        assert seen[0].current_pick == 2
        assert seen[0] is not started.get_settings()

    def test_failing_listener_does_not_break_pick(self, started):
        def broken(_settings):
            raise RuntimeError("socket closed")

        started.subscribe(broken)
        slot, _player = started.pick('MTL', 'P01')
        assert slot.is_selected


class TestConcurrentPicks:
    """Tests for simultaneous pick submissions."""

    def test_only_one_simultaneous_pick_lands(self, started, league):
        barrier = threading.Barrier(2)
        results = []

        def submit(prospect_id):
            barrier.wait()
            try:
                started.pick('MTL', prospect_id)
                results.append('ok')
            except NotYourTurnError:
                results.append('refused')

        threads = [threading.Thread(target=submit, args=(pid,)) for pid in ('P01', 'P02')]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=5)

        assert sorted(results) == ['ok', 'refused']
        assert started.picks_made() == 1
        assert len(league.log.query(type=TransactionType.DRAFT)) == 1
        assert started.current_slot().team_id == 'NYR'
        assert len(league.store.get_roster('MTL')) == 4
