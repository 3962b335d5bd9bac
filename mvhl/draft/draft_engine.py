"""
Turn-based entry draft engine.

The DraftEngine assigns undrafted prospects to teams in pick order:
- Exactly one slot is current while the draft is active
- Only the team owning the current slot may pick
- Each slot has a countdown; on expiry the slot is moved to the end of its
  round once, and forfeited if it expires again
- A successful pick promotes the prospect to a Player on the picking team,
  records a transaction and advances the draft

Lifecycle: NOT_STARTED → ACTIVE ⇄ PAUSED, ACTIVE → COMPLETED.

pick() and the advance that follows it run under one lock, so two
near-simultaneous submissions can never both pass the turn check.
"""

import logging
import math
import threading
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from .. import config
from ..league.errors import (
    AlreadyDraftedError,
    InvalidStateError,
    NotFoundError,
    NotYourTurnError,
)
from ..league.league_state import Player, utc_now
from ..league.roster_store import RosterStore
from ..transactions.transaction_event import TransactionType
from ..transactions.transaction_log import TransactionLog
from .draft_models import DraftPhase, DraftPick, DraftProspect, DraftSettings
from .draft_order import build_draft_order

logger = logging.getLogger(__name__)

DraftListener = Callable[[DraftSettings], None]


class DraftEngine:
    """Runs one season's entry draft."""

    def __init__(
        self,
        store: RosterStore,
        log: TransactionLog,
        prospects: Iterable[DraftProspect] = (),
        team_order: Optional[Sequence[str]] = None,
        settings: Optional[DraftSettings] = None,
        clock: Callable[[], datetime] = utc_now
    ):
        """
        Initialize the draft engine.

        Args:
            store: Roster store that drafted players are added to
            log: Transaction log for draft picks
            prospects: Prospect pool
            team_order: Round-one pick order (team ids); may also be given to start()
            settings: Draft settings for the season (defaults from config)
            clock: Callable returning the current aware datetime
        """
        self.store = store
        self.log = log
        self.settings = settings or DraftSettings()
        self.team_order: List[str] = list(team_order or [])
        self.clock = clock

        self._lock = threading.RLock()
        self._prospects: Dict[str, DraftProspect] = {}
        self._rounds: List[List[DraftPick]] = []
        self._queue: List[DraftPick] = []    # unresolved slots of the current round
        self._deadline: Optional[datetime] = None
        self._paused_remaining: Optional[float] = None
        self._listeners: List[DraftListener] = []

        for prospect in prospects:
            self.add_prospect(prospect)

    # ----- Prospects -----

    def add_prospect(self, prospect: DraftProspect) -> DraftProspect:
        with self._lock:
            if prospect.id in self._prospects:
                raise ValueError(f"Duplicate prospect_id: {prospect.id}")
            self._prospects[prospect.id] = prospect
        return prospect

    def get_prospect(self, prospect_id: str) -> DraftProspect:
        prospect = self._prospects.get(prospect_id)
        if prospect is None:
            raise NotFoundError(f"Prospect {prospect_id} not found")
        return prospect

    def list_prospects(self) -> List[DraftProspect]:
        return sorted(self._prospects.values(), key=_rank_key)

    def available_prospects(self) -> List[DraftProspect]:
        """Undrafted prospects by draft rank; the ranking is advisory only."""
        return [p for p in self.list_prospects() if not p.is_drafted]

    # ----- Notifications -----

    def subscribe(self, listener: DraftListener) -> None:
        """Register a callback that receives each updated DraftSettings."""
        self._listeners.append(listener)

    def _emit(self) -> None:
        snapshot = replace(self.settings)
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception as e:
                logger.error(f"Draft listener failed: {e}", exc_info=True)

    # ----- Lifecycle -----

    def start(
        self,
        settings: Optional[DraftSettings] = None,
        team_order: Optional[Sequence[str]] = None
    ) -> DraftSettings:
        """
        Start the draft.

        Args:
            settings: Optional replacement settings for this season
            team_order: Optional round-one pick order

        Raises:
            InvalidStateError: If the draft has already been started
            NotFoundError: If the order names an unknown team
            ValueError: If no pick order is available
        """
        with self._lock:
            if self.settings.phase is not DraftPhase.NOT_STARTED:
                raise InvalidStateError("The draft has already been started")

            if settings is not None and settings.phase is not DraftPhase.NOT_STARTED:
                raise InvalidStateError("New draft settings must not be started")
            s = settings or self.settings
            order = list(team_order) if team_order is not None else list(self.team_order)
            if not order:
                raise ValueError("A draft order is required to start the draft")
            for team_id in order:
                self.store.get_team(team_id)

            rounds = build_draft_order(
                order,
                s.total_rounds,
                style=s.order_style,
                pick_time_limit=s.pick_time_limit
            )

            # Validated; commit the new setup
            self.settings = s
            self.team_order = order
            self._rounds = rounds
            if s.picks_per_round != len(order):
                logger.info(
                    f"picks_per_round {s.picks_per_round} → {len(order)} "
                    f"to match the draft order"
                )
                s.picks_per_round = len(order)

            now = self.clock()
            s.phase = DraftPhase.ACTIVE
            s.current_round = 1
            s.current_pick = 1
            s.start_time = now
            s.updated_at = now
            self._queue = list(self._rounds[0])
            self._arm_timer(now)

        logger.info(
            f"Draft started: {s.total_rounds} rounds × {s.picks_per_round} picks, "
            f"{s.order_style.value} order, {s.pick_time_limit}s per pick"
        )
        self._emit()
        return self.settings

    def pause(self) -> DraftSettings:
        with self._lock:
            if self.settings.phase is not DraftPhase.ACTIVE:
                raise InvalidStateError("Only an active draft can be paused")
            now = self.clock()
            self._paused_remaining = max(0.0, (self._deadline - now).total_seconds())
            self._deadline = None
            self.settings.phase = DraftPhase.PAUSED
            self.settings.updated_at = now

        logger.info(f"Draft paused with {self._paused_remaining:.0f}s left on the clock")
        self._emit()
        return self.settings

    def resume(self) -> DraftSettings:
        with self._lock:
            if self.settings.phase is not DraftPhase.PAUSED:
                raise InvalidStateError("Only a paused draft can be resumed")
            now = self.clock()
            self._deadline = now + timedelta(seconds=self._paused_remaining)
            self._paused_remaining = None
            self.settings.phase = DraftPhase.ACTIVE
            self.settings.updated_at = now

        logger.info("Draft resumed")
        self._emit()
        return self.settings

    def reset(self) -> DraftSettings:
        """
        Return the draft to NOT_STARTED.

        Raises:
            InvalidStateError: If any pick has already been made
        """
        with self._lock:
            if any(slot.is_selected for rnd in self._rounds for slot in rnd):
                raise InvalidStateError("The draft cannot be reset after picks have been made")

            self._rounds = []
            self._queue = []
            self._deadline = None
            self._paused_remaining = None
            s = self.settings
            s.phase = DraftPhase.NOT_STARTED
            s.current_round = 1
            s.current_pick = 1
            s.start_time = None
            s.updated_at = self.clock()

        logger.info("Draft reset")
        self._emit()
        return self.settings

    # ----- Picking -----

    def current_slot(self) -> Optional[DraftPick]:
        with self._lock:
            if self.settings.phase in (DraftPhase.ACTIVE, DraftPhase.PAUSED) and self._queue:
                return self._queue[0]
            return None

    def pick(self, team_id: str, prospect_id: str) -> Tuple[DraftPick, Player]:
        """
        Draft a prospect for the team on the clock.

        Returns:
            (filled DraftPick, newly created Player)

        Raises:
            InvalidStateError: If the draft is not active
            NotFoundError: Unknown team or prospect
            NotYourTurnError: If team_id does not own the current slot
            AlreadyDraftedError: If the prospect was already drafted
        """
        with self._lock:
            if self.settings.phase is not DraftPhase.ACTIVE:
                raise InvalidStateError("The draft is not active")

            self.store.get_team(team_id)
            prospect = self.get_prospect(prospect_id)
            slot = self._queue[0]

            if slot.team_id != team_id:
                raise NotYourTurnError()
            if prospect.is_drafted:
                raise AlreadyDraftedError(f"{prospect.name} has already been drafted")

            now = self.clock()
            draft_round = self.settings.current_round

            player = self.store.add_player(prospect.to_player())
            self.store.assign(player.id, team_id, expected_team_id=None)
            prospect.mark_drafted(team_id, draft_round, slot.pick_number)

            slot.player_id = player.id
            slot.player_name = player.name
            slot.is_selected = True
            slot.selected_at = now
            slot.time_remaining = self._seconds_left(now)

            self.log.record(
                TransactionType.DRAFT,
                team_ids=[team_id],
                player_ids=[player.id],
                description=(
                    f"{player.name} ({player.position.value}) drafted by {team_id} "
                    f"- round {draft_round}, pick {slot.pick_number}"
                ),
                reference_id=str(slot.pick_number),
                timestamp=now,
            )

            self._advance_locked(now)

        logger.info(f"Pick {slot.pick_number}: {player.name} → {team_id}")
        self._emit()
        return slot, player

    def advance(self) -> DraftSettings:
        """
        Move past the current slot; an unfilled slot is forfeited.

        Raises:
            InvalidStateError: If the draft is not active
        """
        with self._lock:
            if self.settings.phase is not DraftPhase.ACTIVE:
                raise InvalidStateError("The draft is not active")
            slot = self._queue[0]
            if not slot.is_selected:
                slot.forfeited = True
                slot.time_remaining = 0
                logger.info(f"Pick {slot.pick_number} ({slot.team_id}) forfeited by advance")
            self._advance_locked(self.clock())

        self._emit()
        return self.settings

    # ----- Timer -----

    def time_remaining(self, now: Optional[datetime] = None) -> int:
        """Whole seconds left for the current slot."""
        with self._lock:
            phase = self.settings.phase
            if phase is DraftPhase.PAUSED:
                return int(math.ceil(self._paused_remaining or 0))
            if phase is not DraftPhase.ACTIVE:
                return 0
            return self._seconds_left(now or self.clock())

    def tick(self, now: Optional[datetime] = None) -> bool:
        """
        Refresh the countdown and handle expiry. Called by the league clock.

        Returns:
            True if the current slot expired and was requeued or forfeited
        """
        with self._lock:
            slot = self.current_slot()
            if slot is None or self.settings.phase is not DraftPhase.ACTIVE:
                return False
            now = now or self.clock()
            slot.time_remaining = self._seconds_left(now)
            if slot.time_remaining > 0:
                return False
            return self.on_timer_expire(slot.pick_number, now)

    def on_timer_expire(self, pick_number: Optional[int] = None, now: Optional[datetime] = None) -> bool:
        """
        Handle an expired pick clock.

        Idempotent: if the draft is not active, the slot has changed since the
        timer was armed, or the deadline has not passed, nothing happens.

        Args:
            pick_number: Slot the timer was armed for (None = whatever is current)
            now: Firing time

        Returns:
            True if the slot was requeued or forfeited
        """
        with self._lock:
            slot = self.current_slot()
            if slot is None or self.settings.phase is not DraftPhase.ACTIVE:
                logger.debug("Pick timer fired with no active draft; ignoring")
                return False
            if pick_number is not None and slot.pick_number != pick_number:
                logger.debug(f"Pick timer for {pick_number} fired after it was resolved; ignoring")
                return False
            now = now or self.clock()
            if self._deadline is None or now < self._deadline:
                logger.debug(f"Pick timer for {slot.pick_number} fired early; ignoring")
                return False

            if slot.requeued < config.DRAFT_MAX_REQUEUES:
                slot.requeued += 1
                self._queue.pop(0)
                self._queue.append(slot)
                slot.time_remaining = self.settings.pick_time_limit
                self._point_at_current_slot()
                self._arm_timer(now)
                self.settings.updated_at = now
                logger.info(
                    f"Pick {slot.pick_number} ({slot.team_id}) timed out; "
                    f"moved to the end of round {slot.round}"
                )
            else:
                slot.forfeited = True
                slot.time_remaining = 0
                logger.info(f"Pick {slot.pick_number} ({slot.team_id}) timed out again; forfeited")
                self._advance_locked(now)

        self._emit()
        return True

    # ----- Views -----

    def get_settings(self) -> DraftSettings:
        with self._lock:
            slot = self.current_slot()
            if slot is not None:
                slot.time_remaining = self.time_remaining()
            return self.settings

    def list_picks(self) -> List[DraftPick]:
        with self._lock:
            picks = [slot for rnd in self._rounds for slot in rnd]
        return sorted(picks, key=lambda p: p.pick_number)

    def picks_made(self) -> int:
        with self._lock:
            return sum(1 for rnd in self._rounds for slot in rnd if slot.is_selected)

    # ----- Internal -----

    def _advance_locked(self, now: datetime) -> None:
        """Resolve the current slot and move to the next one. Caller holds the lock."""
        s = self.settings
        if self._queue:
            self._queue.pop(0)

        if not self._queue:
            if s.current_round >= s.total_rounds:
                s.phase = DraftPhase.COMPLETED
                s.current_pick = s.picks_per_round
                s.updated_at = now
                self._deadline = None
                logger.info(f"Draft completed: {self.picks_made()} picks made")
                return
            s.current_round += 1
            self._queue = [slot for slot in self._rounds[s.current_round - 1] if not slot.is_resolved]

        self._point_at_current_slot()
        s.updated_at = now
        self._arm_timer(now)

    def _point_at_current_slot(self) -> None:
        """Set current_pick to the in-round position of the slot on the clock."""
        s = self.settings
        s.current_pick = self._queue[0].pick_number - (s.current_round - 1) * s.picks_per_round

    def _arm_timer(self, now: datetime) -> None:
        self._deadline = now + timedelta(seconds=self.settings.pick_time_limit)

    def _seconds_left(self, now: datetime) -> int:
        if self._deadline is None:
            return 0
        return max(0, int(math.ceil((self._deadline - now).total_seconds())))


def _rank_key(prospect: DraftProspect):
    # Unranked prospects sort after ranked ones
    rank = prospect.draft_rank if prospect.draft_rank is not None else float('inf')
    return (rank, prospect.name, prospect.id)
