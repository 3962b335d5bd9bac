"""
Priority-ordered waiver claims.

A waived player leaves his team immediately and sits on waivers until the next
daily processing time. Teams claim during the window; the claimant with the
best (numerically lowest) waiver priority leads. At processing the leader is
awarded the player and drops to the back of the priority order. With no
claimants the player stays a free agent.

Initial priority comes from the standings: fewest points first, then fewer
wins, then team id.
"""

import logging
import threading
import uuid
from datetime import datetime, time, timedelta, timezone
from typing import Callable, Dict, List, Optional, Tuple
from zoneinfo import ZoneInfo

from .. import config
from ..league.errors import (
    InvalidOwnershipError,
    InvalidStateError,
    NotFoundError,
    NotPermittedError,
    OwnershipConflictError,
    WindowClosedError,
)
from ..league.league_state import utc_now
from ..league.roster_store import RosterStore
from ..league.standings_calculator import waiver_priority_order
from .transaction_event import ClaimStatus, TransactionType, WaiverClaim
from .transaction_log import TransactionLog

logger = logging.getLogger(__name__)


class WaiverEngine:
    """Runs waiver windows, claims and priority order."""

    def __init__(
        self,
        store: RosterStore,
        log: TransactionLog,
        clock: Callable[[], datetime] = utc_now,
        process_hour: int = config.WAIVER_PROCESS_HOUR,
        process_minute: int = config.WAIVER_PROCESS_MINUTE,
        timezone_name: str = config.WAIVER_TIMEZONE
    ):
        """
        Initialize the waiver engine.

        Args:
            store: Roster store
            log: Transaction log for waiver moves
            clock: Callable returning the current aware datetime
            process_hour: Local hour at which claims are processed daily
            process_minute: Local minute at which claims are processed
            timezone_name: IANA timezone of the processing time
        """
        self.store = store
        self.log = log
        self.clock = clock
        self.process_time = time(process_hour, process_minute)
        self.tz = ZoneInfo(timezone_name)

        self._lock = threading.RLock()
        self._priorities: Dict[str, int] = {}
        self._claims: Dict[str, WaiverClaim] = {}

    # ----- Priority -----

    def initialize_priorities(self) -> List[Tuple[str, int]]:
        """Set priority from current standings, worst record first."""
        with self._lock:
            order = waiver_priority_order(self.store.list_teams())
            self._priorities = {team_id: i for i, team_id in enumerate(order, 1)}
        logger.info(f"Waiver priority initialized for {len(order)} teams")
        return self.priority_order()

    def priority_of(self, team_id: str) -> int:
        with self._lock:
            self.store.get_team(team_id)
            if not self._priorities:
                self.initialize_priorities()
            if team_id not in self._priorities:
                # Teams added after initialization start at the back
                self._priorities[team_id] = len(self._priorities) + 1
            return self._priorities[team_id]

    def priority_order(self) -> List[Tuple[str, int]]:
        """(team_id, priority) pairs, first claim first."""
        with self._lock:
            return sorted(self._priorities.items(), key=lambda item: item[1])

    def _demote(self, team_id: str) -> None:
        old = self._priorities[team_id]
        for other, priority in self._priorities.items():
            if priority > old:
                self._priorities[other] = priority - 1
        self._priorities[team_id] = len(self._priorities)
        logger.info(f"{team_id} waiver priority {old} → {self._priorities[team_id]}")

    # ----- Processing schedule -----

    def next_process_date(self, after: datetime) -> datetime:
        """Next daily processing time strictly after the given moment, in UTC."""
        local = after.astimezone(self.tz)
        candidate = datetime.combine(local.date(), self.process_time, tzinfo=self.tz)
        if candidate <= local:
            candidate = datetime.combine(
                local.date() + timedelta(days=1), self.process_time, tzinfo=self.tz
            )
        return candidate.astimezone(timezone.utc)

    # ----- Operations -----

    def waive(self, player_id: str, dropping_team_id: str) -> WaiverClaim:
        """
        Place a player on waivers and open the claim window.

        Raises:
            NotFoundError: Unknown player or team
            InvalidOwnershipError: Player is not on the dropping team
        """
        with self._lock:
            self.store.get_team(dropping_team_id)
            player = self.store.get_player(player_id)
            if player.team_id != dropping_team_id:
                raise InvalidOwnershipError(f"{player.name} is not on {dropping_team_id}'s roster")

            self.store.assign(player_id, None, expected_team_id=dropping_team_id)

            now = self.clock()
            claim = WaiverClaim(
                id=str(uuid.uuid4()),
                player_id=player_id,
                dropping_team_id=dropping_team_id,
                submitted_at=now,
                process_date=self.next_process_date(now),
            )
            self._claims[claim.id] = claim

            self.log.record(
                TransactionType.WAIVER,
                team_ids=[dropping_team_id],
                player_ids=[player_id],
                description=f"{player.name} placed on waivers by {dropping_team_id}",
                reference_id=claim.id,
                timestamp=now,
            )

        logger.info(
            f"{player.name} waived by {dropping_team_id}; "
            f"claims process at {claim.process_date.isoformat()}"
        )
        return claim

    def claim(self, player_id: str, claiming_team_id: str) -> WaiverClaim:
        """
        Submit a claim for a waived player.

        The claiming team becomes the leader only if it has better priority
        than the current leader, or if there is no leader yet.

        Raises:
            NotFoundError: Unknown team
            WindowClosedError: Player has no open waiver window
            NotPermittedError: The dropping team claims its own player
        """
        with self._lock:
            self.store.get_team(claiming_team_id)
            claim = self.active_claim_for(player_id)
            now = self.clock()
            if claim is None or now >= claim.process_date:
                raise WindowClosedError()
            if claiming_team_id == claim.dropping_team_id:
                raise NotPermittedError("A team cannot claim a player it placed on waivers")

            if claiming_team_id not in claim.claimants:
                claim.claimants[claiming_team_id] = now

            priority = self.priority_of(claiming_team_id)
            leader = claim.claiming_team_id
            if leader is None or priority < self.priority_of(leader):
                claim.claiming_team_id = claiming_team_id
                claim.waiver_priority = priority

        logger.info(
            f"{claiming_team_id} (priority {priority}) claimed {player_id}; "
            f"leader is {claim.claiming_team_id}"
        )
        return claim

    def cancel(self, claim_id: str, team_id: str) -> WaiverClaim:
        """
        Withdraw from a waiver window.

        A claimant cancelling removes only its own claim; the best remaining
        claimant becomes the leader. The dropping team cancelling withdraws the
        whole window and the player returns to its roster.

        Raises:
            NotFoundError: Unknown claim
            InvalidStateError: Claim is no longer active
            NotPermittedError: team_id is neither a claimant nor the dropping team
        """
        with self._lock:
            claim = self.get_claim(claim_id)
            if not claim.is_active:
                raise InvalidStateError(f"This waiver claim is already {claim.status.value}")

            if team_id in claim.claimants:
                del claim.claimants[team_id]
                leader = self._best_claimant(claim)
                claim.claiming_team_id = leader
                claim.waiver_priority = self.priority_of(leader) if leader else None
                logger.info(f"{team_id} withdrew its claim on {claim.player_id}; leader is {leader}")
                return claim

            if team_id != claim.dropping_team_id:
                raise NotPermittedError("Only the claiming team can cancel this claim")

            player = self.store.assign(claim.player_id, team_id, expected_team_id=None)
            now = self.clock()
            claim.status = ClaimStatus.CANCELLED
            claim.claiming_team_id = None
            claim.waiver_priority = None
            claim.processed_at = now

            self.log.record(
                TransactionType.WAIVER,
                team_ids=[team_id],
                player_ids=[claim.player_id],
                description=f"{player.name} recalled from waivers by {team_id}",
                reference_id=claim.id,
                timestamp=now,
            )

        logger.info(f"Waivers on {player.name} cancelled by {team_id}")
        return claim

    def process(self, player_id: str) -> WaiverClaim:
        """
        Resolve the most recent waiver window for a player.

        Awards the player to the leading claimant (re-evaluated against current
        priority) and moves that team to the back of the order, or expires the
        window when nobody claimed. Processing an already-resolved window
        returns it unchanged.

        Raises:
            NotFoundError: The player was never placed on waivers
        """
        with self._lock:
            claim = self.active_claim_for(player_id) or self.latest_claim_for(player_id)
            if claim is None:
                raise NotFoundError(f"Player {player_id} has no waiver history")
            if not claim.is_active:
                logger.debug(f"Waiver claim {claim.id} already {claim.status.value}; nothing to do")
                return claim

            now = self.clock()
            leader = self._best_claimant(claim)
            claim.processed_at = now

            if leader is None:
                claim.status = ClaimStatus.EXPIRED
                logger.info(f"No claims for {player_id}; player clears waivers")
                return claim

            try:
                player = self.store.assign(player_id, leader, expected_team_id=None)
            except OwnershipConflictError:
                claim.status = ClaimStatus.EXPIRED
                logger.warning(f"{player_id} left waivers before processing; claim expired")
                return claim

            claim.status = ClaimStatus.AWARDED
            claim.claiming_team_id = leader
            claim.waiver_priority = self._priorities[leader]
            self._demote(leader)

            self.log.record(
                TransactionType.WAIVER,
                team_ids=[leader, claim.dropping_team_id],
                player_ids=[player_id],
                description=f"{player.name} claimed off waivers by {leader}",
                reference_id=claim.id,
                timestamp=now,
            )

        logger.info(f"{player.name} awarded to {leader}")
        return claim

    def process_due(self, now: Optional[datetime] = None) -> List[WaiverClaim]:
        """Process every active window whose processing time has arrived."""
        now = now or self.clock()
        with self._lock:
            due = sorted(
                (c for c in self._claims.values() if c.is_active and c.process_date <= now),
                key=lambda c: (c.process_date, c.submitted_at)
            )
            processed = [self.process(c.player_id) for c in due]

        if processed:
            logger.info(f"Processed {len(processed)} waiver claim(s)")
        return processed

    # ----- Views -----

    def get_claim(self, claim_id: str) -> WaiverClaim:
        claim = self._claims.get(claim_id)
        if claim is None:
            raise NotFoundError(f"Waiver claim {claim_id} not found")
        return claim

    def active_claim_for(self, player_id: str) -> Optional[WaiverClaim]:
        with self._lock:
            for claim in self._claims.values():
                if claim.player_id == player_id and claim.is_active:
                    return claim
        return None

    def latest_claim_for(self, player_id: str) -> Optional[WaiverClaim]:
        with self._lock:
            claims = [c for c in self._claims.values() if c.player_id == player_id]
        if not claims:
            return None
        # Stable sort: among equal timestamps the later waiver wins
        return sorted(claims, key=lambda c: c.submitted_at)[-1]

    def list_claims(
        self,
        team_id: Optional[str] = None,
        status: Optional[ClaimStatus] = None
    ) -> List[WaiverClaim]:
        """Claims newest first, optionally filtered by involved team and status."""
        if status is not None:
            status = ClaimStatus(status)
        with self._lock:
            claims = [
                c for c in self._claims.values()
                if (team_id is None or team_id == c.dropping_team_id or team_id in c.claimants)
                and (status is None or c.status is status)
            ]
        return sorted(claims, key=lambda c: c.submitted_at, reverse=True)

    def _best_claimant(self, claim: WaiverClaim) -> Optional[str]:
        if not claim.claimants:
            return None
        return min(claim.claimants, key=lambda t: (self.priority_of(t), claim.claimants[t]))
