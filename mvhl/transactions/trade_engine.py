"""
Bilateral trade proposals.

A trade moves players between two rosters only on mutual consent:
- propose() validates current ownership of every player
- accept() re-validates ownership and swaps all players in one
  all-or-nothing RosterStore.assign_many() call
- reject() and cancel() close the proposal without roster effect

Pending → Accepted | Rejected | Cancelled; all three are terminal.
"""

import logging
import threading
import uuid
from datetime import datetime
from typing import Callable, Dict, List, Optional, Sequence

from ..league.errors import (
    InvalidOwnershipError,
    InvalidStateError,
    NotFoundError,
    NotPermittedError,
    OwnershipConflictError,
    StaleTradeError,
)
from ..league.league_state import utc_now
from ..league.roster_store import RosterStore
from .transaction_event import Trade, TradeStatus, TransactionType
from .transaction_log import TransactionLog

logger = logging.getLogger(__name__)


class TradeEngine:
    """Creates and resolves trades between two teams."""

    def __init__(
        self,
        store: RosterStore,
        log: TransactionLog,
        clock: Callable[[], datetime] = utc_now
    ):
        self.store = store
        self.log = log
        self.clock = clock
        self._lock = threading.RLock()
        self._trades: Dict[str, Trade] = {}

    def propose(
        self,
        from_team_id: str,
        to_team_id: str,
        offered: Sequence[str],
        wanted: Sequence[str]
    ) -> Trade:
        """
        Create a pending trade.

        Args:
            from_team_id: Proposing team
            to_team_id: Receiving team
            offered: Player ids currently on from_team_id
            wanted: Player ids currently on to_team_id

        Raises:
            NotFoundError: Unknown team or player
            InvalidOwnershipError: A player is not on the expected roster
            ValueError: Same team on both sides, empty or overlapping player sets
        """
        if from_team_id == to_team_id:
            raise ValueError("A team cannot trade with itself")
        if not offered and not wanted:
            raise ValueError("A trade must include at least one player")

        offered = tuple(dict.fromkeys(offered))
        wanted = tuple(dict.fromkeys(wanted))
        if set(offered) & set(wanted):
            raise ValueError("A player cannot be both offered and wanted")

        with self.store.lock:
            self.store.get_team(from_team_id)
            self.store.get_team(to_team_id)
            self._check_ownership(offered, from_team_id, InvalidOwnershipError)
            self._check_ownership(wanted, to_team_id, InvalidOwnershipError)

        trade = Trade(
            id=str(uuid.uuid4()),
            from_team_id=from_team_id,
            to_team_id=to_team_id,
            players_offered=offered,
            players_wanted=wanted,
            created_at=self.clock(),
        )
        with self._lock:
            self._trades[trade.id] = trade

        logger.info(
            f"Trade {trade.id} proposed: {from_team_id} offers {list(offered)} "
            f"to {to_team_id} for {list(wanted)}"
        )
        return trade

    def accept(self, trade_id: str, acting_team_id: Optional[str] = None) -> Trade:
        """
        Accept a pending trade and swap the players.

        Args:
            trade_id: Trade to accept
            acting_team_id: If given, must be the receiving team

        Raises:
            NotFoundError: Unknown trade
            InvalidStateError: Trade is no longer pending
            NotPermittedError: acting_team_id is not the receiving team
            StaleTradeError: A player moved since the proposal; nothing changes
        """
        with self._lock:
            trade = self._get_pending(trade_id, acting_team_id, team_field='to_team_id')

            moves = (
                [(pid, trade.to_team_id, trade.from_team_id) for pid in trade.players_offered]
                + [(pid, trade.from_team_id, trade.to_team_id) for pid in trade.players_wanted]
            )
            with self.store.lock:
                self._check_ownership(trade.players_offered, trade.from_team_id, StaleTradeError)
                self._check_ownership(trade.players_wanted, trade.to_team_id, StaleTradeError)
                try:
                    self.store.assign_many(moves)
                except OwnershipConflictError as e:
                    raise StaleTradeError() from e

            now = self.clock()
            trade.status = TradeStatus.ACCEPTED
            trade.resolved_at = now

            self.log.record(
                TransactionType.TRADE,
                team_ids=[trade.from_team_id, trade.to_team_id],
                player_ids=list(trade.players_offered) + list(trade.players_wanted),
                description=(
                    f"{trade.from_team_id} traded {list(trade.players_offered)} to "
                    f"{trade.to_team_id} for {list(trade.players_wanted)}"
                ),
                reference_id=trade.id,
                timestamp=now,
            )

        logger.info(f"Trade {trade.id} accepted")
        return trade

    def reject(self, trade_id: str, acting_team_id: Optional[str] = None) -> Trade:
        """
        Reject a pending trade. No roster effect.

        Raises:
            NotFoundError: Unknown trade
            InvalidStateError: Trade is no longer pending
            NotPermittedError: acting_team_id is not the receiving team
        """
        with self._lock:
            trade = self._get_pending(trade_id, acting_team_id, team_field='to_team_id')
            trade.status = TradeStatus.REJECTED
            trade.resolved_at = self.clock()

        logger.info(f"Trade {trade.id} rejected")
        return trade

    def cancel(self, trade_id: str, acting_team_id: str) -> Trade:
        """
        Withdraw a pending trade; only the proposing team may cancel.

        Raises:
            NotFoundError: Unknown trade
            InvalidStateError: Trade is no longer pending
            NotPermittedError: acting_team_id is not the proposing team
        """
        with self._lock:
            trade = self._get_pending(trade_id, acting_team_id, team_field='from_team_id')
            trade.status = TradeStatus.CANCELLED
            trade.resolved_at = self.clock()

        logger.info(f"Trade {trade.id} cancelled by {acting_team_id}")
        return trade

    def get_trade(self, trade_id: str) -> Trade:
        trade = self._trades.get(trade_id)
        if trade is None:
            raise NotFoundError(f"Trade {trade_id} not found")
        return trade

    def list_trades(
        self,
        team_id: Optional[str] = None,
        status: Optional[TradeStatus] = None
    ) -> List[Trade]:
        """Trades newest first, optionally filtered by team and status."""
        if status is not None:
            status = TradeStatus(status)
        with self._lock:
            trades = [
                t for t in self._trades.values()
                if (team_id is None or t.involves_team(team_id))
                and (status is None or t.status is status)
            ]
        return sorted(trades, key=lambda t: t.created_at, reverse=True)

    def _get_pending(self, trade_id: str, acting_team_id: Optional[str], team_field: str) -> Trade:
        trade = self.get_trade(trade_id)
        if not trade.is_pending:
            raise InvalidStateError(f"This trade has already been {trade.status.value}")
        if acting_team_id is not None and getattr(trade, team_field) != acting_team_id:
            raise NotPermittedError()
        return trade

    def _check_ownership(self, player_ids: Sequence[str], team_id: str, error_cls) -> None:
        for player_id in player_ids:
            player = self.store.get_player(player_id)
            if player.team_id != team_id:
                if issubclass(error_cls, StaleTradeError):
                    raise error_cls()
                raise error_cls(f"{player.name} is not on {team_id}'s roster")
