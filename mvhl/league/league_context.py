"""
Season context.

LeagueContext owns one season's Roster Store, Transaction Log and the three
engines that write through the store. It is created at season start and passed
explicitly to the API and the background clock.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional

from ..draft.draft_engine import DraftEngine
from ..draft.draft_models import DraftProspect, DraftSettings
from ..transactions.trade_engine import TradeEngine
from ..transactions.transaction_log import TransactionLog
from ..transactions.waiver_engine import WaiverEngine
from .league_state import Player, Team, utc_now
from .roster_store import RosterStore
from .seed import build_demo_league
from .standings_calculator import calculate_standings, reverse_standings_order

logger = logging.getLogger(__name__)


class LeagueContext:
    """Everything one season needs, wired to a single store and clock."""

    def __init__(
        self,
        store: RosterStore,
        log: TransactionLog,
        prospects: Iterable[DraftProspect] = (),
        draft_settings: Optional[DraftSettings] = None,
        clock: Callable[[], datetime] = utc_now
    ):
        self.store = store
        self.log = log
        self.clock = clock
        self.draft = DraftEngine(store, log, prospects=prospects, settings=draft_settings, clock=clock)
        self.trades = TradeEngine(store, log, clock=clock)
        self.waivers = WaiverEngine(store, log, clock=clock)

    @classmethod
    def create(
        cls,
        teams: Iterable[Team] = (),
        players: Iterable[Player] = (),
        prospects: Iterable[DraftProspect] = (),
        transactions_file: Optional[Path] = None,
        draft_settings: Optional[DraftSettings] = None,
        clock: Callable[[], datetime] = utc_now
    ) -> 'LeagueContext':
        """Build a context from league data; the log is file-backed when a path is given."""
        store = RosterStore(teams=teams, players=players)
        log = TransactionLog(transactions_file)
        context = cls(store, log, prospects=prospects, draft_settings=draft_settings, clock=clock)
        logger.info(
            f"League context ready: {len(store.list_teams())} teams, "
            f"{len(store.list_players())} players, {len(context.draft.list_prospects())} prospects"
        )
        return context

    @classmethod
    def demo(
        cls,
        transactions_file: Optional[Path] = None,
        seed: int = 42,
        clock: Callable[[], datetime] = utc_now
    ) -> 'LeagueContext':
        teams, players, prospects = build_demo_league(seed=seed)
        return cls.create(teams, players, prospects, transactions_file=transactions_file, clock=clock)

    def standings(self, group_by: Optional[str] = None) -> Dict[str, List[Dict]]:
        return calculate_standings(self.store.list_teams(), group_by=group_by)

    def default_draft_order(self) -> List[str]:
        """Round-one order when none is given: worst record picks first."""
        return reverse_standings_order(self.store.list_teams())
