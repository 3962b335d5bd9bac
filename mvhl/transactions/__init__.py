"""
Roster transactions: trades, waivers and the transaction log.
"""

from .transaction_event import (
    TransactionType,
    TransactionEntry,
    Trade,
    TradeStatus,
    WaiverClaim,
    ClaimStatus,
)
from .transaction_log import TransactionLog
from .trade_engine import TradeEngine
from .waiver_engine import WaiverEngine

__all__ = [
    'TransactionType',
    'TransactionEntry',
    'Trade',
    'TradeStatus',
    'WaiverClaim',
    'ClaimStatus',
    'TransactionLog',
    'TradeEngine',
    'WaiverEngine',
]
