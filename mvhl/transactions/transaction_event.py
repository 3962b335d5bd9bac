"""
Core data structures for trades, waiver claims and the transaction log.
"""

import json
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Tuple


class TransactionType(str, Enum):
    DRAFT = 'draft'
    TRADE = 'trade'
    WAIVER = 'waiver'


class TradeStatus(str, Enum):
    PENDING = 'pending'
    ACCEPTED = 'accepted'
    REJECTED = 'rejected'
    CANCELLED = 'cancelled'


class ClaimStatus(str, Enum):
    ACTIVE = 'active'
    AWARDED = 'awarded'
    EXPIRED = 'expired'
    CANCELLED = 'cancelled'


@dataclass(frozen=True)
class TransactionEntry:
    """Immutable record of one roster mutation."""

    id: str
    type: TransactionType
    team_ids: Tuple[str, ...]
    player_ids: Tuple[str, ...]
    timestamp: datetime
    description: str = ''
    reference_id: Optional[str] = None   # trade id, claim id or pick number

    def involves_team(self, team_id: str) -> bool:
        return team_id in self.team_ids

    def involves_player(self, player_id: str) -> bool:
        return player_id in self.player_ids

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'type': self.type.value,
            'team_ids': list(self.team_ids),
            'player_ids': list(self.player_ids),
            'timestamp': self.timestamp.isoformat(),
            'description': self.description,
            'reference_id': self.reference_id,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'TransactionEntry':
        return cls(
            id=data['id'],
            type=TransactionType(data['type']),
            team_ids=tuple(data['team_ids']),
            player_ids=tuple(data['player_ids']),
            timestamp=datetime.fromisoformat(data['timestamp']),
            description=data.get('description', ''),
            reference_id=data.get('reference_id'),
        )

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_json(cls, json_str: str) -> 'TransactionEntry':
        return cls.from_dict(json.loads(json_str))


@dataclass
class Trade:
    """A bilateral trade proposal."""

    id: str
    from_team_id: str
    to_team_id: str
    players_offered: Tuple[str, ...]
    players_wanted: Tuple[str, ...]
    created_at: datetime
    status: TradeStatus = TradeStatus.PENDING
    resolved_at: Optional[datetime] = None

    @property
    def is_pending(self) -> bool:
        return self.status is TradeStatus.PENDING

    def involves_team(self, team_id: str) -> bool:
        return team_id in (self.from_team_id, self.to_team_id)

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'from_team_id': self.from_team_id,
            'to_team_id': self.to_team_id,
            'players_offered': list(self.players_offered),
            'players_wanted': list(self.players_wanted),
            'status': self.status.value,
            'created_at': self.created_at.isoformat(),
            'resolved_at': self.resolved_at.isoformat() if self.resolved_at else None,
        }


@dataclass
class WaiverClaim:
    """
    The waiver window for one waived player.

    While active, claiming_team_id is the current leader only; it becomes
    final when the claim is awarded.
    """

    id: str
    player_id: str
    dropping_team_id: str
    submitted_at: datetime
    process_date: datetime
    claiming_team_id: Optional[str] = None
    waiver_priority: Optional[int] = None
    status: ClaimStatus = ClaimStatus.ACTIVE
    claimants: Dict[str, datetime] = field(default_factory=dict)  # team_id -> claimed at
    processed_at: Optional[datetime] = None

    @property
    def is_active(self) -> bool:
        return self.status is ClaimStatus.ACTIVE

    def claimant_ids(self) -> List[str]:
        return list(self.claimants)

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'player_id': self.player_id,
            'dropping_team_id': self.dropping_team_id,
            'claiming_team_id': self.claiming_team_id,
            'waiver_priority': self.waiver_priority,
            'status': self.status.value,
            'claimants': sorted(self.claimants),
            'submitted_at': self.submitted_at.isoformat(),
            'process_date': self.process_date.isoformat(),
            'processed_at': self.processed_at.isoformat() if self.processed_at else None,
        }
