"""
Append-only transaction log.

Every roster mutation (draft pick, trade, waiver move) is recorded as one
TransactionEntry. Entries are kept in memory and, when a file path is given,
also written as JSON Lines so the history survives restarts:
- one complete JSON object per line
- human-readable audit trail
- replayed on start-up

The log is read-only for business purposes: nothing consults it to decide
whether an operation is allowed.
"""

import json
import logging
import threading
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, List, Optional

import pandas as pd

from .transaction_event import TransactionEntry, TransactionType

logger = logging.getLogger(__name__)


class TransactionLog:
    """Append-only record of roster mutations."""

    def __init__(self, filepath: Optional[Path] = None):
        """
        Initialize the log.

        Args:
            filepath: Optional JSONL file; existing entries are loaded from it
        """
        self._lock = threading.Lock()
        self._entries: List[TransactionEntry] = []
        self.filepath = Path(filepath) if filepath else None

        if self.filepath:
            self.filepath.parent.mkdir(parents=True, exist_ok=True)
            self._entries = self._load_entries()

    def record(
        self,
        type: TransactionType,
        team_ids: Iterable[str],
        player_ids: Iterable[str],
        description: str = '',
        reference_id: Optional[str] = None,
        timestamp: Optional[datetime] = None
    ) -> TransactionEntry:
        """Build an entry with a fresh id and append it."""
        entry = TransactionEntry(
            id=str(uuid.uuid4()),
            type=TransactionType(type),
            team_ids=tuple(team_ids),
            player_ids=tuple(player_ids),
            timestamp=timestamp or datetime.now(timezone.utc),
            description=description,
            reference_id=reference_id,
        )
        return self.append(entry)

    def append(self, entry: TransactionEntry) -> TransactionEntry:
        """
        Append a single entry.

        Raises:
            ValueError: If a required field is missing
        """
        if not entry.id:
            raise ValueError("Transaction entry requires an id")
        if not entry.team_ids:
            raise ValueError("Transaction entry requires at least one team")
        if not entry.player_ids:
            raise ValueError("Transaction entry requires at least one player")
        if entry.timestamp is None:
            raise ValueError("Transaction entry requires a timestamp")

        with self._lock:
            self._entries.append(entry)
            if self.filepath:
                with open(self.filepath, 'a', encoding='utf-8') as f:
                    f.write(entry.to_json() + '\n')

        logger.debug(f"Logged {entry.type.value}: {entry.description}")
        return entry

    def query(
        self,
        team_id: Optional[str] = None,
        player_id: Optional[str] = None,
        type: Optional[TransactionType] = None,
        since: Optional[datetime] = None,
        until: Optional[datetime] = None,
        limit: Optional[int] = None
    ) -> List[TransactionEntry]:
        """
        Return entries matching every given filter, newest first.

        Args:
            team_id: Only entries involving this team
            player_id: Only entries involving this player
            type: Only entries of this type
            since: Inclusive lower bound on timestamp
            until: Inclusive upper bound on timestamp
            limit: Maximum number of entries returned
        """
        with self._lock:
            entries = list(self._entries)

        if type is not None:
            type = TransactionType(type)

        matches = [
            e for e in entries
            if (team_id is None or e.involves_team(team_id))
            and (player_id is None or e.involves_player(player_id))
            and (type is None or e.type is type)
            and (since is None or e.timestamp >= since)
            and (until is None or e.timestamp <= until)
        ]
        matches.sort(key=lambda e: e.timestamp, reverse=True)

        if limit is not None:
            matches = matches[:limit]
        return matches

    def count(self) -> int:
        with self._lock:
            return len(self._entries)

    def to_dataframe(self) -> pd.DataFrame:
        """Entries as a DataFrame, oldest first."""
        with self._lock:
            rows = [e.to_dict() for e in self._entries]

        df = pd.DataFrame(rows, columns=[
            'id', 'type', 'team_ids', 'player_ids',
            'timestamp', 'description', 'reference_id'
        ])
        df['team_ids'] = df['team_ids'].apply(lambda ids: ';'.join(ids))
        df['player_ids'] = df['player_ids'].apply(lambda ids: ';'.join(ids))
        return df

    def export_to_csv(self, output_path: Path) -> int:
        """
        Export the log to CSV for analysis.

        Returns:
            Number of entries written
        """
        df = self.to_dataframe()
        if df.empty:
            logger.warning("No transactions to export")
            return 0

        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        df.to_csv(output_path, index=False)

        logger.info(f"Exported {len(df)} transactions to {output_path}")
        return len(df)

    def _load_entries(self) -> List[TransactionEntry]:
        if not self.filepath.exists():
            logger.debug(f"Transaction file does not exist yet: {self.filepath}")
            return []

        entries = []
        with open(self.filepath, 'r', encoding='utf-8') as f:
            for line_num, line in enumerate(f, 1):
                line = line.strip()
                if not line:
                    continue

                try:
                    entries.append(TransactionEntry.from_json(line))
                except (json.JSONDecodeError, KeyError, ValueError) as e:
                    logger.error(f"Failed to parse transaction at line {line_num}: {e}")

        logger.info(f"Loaded {len(entries)} transactions from {self.filepath}")
        return entries
