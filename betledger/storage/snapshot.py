"""
Atomic JSON snapshots of a LedgerStore.

Writes go to a temp file that is verified and renamed over the target, with
the previous file kept as a backup until the rename succeeds.
"""
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from betledger.betting.store import LedgerStore
from betledger.exceptions import ConfigurationError, SnapshotError
from betledger.utils.observability import LedgerMetrics

logger = logging.getLogger(__name__)


@dataclass
class SnapshotStore:
    """
    Load/save a ledger snapshot at a fixed path.
    
    Example:
        snapshots = SnapshotStore(Path("data/ledger.json"))
        store = snapshots.load() or LedgerStore(initial_bankroll=1000)
        store.add_bet(...)
        snapshots.save(store)
    """
    path: Path
    temp_suffix: str = ".tmp"
    backup_suffix: str = ".bak"
    
    def __post_init__(self):
        self.path = Path(self.path)
        if self.path.is_dir():
            raise ConfigurationError(f"Ledger path is a directory: {self.path}")
    
    @property
    def temp_path(self) -> Path:
        return self.path.with_suffix(self.path.suffix + self.temp_suffix)
    
    @property
    def backup_path(self) -> Path:
        return self.path.with_suffix(self.path.suffix + self.backup_suffix)
    
    def exists(self) -> bool:
        return self.path.exists()
    
    def load(self, metrics: Optional[LedgerMetrics] = None) -> Optional[LedgerStore]:
        """
        Restore the store saved at path.
        
        Returns:
            LedgerStore, or None if no snapshot exists yet
        
        Raises:
            SnapshotError: If the file is unreadable or malformed
        """
        if not self.path.exists():
            return None
        
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise SnapshotError(f"Cannot read snapshot {self.path}: {e}") from e
        
        store = LedgerStore.from_snapshot(data, metrics=metrics)
        logger.debug(f"Loaded ledger with {len(store.bets)} bets from {self.path}")
        return store
    
    def save(self, store: LedgerStore) -> Path:
        """
        Atomically write the store's snapshot.
        
        Process:
        1. Write to temp file
        2. Verify temp file parses
        3. Move existing file to backup
        4. Rename temp to target, drop backup
        
        Raises:
            SnapshotError: If the write fails (the previous file is restored)
        """
        temp_path = self.temp_path
        backup_path = self.backup_path
        snapshot = store.snapshot()
        
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            
            with open(temp_path, "w", encoding="utf-8") as f:
                json.dump(snapshot, f, indent=2)
            
            with open(temp_path, "r", encoding="utf-8") as f:
                written = json.load(f)
            if len(written.get("bets", [])) != len(snapshot["bets"]):
                raise SnapshotError(
                    f"Verification failed: wrote {len(snapshot['bets'])} bets, "
                    f"read {len(written.get('bets', []))}"
                )
            
            if self.path.exists():
                self.path.replace(backup_path)
            
            temp_path.replace(self.path)
            
            if backup_path.exists():
                backup_path.unlink()
        
        except (OSError, ValueError, SnapshotError) as e:
            logger.error(f"Snapshot write failed: {e}")
            if temp_path.exists():
                temp_path.unlink()
            if backup_path.exists() and not self.path.exists():
                backup_path.replace(self.path)
                logger.info("Restored backup after failed write")
            raise SnapshotError(f"Cannot write snapshot {self.path}: {e}") from e
        
        logger.info(f"Saved ledger with {len(snapshot['bets'])} bets to {self.path}")
        return self.path
