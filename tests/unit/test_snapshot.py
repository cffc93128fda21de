"""
Unit tests for atomic ledger snapshots.
"""
import json
import pytest
from datetime import timedelta

from betledger.betting import LedgerStore, Outcome
from betledger.exceptions import ConfigurationError, SnapshotError
from betledger.storage import SnapshotStore


class TestSnapshotStore:
    
    @pytest.fixture
    def snapshots(self, tmp_path):
        return SnapshotStore(tmp_path / "nested" / "ledger.json")
    
    def test_directory_path_rejected(self, tmp_path):
        with pytest.raises(ConfigurationError):
            SnapshotStore(tmp_path)
    
    def test_load_missing_returns_none(self, snapshots):
        assert not snapshots.exists()
        assert snapshots.load() is None
    
    def test_save_and_load(self, snapshots, store, make_bet, now):
        store.add_bet(make_bet(now - timedelta(days=3), outcome=Outcome.WIN, profit_loss=150.0))
        store.add_bet(make_bet(now, tipster="Sam"))
        
        path = snapshots.save(store)
        loaded = snapshots.load()
        
        assert path.exists()
        assert loaded.bets == store.bets
        assert loaded.current_bankroll == store.current_bankroll
        assert loaded.bankroll_history == store.bankroll_history
    
    def test_save_leaves_no_temp_or_backup(self, snapshots, store):
        snapshots.save(store)
        snapshots.save(store)
        assert not snapshots.temp_path.exists()
        assert not snapshots.backup_path.exists()
    
    def test_file_is_plain_json(self, snapshots, store, make_bet, now):
        store.add_bet(make_bet(now, outcome=Outcome.LOSS, profit_loss=-100.0))
        snapshots.save(store)
        
        data = json.loads(snapshots.path.read_text())
        assert data["version"] == 1
        assert data["initial_bankroll"] == 1000.0
        assert data["bets"][0]["outcome"] == "loss"
    
    def test_corrupt_file(self, snapshots):
        snapshots.path.parent.mkdir(parents=True)
        snapshots.path.write_text("{not json")
        with pytest.raises(SnapshotError):
            snapshots.load()
    
    def test_failed_write_keeps_previous_file(self, snapshots, store, make_bet, now, mocker):
        snapshots.save(store)
        original = snapshots.path.read_text()
        
        store.add_bet(make_bet(now))
        mocker.patch("betledger.storage.snapshot.json.dump", side_effect=OSError("disk full"))
        
        with pytest.raises(SnapshotError):
            snapshots.save(store)
        
        assert snapshots.path.read_text() == original
        assert not snapshots.temp_path.exists()
    
    def test_load_with_metrics(self, snapshots, store):
        from betledger.utils.observability import LedgerMetrics
        
        snapshots.save(store)
        metrics = LedgerMetrics()
        loaded = snapshots.load(metrics=metrics)
        
        assert isinstance(loaded, LedgerStore)
        assert metrics.registry.get_sample_value("ledger_current_bankroll") == 1000.0
