"""Tests for mirror-to-durable reconciliation."""

from unittest.mock import patch

import pytest

from ledger_app.errors import DurableStoreError, VersionConflictError
from ledger_app.persistence.mirror import FallbackMirror
from ledger_app.persistence.reconciler import ReconcileOutcome, Reconciler
from ledger_app.state.locks import KeyedLocks
from ledger_app.state.models import Item


def item(version, owner="u1", item_id="a") -> Item:
    return Item(id=item_id, owner=owner, creator="u1", version=version)


class TestReconciler:
    """Test Reconciler against a real SQLite store."""

    @pytest.fixture(autouse=True)
    def _setup(self, flaky_store):
        self.durable = flaky_store
        self.mirror = FallbackMirror()
        self.reconciler = Reconciler(self.durable, self.mirror, KeyedLocks())

    def _seed_durable(self, version, owner="u1", item_id="a"):
        self.durable.put(item(0, owner, item_id), expected_version=None)
        for v in range(1, version + 1):
            self.durable.put(item(v, owner, item_id), expected_version=v - 1)

    def test_newer_durable_copy_wins(self):
        self._seed_durable(5, owner="u2")
        self.mirror.put(item(4, owner="u9"), expected_version=None)

        outcome = self.reconciler.reconcile_item("a")

        assert outcome == ReconcileOutcome.DISCARDED
        record = self.mirror.get("a")
        assert record.version == 5
        assert record.owner == "u2"
        assert record.dirty is False
        assert self.durable.get("a").owner == "u2"

    def test_equal_versions_keep_durable_copy(self):
        self._seed_durable(3, owner="u2")
        self.mirror.put(item(3, owner="u9"), expected_version=None)

        assert self.reconciler.reconcile_item("a") == ReconcileOutcome.DISCARDED
        assert self.durable.get("a").owner == "u2"

    def test_newer_mirror_copy_is_promoted(self):
        self._seed_durable(5)
        self.mirror.put(item(6, owner="u3"), expected_version=None)

        outcome = self.reconciler.reconcile_item("a")

        assert outcome == ReconcileOutcome.PROMOTED
        assert self.durable.get("a").version == 6
        assert self.durable.get("a").owner == "u3"
        assert self.mirror.is_dirty("a") is False

    def test_mirror_only_record_is_inserted(self):
        self.mirror.put(item(0, item_id="new"), expected_version=None)

        assert self.reconciler.reconcile_item("new") == ReconcileOutcome.PROMOTED
        assert self.durable.get("new").version == 0

    def test_clean_record_skipped(self):
        self.mirror.cache(item(2))

        assert self.reconciler.reconcile_item("a") == ReconcileOutcome.SKIPPED
        assert self.durable.calls == []

    def test_durable_failure_leaves_record_dirty(self):
        self.mirror.put(item(1), expected_version=None)
        self.durable.available = False

        with pytest.raises(DurableStoreError):
            self.reconciler.reconcile_item("a")

        assert self.mirror.is_dirty("a")

    def test_persistent_conflict_raises(self):
        self.mirror.put(item(2), expected_version=None)
        conflict = VersionConflictError("moved", item_id="a")

        with patch.object(self.durable, "put", side_effect=conflict):
            with pytest.raises(VersionConflictError):
                self.reconciler.reconcile_item("a")

        assert self.mirror.is_dirty("a")

    def test_reconcile_all_reports_outcomes(self):
        self._seed_durable(5, item_id="stale")
        self.mirror.put(item(4, item_id="stale"), expected_version=None)
        self.mirror.put(item(0, item_id="fresh"), expected_version=None)

        report = self.reconciler.reconcile_all()

        assert report.promoted == ["fresh"]
        assert report.discarded == ["stale"]
        assert report.complete
        assert self.mirror.dirty_ids() == []

    def test_reconcile_all_stops_on_outage(self):
        self.mirror.put(item(0, item_id="a"), expected_version=None)
        self.mirror.put(item(0, item_id="b"), expected_version=None)
        self.durable.available = False

        report = self.reconciler.reconcile_all()

        assert report.pending == ["a", "b"]
        assert report.error is not None
        assert not report.complete
