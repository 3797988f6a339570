"""Tests for the snapshot audit orchestrator."""

from dataclasses import replace
from datetime import datetime, timezone

import pytest

from seo_monitor.analysis.engine import DEFAULT_CHECKLIST, audit_snapshot, run_snapshot_audit
from seo_monitor.collaborators import InMemoryStore
from seo_monitor.models import AuditStatus, MetricsSnapshot

FIXED_NOW = datetime(2026, 3, 1, 9, 30, tzinfo=timezone.utc)


def fixed_clock():
    return FIXED_NOW


class BrokenStore(InMemoryStore):
    def get_latest_snapshot(self, site_id):
        raise RuntimeError("database went away")


class TestAuditSnapshot:
    """Tests for the pure audit pipeline."""

    def test_pure(self, healthy_metrics):
        """Test two runs on the same input give the same output."""
        metrics = replace(healthy_metrics, ctr=1.0, lcp=4000, sessions=50)
        first = audit_snapshot(metrics)
        second = audit_snapshot(metrics)

        assert first == second
        assert [r.to_dict() for r in first.recommendations] == [
            r.to_dict() for r in second.recommendations
        ]

    def test_top_n(self, healthy_metrics):
        """Test recommendations can be capped."""
        metrics = MetricsSnapshot(sessions=10, impressions=10, clicks=0, ctr=0.5)
        full = audit_snapshot(metrics)
        capped = audit_snapshot(metrics, top_n=3)

        assert len(full.recommendations) > 3
        assert capped.recommendations == full.recommendations[:3]
        assert capped.issues == full.issues


class TestRunSnapshotAudit:
    """Tests for run_snapshot_audit."""

    def test_completed(self, store, healthy_metrics):
        """Test a site with data ends completed and is persisted."""
        store.save_snapshot("site-1", replace(healthy_metrics, ctr=1.0))
        result = run_snapshot_audit("site-1", store, clock=fixed_clock)

        assert result.status is AuditStatus.COMPLETED
        assert result.overall_score == 93
        assert result.scores.content == 70
        assert [i.rule_id for i in result.issues] == ["low-ctr"]
        assert len(result.recommendations) == 1
        assert result.checklist == list(DEFAULT_CHECKLIST)
        assert not any(item.completed for item in result.checklist)
        assert result.completed_at == FIXED_NOW
        assert store.audit_results == [result]

    def test_uses_latest_snapshot(self, store, healthy_metrics):
        """Test only the newest snapshot is audited."""
        store.save_snapshot("site-1", replace(healthy_metrics, ctr=1.0))
        store.save_snapshot("site-1", healthy_metrics)
        result = run_snapshot_audit("site-1", store, clock=fixed_clock)
        assert result.issues == []
        assert result.overall_score == 100

    def test_default_top_recommendations(self, store):
        """Test the configured cap of three recommendations."""
        store.save_snapshot("site-1", MetricsSnapshot(sessions=10, impressions=10, clicks=0, ctr=0.5))
        result = run_snapshot_audit("site-1", store, clock=fixed_clock)
        assert [r.priority for r in result.recommendations] == [1, 2, 3]

    def test_no_data_fails(self, store):
        """Test a site without snapshots ends failed with empty fields."""
        result = run_snapshot_audit("site-1", store, clock=fixed_clock)

        assert result.status is AuditStatus.FAILED
        assert result.overall_score is None
        assert result.scores is None
        assert result.issues == []
        assert result.recommendations == []
        assert result.checklist == []
        assert store.audit_results == [result]

    def test_unexpected_error_is_recorded_and_raised(self):
        """Test a storage failure marks the audit failed and propagates."""
        store = BrokenStore()
        with pytest.raises(RuntimeError, match="database went away"):
            run_snapshot_audit("site-1", store, clock=fixed_clock)

        [result] = store.audit_results
        assert result.status is AuditStatus.FAILED
