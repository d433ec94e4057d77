"""
Unit tests for the in-memory tenant index.
"""

from datetime import datetime, timedelta, timezone

from tenant_orchestrator.core.registry import TenantRecord, TenantRegistry

CID_A = "a" * 64
CID_B = "b" * 64


class TestTenantRegistry:
    def test_add_and_lookup(self, registry: TenantRegistry):
        rec = registry.add(TenantRecord(tenant_id="t1", container_id=CID_A, template_id="app_template"))

        assert registry.get("t1") is rec
        assert registry.find_by_container(CID_A) is rec
        assert registry.find_by_container(CID_A[:12]) is rec
        assert registry.find_by_container(CID_B) is None

    def test_remove_container_by_short_id(self, registry: TenantRegistry):
        registry.add(TenantRecord(tenant_id="t1", container_id=CID_A))

        removed = registry.remove_container(CID_A[:12])

        assert removed is not None and removed.tenant_id == "t1"
        assert registry.list_all() == []
        assert registry.remove_container(CID_A) is None

    def test_reconcile_adopts_and_drops(self, registry: TenantRegistry):
        registry.add(TenantRecord(tenant_id="gone", container_id=CID_B))

        records = registry.reconcile([TenantRecord(tenant_id="t1", container_id=CID_A)])

        assert [r.tenant_id for r in records] == ["t1"]
        assert registry.get("gone") is None
        assert registry.get("t1") is not None

    def test_reconcile_keeps_original_record(self, registry: TenantRegistry):
        launched_at = datetime.now(timezone.utc) - timedelta(hours=1)
        original = registry.add(TenantRecord(tenant_id="t1", container_id=CID_A, created_at=launched_at))

        registry.reconcile([TenantRecord(tenant_id="t1", container_id=CID_A)])

        assert registry.get("t1") is original
        assert registry.get("t1").created_at == launched_at

    def test_reconcile_replaces_record_pointing_at_other_container(self, registry: TenantRegistry):
        registry.add(TenantRecord(tenant_id="t1", container_id=CID_B))

        registry.reconcile([TenantRecord(tenant_id="t1", container_id=CID_A)])

        assert registry.get("t1").container_id == CID_A

    def test_reconcile_keeps_records_newer_than_listing(self, registry: TenantRegistry):
        listed_at = datetime.now(timezone.utc)
        stale = registry.add(TenantRecord(tenant_id="old", container_id=CID_A,
                                          created_at=listed_at - timedelta(seconds=5)))
        fresh = registry.add(TenantRecord(tenant_id="new", container_id=CID_B,
                                          created_at=listed_at + timedelta(milliseconds=1)))

        result = registry.reconcile([], listed_at=listed_at)

        assert result == []
        assert registry.get(stale.tenant_id) is None
        assert registry.get(fresh.tenant_id) is fresh
