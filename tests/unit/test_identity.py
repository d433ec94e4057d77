"""
Unit tests for tenant identity and routing metadata.
"""

import uuid

import pytest

from tenant_orchestrator.core.errors import InvalidRequest
from tenant_orchestrator.core.identity import (
    build_tenant_metadata,
    new_tenant_id,
    tenant_url,
    volume_name_for,
)
from tenant_orchestrator.core.templates import DEFAULT_TEMPLATES

APP = DEFAULT_TEMPLATES[0]
TENANT = "3f2b8c1e-9a4d-4f6b-8e21-5c7d9a0b1e2f"


class TestBuildTenantMetadata:
    def test_full_label_set(self):
        meta = build_tenant_metadata(APP, tenant_id=TENANT)

        assert meta.tenant_id == TENANT
        assert meta.labels == {
            "traefik.enable": "true",
            f"traefik.http.routers.{TENANT}.rule": f"Host(`{TENANT}.localhost`)",
            f"traefik.http.services.{TENANT}.loadbalancer.server.port": "8081",
            "template.id": "app_template",
            "template.name": "Basic Web App",
        }

    def test_volume_name(self):
        meta = build_tenant_metadata(APP, tenant_id=TENANT)
        assert meta.volume_name == f"tenant_data_{TENANT}"
        assert volume_name_for(TENANT) == meta.volume_name

    def test_explicit_port_overrides_template_port(self):
        meta = build_tenant_metadata(APP, "9000", tenant_id=TENANT)
        assert meta.labels[f"traefik.http.services.{TENANT}.loadbalancer.server.port"] == "9000"

    def test_custom_prefix_and_domain(self):
        meta = build_tenant_metadata(APP, tenant_id=TENANT, label_prefix="proxy", domain_suffix="apps.example.com")

        assert meta.labels["proxy.enable"] == "true"
        assert meta.labels[f"proxy.http.routers.{TENANT}.rule"] == f"Host(`{TENANT}.apps.example.com`)"
        assert tenant_url(TENANT, "apps.example.com") == f"http://{TENANT}.apps.example.com"

    def test_tenant_id_used_in_rule_service_and_url(self):
        meta = build_tenant_metadata(APP)
        tid = meta.tenant_id

        in_values = [k for k, v in meta.labels.items() if tid in v]
        in_keys = [k for k in meta.labels if tid in k]

        assert in_values == [f"traefik.http.routers.{tid}.rule"]
        assert f"traefik.http.services.{tid}.loadbalancer.server.port" in in_keys
        assert tid in tenant_url(tid)

    def test_generated_ids_are_uuids_and_unique(self):
        ids = {build_tenant_metadata(APP).tenant_id for _ in range(50)}
        assert len(ids) == 50
        for tid in ids:
            assert str(uuid.UUID(tid)) == tid

    @pytest.mark.parametrize("bad", ["ABC", "x`) || Host(`evil", "a.b", ""])
    def test_rejects_ids_outside_uuid_alphabet(self, bad):
        with pytest.raises(InvalidRequest):
            build_tenant_metadata(APP, tenant_id=bad)

    def test_new_tenant_id(self):
        assert new_tenant_id() != new_tenant_id()
