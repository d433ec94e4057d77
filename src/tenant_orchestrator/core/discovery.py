"""
Tenant discovery from runtime metadata.

The orchestrator keeps no database: a container belongs to it when it carries
a router-rule label pointing at the tenant domain. Everything else on the host
is ignored.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import docker

from tenant_orchestrator import config
from tenant_orchestrator.core.errors import runtime_errors
from tenant_orchestrator.core.identity import TEMPLATE_ID_LABEL, TEMPLATE_NAME_LABEL, router_label_prefix, tenant_url
from tenant_orchestrator.core.registry import TenantRecord, TenantRegistry


def _created_at(raw: Any) -> Optional[datetime]:
    try:
        return datetime.fromtimestamp(int(raw), tz=timezone.utc)
    except (TypeError, ValueError, OverflowError, OSError):
        return None


class TenantDiscovery:
    def __init__(
        self,
        client: docker.DockerClient,
        registry: TenantRegistry,
        *,
        label_prefix: str = config.PROXY_LABEL_PREFIX,
        domain_suffix: str = config.DOMAIN_SUFFIX,
    ) -> None:
        self.client = client
        self.registry = registry
        self.domain_suffix = domain_suffix
        self._router_prefix = router_label_prefix(label_prefix)
        # tenant id is the first segment after "<prefix>.http.routers."
        self._tenant_segment = len(self._router_prefix.split(".")) - 1
        self._domain_marker = f".{domain_suffix}"

    def tenant_id_from_labels(self, labels: Dict[str, str]) -> Optional[str]:
        """
        Find the router-rule label and recover the tenant id from its key.

        Returns:
            The tenant id ("" if the key is too short to hold one), or None when
            no label matches and the container is not a tenant.
        """
        for key, value in labels.items():
            if key.startswith(self._router_prefix) and self._domain_marker in (value or ""):
                parts = key.split(".")
                return parts[self._tenant_segment] if len(parts) > self._tenant_segment else ""
        return None

    def list_tenants(self) -> List[Dict[str, Any]]:
        listed_at = datetime.now(timezone.utc)
        with runtime_errors("list containers"):
            items = self.client.api.containers(all=True)

        matched = []
        for item in items:
            labels = item.get("Labels") or {}
            tenant_id = self.tenant_id_from_labels(labels)
            if tenant_id is None:
                continue
            matched.append((item, labels, tenant_id))

        observed = [
            TenantRecord(
                tenant_id=tenant_id,
                container_id=item.get("Id", ""),
                template_id=labels.get(TEMPLATE_ID_LABEL, ""),
                created_at=_created_at(item.get("Created")) or datetime.now(timezone.utc),
            )
            for item, labels, tenant_id in matched
            if tenant_id
        ]
        records = {rec.tenant_id: rec for rec in self.registry.reconcile(observed, listed_at=listed_at)}

        tenants: List[Dict[str, Any]] = []
        for item, labels, tenant_id in matched:
            full_id = item.get("Id", "")
            record = records.get(tenant_id)
            created = record.created_at if record else _created_at(item.get("Created"))
            tenants.append({
                "id": full_id[:12],
                "full_id": full_id,
                "image": item.get("Image", ""),
                "state": item.get("State", ""),
                "status": item.get("Status", ""),
                "names": item.get("Names") or [],
                "url": tenant_url(tenant_id, self.domain_suffix) if tenant_id else "",
                "tenant_id": tenant_id,
                "template_id": labels.get(TEMPLATE_ID_LABEL, ""),
                "template_name": labels.get(TEMPLATE_NAME_LABEL, ""),
                "created_at": created.isoformat() if created else None,
            })
        return tenants
