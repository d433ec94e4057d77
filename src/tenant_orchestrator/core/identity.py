"""
Tenant identity and routing metadata.

A tenant id is a UUID4 string. It names the Traefik router and service, the
subdomain and the isolation volume, so every label for a tenant is derived
from it here and nowhere else.
"""

from __future__ import annotations

import re
import uuid
from dataclasses import dataclass, field
from typing import Dict, Optional

from tenant_orchestrator import config
from tenant_orchestrator.core.errors import InvalidRequest
from tenant_orchestrator.core.templates import Template

TEMPLATE_ID_LABEL = "template.id"
TEMPLATE_NAME_LABEL = "template.name"

_TENANT_ID_RE = re.compile(r"^[0-9a-f-]+$")


@dataclass(frozen=True)
class TenantMetadata:
    tenant_id: str
    labels: Dict[str, str] = field(default_factory=dict)
    volume_name: str = ""


def new_tenant_id() -> str:
    return str(uuid.uuid4())


def router_label_prefix(label_prefix: str = config.PROXY_LABEL_PREFIX) -> str:
    return f"{label_prefix}.http.routers."


def tenant_host(tenant_id: str, domain_suffix: str = config.DOMAIN_SUFFIX) -> str:
    return f"{tenant_id}.{domain_suffix}"


def tenant_url(tenant_id: str, domain_suffix: str = config.DOMAIN_SUFFIX) -> str:
    return f"http://{tenant_host(tenant_id, domain_suffix)}"


def volume_name_for(tenant_id: str) -> str:
    return f"{config.VOLUME_PREFIX}{tenant_id}"


def build_tenant_metadata(
    template: Template,
    port: Optional[str] = None,
    *,
    tenant_id: Optional[str] = None,
    label_prefix: str = config.PROXY_LABEL_PREFIX,
    domain_suffix: str = config.DOMAIN_SUFFIX,
) -> TenantMetadata:
    """
    Derive the labels and volume name for a new tenant.

    Args:
        template: Template being launched.
        port: Container port for the proxy service; defaults to the template's.
        tenant_id: Pre-minted id; a fresh UUID4 is generated when omitted.
        label_prefix: Reverse proxy label namespace.
        domain_suffix: Domain the tenant subdomain lives under.

    Returns:
        TenantMetadata with the id, the full label set and the volume name.

    Raises:
        InvalidRequest: If a supplied tenant id is outside the UUID alphabet.
    """
    if tenant_id is None:
        tenant_id = new_tenant_id()
    elif not _TENANT_ID_RE.match(tenant_id):
        raise InvalidRequest(f"Invalid tenant id: {tenant_id!r}")

    service_port = str(port if port is not None else template.port)

    labels = {
        f"{label_prefix}.enable": "true",
        f"{router_label_prefix(label_prefix)}{tenant_id}.rule": f"Host(`{tenant_host(tenant_id, domain_suffix)}`)",
        f"{label_prefix}.http.services.{tenant_id}.loadbalancer.server.port": service_port,
        TEMPLATE_ID_LABEL: template.id,
        TEMPLATE_NAME_LABEL: template.name,
    }
    return TenantMetadata(tenant_id=tenant_id, labels=labels, volume_name=volume_name_for(tenant_id))
