"""
Core business logic for Tenant Orchestrator.

This module contains template resolution, tenant provisioning, discovery and
container lifecycle management.
"""

from __future__ import annotations

from tenant_orchestrator.core.container_manager import ContainerManager
from tenant_orchestrator.core.templates import Template, TemplateCatalog

__all__ = ["ContainerManager", "Template", "TemplateCatalog"]
