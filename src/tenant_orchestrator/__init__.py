"""
Tenant Orchestrator - per-tenant container provisioning on a single Docker host.

This package provides:
- A fixed catalog of launchable application templates
- Tenant provisioning with an isolated volume and Traefik routing labels
- Label-based tenant discovery straight from the Docker daemon
- Lifecycle control (start/stop/restart/delete/inspect/logs)
- A FastAPI HTTP API and a small CLI
"""

from __future__ import annotations

__version__ = "1.0.0"

# Core exports
from tenant_orchestrator.core.container_manager import ContainerManager
from tenant_orchestrator.core.templates import TemplateCatalog
from tenant_orchestrator.utils.logger import get_logger

__all__ = [
    "ContainerManager",
    "TemplateCatalog",
    "get_logger",
    "__version__",
]
