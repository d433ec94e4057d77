"""
API module for Tenant Orchestrator.

This module provides the FastAPI-based REST API for tenant provisioning.
"""

from __future__ import annotations

from typing import Optional

__all__ = ["run_server"]


def run_server(host: Optional[str] = None, port: Optional[int] = None) -> None:
    """Run the API server."""
    import uvicorn

    from tenant_orchestrator import config
    from tenant_orchestrator.api.app import app

    uvicorn.run(app, host=host or config.API_HOST, port=port or config.API_PORT)
