"""
Utilities module for Tenant Orchestrator.

This module provides common utilities like logging configuration.
"""

from __future__ import annotations

from tenant_orchestrator.utils.logger import get_logger, logger

__all__ = ["get_logger", "logger"]
