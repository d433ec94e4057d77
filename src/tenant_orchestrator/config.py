"""
Process-wide settings, read once from the environment at import time.

Components take these values as constructor defaults, so tests can pass
explicit values instead of patching the environment.
"""

from __future__ import annotations

import os


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


# Routing
DOMAIN_SUFFIX = os.getenv("TENANT_DOMAIN_SUFFIX", "localhost")
PROXY_LABEL_PREFIX = os.getenv("PROXY_LABEL_PREFIX", "traefik")

# Isolation
TENANT_NETWORK = os.getenv("TENANT_NETWORK", "dev_container_default")
TENANT_DATA_PATH = os.getenv("TENANT_DATA_PATH", "/app/data")
VOLUME_PREFIX = "tenant_data_"

# Runtime calls
STOP_TIMEOUT_SECONDS = int(os.getenv("STOP_TIMEOUT_SECONDS", "10"))
RUNTIME_TIMEOUT_SECONDS = int(os.getenv("RUNTIME_TIMEOUT_SECONDS", "60"))
ROLLBACK_ON_START_FAILURE = _env_bool("ROLLBACK_ON_START_FAILURE", True)

# Logs endpoint
LOG_TAIL_LINES = int(os.getenv("LOG_TAIL_LINES", "100"))
LOG_BYTE_LIMIT = int(os.getenv("LOG_BYTE_LIMIT", "8192"))

# Catalog override (JSON list of templates)
TEMPLATES_FILE = os.getenv("TEMPLATES_FILE")

# API server
API_HOST = os.getenv("API_HOST", "0.0.0.0")
API_PORT = int(os.getenv("API_PORT", "8080"))
