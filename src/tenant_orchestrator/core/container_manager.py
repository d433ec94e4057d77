from __future__ import annotations

import time
from typing import Any, Dict, List, Optional

import docker
import requests
from docker.errors import APIError, DockerException
from docker.models.containers import Container

from tenant_orchestrator import config
from tenant_orchestrator.core.discovery import TenantDiscovery
from tenant_orchestrator.core.errors import (
    InvalidRequest,
    RuntimeOperationFailed,
    RuntimeUnavailable,
    explain,
    runtime_errors,
)
from tenant_orchestrator.core.provisioner import TenantProvisioner
from tenant_orchestrator.core.registry import TenantRegistry
from tenant_orchestrator.core.templates import Template, TemplateCatalog
from tenant_orchestrator.utils.logger import logger

CONTROL_ACTIONS = ("start", "stop", "restart")
NO_LOGS = "No logs available"

_PAST_TENSE = {"start": "started", "stop": "stopped", "restart": "restarted"}


class ContainerManager:
    """Entry point for everything the API does against the Docker daemon.

    Launch and listing are delegated to TenantProvisioner and TenantDiscovery;
    lifecycle operations on an existing container live here.
    """

    def __init__(
        self,
        client: Optional[docker.DockerClient] = None,
        catalog: Optional[TemplateCatalog] = None,
        registry: Optional[TenantRegistry] = None,
        *,
        network: str = config.TENANT_NETWORK,
        data_path: str = config.TENANT_DATA_PATH,
        label_prefix: str = config.PROXY_LABEL_PREFIX,
        domain_suffix: str = config.DOMAIN_SUFFIX,
        stop_timeout: int = config.STOP_TIMEOUT_SECONDS,
        log_tail: int = config.LOG_TAIL_LINES,
        log_byte_limit: int = config.LOG_BYTE_LIMIT,
        rollback_on_start_failure: bool = config.ROLLBACK_ON_START_FAILURE,
        runtime_timeout: int = config.RUNTIME_TIMEOUT_SECONDS,
        max_retries: int = 3,
    ) -> None:
        logger.info("Initializing ContainerManager")
        self.catalog = catalog or TemplateCatalog()
        self.registry = registry or TenantRegistry()
        self.network = network
        self.data_path = data_path
        self.label_prefix = label_prefix
        self.domain_suffix = domain_suffix
        self.stop_timeout = stop_timeout
        self.log_tail = log_tail
        self.log_byte_limit = log_byte_limit
        self.rollback_on_start_failure = rollback_on_start_failure
        self.runtime_timeout = runtime_timeout

        self.client = client
        if self.client is None:
            self._init_docker_client(max_retries=max_retries)

    def _init_docker_client(self, max_retries: int = 3) -> None:
        """Initialize Docker client with retry logic"""
        for attempt in range(max_retries):
            try:
                client = docker.from_env(timeout=self.runtime_timeout)
                client.ping()
                self.client = client
                logger.info("Docker client initialized successfully")
                return
            except (DockerException, requests.exceptions.RequestException) as e:
                logger.warning(f"Docker client initialization attempt {attempt + 1}/{max_retries} failed: {e}")
                if attempt < max_retries - 1:
                    time.sleep(2 ** attempt)
                else:
                    logger.error(f"Failed to initialize Docker client after {max_retries} attempts: {e}")
                    raise RuntimeUnavailable(f"Cannot connect to Docker daemon: {e}") from e

    def _ensure_docker_client(self) -> None:
        """Ensure Docker client is available, reinitialize once if the connection was lost"""
        if self.client is None:
            self._init_docker_client(max_retries=1)
            return

        try:
            self.client.ping()
        except (DockerException, requests.exceptions.RequestException) as e:
            logger.error(f"Docker client connection lost: {e}")
            self._init_docker_client(max_retries=1)

    def ping(self) -> bool:
        try:
            self._ensure_docker_client()
            return True
        except RuntimeUnavailable:
            return False

    # ---------- helpers ----------
    @staticmethod
    def _require_id(container_id: Optional[str]) -> str:
        if not container_id or not container_id.strip():
            raise InvalidRequest("Container ID is required")
        return container_id.strip()

    def _get_container(self, container_id: str) -> Container:
        self._ensure_docker_client()
        with runtime_errors("inspect container", container_id):
            return self.client.containers.get(container_id)

    def _provisioner(self) -> TenantProvisioner:
        return TenantProvisioner(
            self.client,
            self.catalog,
            self.registry,
            network=self.network,
            data_path=self.data_path,
            label_prefix=self.label_prefix,
            domain_suffix=self.domain_suffix,
            rollback_on_start_failure=self.rollback_on_start_failure,
        )

    def _discovery(self) -> TenantDiscovery:
        return TenantDiscovery(
            self.client,
            self.registry,
            label_prefix=self.label_prefix,
            domain_suffix=self.domain_suffix,
        )

    # -------- public API --------

    def list_templates(self) -> List[Template]:
        return self.catalog.list()

    def launch(self, template_id: Optional[str] = None) -> Dict[str, Any]:
        self._ensure_docker_client()
        return self._provisioner().launch(template_id)

    def list_tenants(self) -> List[Dict[str, Any]]:
        self._ensure_docker_client()
        return self._discovery().list_tenants()

    def control(self, container_id: str, action: str) -> Dict[str, Any]:
        container_id = self._require_id(container_id)
        if action not in CONTROL_ACTIONS:
            raise InvalidRequest("Invalid action. Use start, stop, or restart")

        c = self._get_container(container_id)
        logger.info(f"Container {c.id[:12]}: {action} requested (status: {c.status})")
        with runtime_errors(f"{action} container"):
            if action == "start":
                c.start()
            elif action == "stop":
                c.stop(timeout=self.stop_timeout)
            else:
                c.restart(timeout=self.stop_timeout)
        logger.info(f"Container {c.id[:12]} {_PAST_TENSE[action]}")

        return {
            "message": f"Container {_PAST_TENSE[action]} successfully",
            "container_id": container_id,
            "action": action,
        }

    def delete(self, container_id: str) -> Dict[str, Any]:
        """
        Stop (best effort) and force-remove a tenant container.

        The tenant's volume is left in place. A failed stop does not abort the
        removal; it is reported back in the ``warning`` field instead.
        """
        container_id = self._require_id(container_id)
        c = self._get_container(container_id)
        logger.info(f"Deleting container {c.id[:12]} ({c.name}) - status: {c.status}")

        warning: Optional[str] = None
        try:
            c.stop(timeout=self.stop_timeout)
        except APIError as e:
            warning = f"Failed to stop container before removal: {explain(e)}"
            logger.warning(f"Container {c.id[:12]}: {warning}")

        try:
            c.remove(force=True)
        except APIError as e:
            logger.error(f"Failed to remove container {c.id[:12]}: {e}")
            raise RuntimeOperationFailed(f"Failed to remove container: {explain(e)}") from e

        self.registry.remove_container(c.id)
        logger.info(f"Container {c.id[:12]} removed")

        result: Dict[str, Any] = {"message": "Container deleted successfully", "container_id": container_id}
        if warning:
            result["warning"] = warning
        return result

    def inspect(self, container_id: str) -> Dict[str, Any]:
        container_id = self._require_id(container_id)
        attrs = self._get_container(container_id).attrs or {}
        return {
            "id": attrs.get("Id"),
            "name": attrs.get("Name"),
            "state": attrs.get("State"),
            "config": attrs.get("Config"),
            "created": attrs.get("Created"),
            "path": attrs.get("Path"),
            "args": attrs.get("Args"),
            "image": attrs.get("Image"),
            "platform": attrs.get("Platform"),
            "mount_label": attrs.get("MountLabel"),
            "process_label": attrs.get("ProcessLabel"),
            "restart_count": attrs.get("RestartCount"),
            "driver": attrs.get("Driver"),
            "mounts": attrs.get("Mounts"),
            "network_settings": attrs.get("NetworkSettings"),
            "log_path": attrs.get("LogPath"),
        }

    def logs(self, container_id: str) -> Dict[str, Any]:
        """
        Capture the most recent log lines, bounded by ``log_byte_limit``.

        Chunks are read from the stream until the byte cap is reached; anything
        past the cap is dropped and flagged with ``truncated``.
        """
        container_id = self._require_id(container_id)
        c = self._get_container(container_id)

        chunks: List[bytes] = []
        size = 0
        truncated = False
        with runtime_errors("read logs"):
            # docker-py sets follow=stream unless told otherwise
            stream = c.logs(
                stdout=True, stderr=True, timestamps=True, tail=self.log_tail, stream=True, follow=False,
            )
            try:
                for chunk in stream:
                    remaining = self.log_byte_limit - size
                    if len(chunk) > remaining:
                        chunks.append(chunk[:remaining])
                        size += remaining
                        truncated = True
                        break
                    chunks.append(chunk)
                    size += len(chunk)
            finally:
                close = getattr(stream, "close", None)
                if close is not None:
                    close()

        text = b"".join(chunks).decode("utf-8", errors="replace")
        if truncated:
            logger.debug(f"Container {c.id[:12]}: logs truncated at {self.log_byte_limit} bytes")
        return {
            "logs": text or NO_LOGS,
            "container_id": container_id,
            "truncated": truncated,
        }
