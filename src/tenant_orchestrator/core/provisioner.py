from __future__ import annotations

from typing import Any, Callable, Dict, Optional

import docker
from docker import errors as docker_errors
from docker.types import Mount

from tenant_orchestrator import config
from tenant_orchestrator.core.errors import ImageNotFound, OrchestratorError, explain, runtime_errors
from tenant_orchestrator.core.identity import TenantMetadata, build_tenant_metadata, new_tenant_id, tenant_url
from tenant_orchestrator.core.registry import TenantRecord, TenantRegistry
from tenant_orchestrator.core.templates import Template, TemplateCatalog
from tenant_orchestrator.utils.logger import logger


class TenantProvisioner:
    """Turns a launch request into a running, routable tenant container.

    Creation and start are two separate daemon calls. When start fails the
    just-created container and its volume are removed on a best-effort basis,
    unless ``rollback_on_start_failure`` is off.
    """

    def __init__(
        self,
        client: docker.DockerClient,
        catalog: TemplateCatalog,
        registry: TenantRegistry,
        *,
        network: str = config.TENANT_NETWORK,
        data_path: str = config.TENANT_DATA_PATH,
        label_prefix: str = config.PROXY_LABEL_PREFIX,
        domain_suffix: str = config.DOMAIN_SUFFIX,
        rollback_on_start_failure: bool = config.ROLLBACK_ON_START_FAILURE,
        id_factory: Callable[[], str] = new_tenant_id,
    ) -> None:
        self.client = client
        self.catalog = catalog
        self.registry = registry
        self.network = network
        self.data_path = data_path
        self.label_prefix = label_prefix
        self.domain_suffix = domain_suffix
        self.rollback_on_start_failure = rollback_on_start_failure
        self._id_factory = id_factory

    def _verify_image(self, template: Template) -> None:
        # Advisory only: the image can still disappear before create.
        with runtime_errors(f"inspect image {template.image}"):
            try:
                self.client.images.get(template.image)
            except docker_errors.ImageNotFound as e:
                logger.error(f"Image {template.image} for template '{template.id}' is missing: {explain(e)}")
                raise ImageNotFound(template.image, template.name) from e

    def _create_kwargs(self, template: Template, meta: TenantMetadata) -> Dict[str, Any]:
        api = self.client.api
        host_config = api.create_host_config(
            mounts=[Mount(target=self.data_path, source=meta.volume_name, type="volume")],
        )
        networking_config = api.create_networking_config({self.network: api.create_endpoint_config()})
        return {
            "image": template.image,
            "ports": [template.port],
            "labels": meta.labels,
            "host_config": host_config,
            "networking_config": networking_config,
        }

    def _rollback(self, container_id: str, volume_name: str) -> None:
        api = self.client.api
        try:
            api.remove_container(container_id, force=True)
            logger.info(f"Rolled back container {container_id[:12]}")
        except Exception as e:
            logger.warning(f"Rollback: could not remove container {container_id[:12]}: {e}")
        try:
            api.remove_volume(volume_name, force=True)
            logger.info(f"Rolled back volume {volume_name}")
        except Exception as e:
            logger.warning(f"Rollback: could not remove volume {volume_name}: {e}")

    def launch(self, template_id: Optional[str] = None) -> Dict[str, Any]:
        template = self.catalog.resolve(template_id)
        self._verify_image(template)

        meta = build_tenant_metadata(
            template,
            tenant_id=self._id_factory(),
            label_prefix=self.label_prefix,
            domain_suffix=self.domain_suffix,
        )
        logger.info(f"Launching tenant {meta.tenant_id} from template '{template.id}' ({template.image})")

        with runtime_errors("create container"):
            created = self.client.api.create_container(**self._create_kwargs(template, meta))
        container_id = created["Id"]
        for warning in created.get("Warnings") or []:
            logger.warning(f"Container {container_id[:12]}: {warning}")

        try:
            with runtime_errors("start container"):
                self.client.api.start(container_id)
        except OrchestratorError:
            logger.error(f"Failed to start container {container_id[:12]} for tenant {meta.tenant_id}")
            if self.rollback_on_start_failure:
                self._rollback(container_id, meta.volume_name)
            else:
                logger.warning(f"Leaving container {container_id[:12]} and volume {meta.volume_name} in place")
            raise

        self.registry.add(TenantRecord(tenant_id=meta.tenant_id, container_id=container_id, template_id=template.id))
        url = tenant_url(meta.tenant_id, self.domain_suffix)
        logger.info(f"Tenant {meta.tenant_id} running in {container_id[:12]} at {url}")

        return {
            "message": f"{template.name} container launched!",
            "container_id": container_id,
            "template": template.model_dump(),
            "tenant_id": meta.tenant_id,
            "url": url,
        }
