"""Error kinds raised by the orchestrator core.

Each kind carries the HTTP status the API answers with, so handlers never
have to map exceptions one by one.
"""

from __future__ import annotations

import socket
from contextlib import contextmanager
from typing import Iterator, Optional

import requests
from docker.errors import APIError, DockerException, NotFound


class OrchestratorError(Exception):
    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class RuntimeUnavailable(OrchestratorError):
    """The Docker daemon cannot be reached."""


class ImageNotFound(OrchestratorError):
    def __init__(self, image: str, template_name: str) -> None:
        super().__init__(f"Image not found: {image}. Please build the {template_name} image first.")
        self.image = image
        self.template_name = template_name


class ContainerNotFound(OrchestratorError):
    status_code = 404

    def __init__(self, container_id: str) -> None:
        super().__init__("Container not found")
        self.container_id = container_id


class InvalidRequest(OrchestratorError):
    status_code = 400


class RuntimeOperationFailed(OrchestratorError):
    """A create/start/stop/restart/remove/logs call was rejected by the daemon."""


def explain(e: Exception) -> str:
    return getattr(e, "explanation", None) or str(e)


@contextmanager
def runtime_errors(action: str, container_id: Optional[str] = None) -> Iterator[None]:
    """
    Translate Docker SDK failures raised inside the block into orchestrator errors.

    Args:
        action: Short verb phrase used in the error message ("start container").
        container_id: When given, a 404 from the daemon becomes ContainerNotFound.
    """
    try:
        yield
    except OrchestratorError:
        raise
    except NotFound as e:
        if container_id is not None:
            raise ContainerNotFound(container_id) from e
        raise RuntimeOperationFailed(f"Failed to {action}: {explain(e)}") from e
    except APIError as e:
        raise RuntimeOperationFailed(f"Failed to {action}: {explain(e)}") from e
    except requests.exceptions.ConnectionError as e:
        raise RuntimeUnavailable(f"Cannot connect to Docker daemon: {e}") from e
    except (TimeoutError, socket.timeout) as e:
        # raw socket reads (log streams) time out below the requests layer
        raise RuntimeOperationFailed(f"Failed to {action}: timed out") from e
    except (requests.exceptions.RequestException, DockerException) as e:
        raise RuntimeOperationFailed(f"Failed to {action}: {e}") from e


__all__ = [
    "OrchestratorError",
    "RuntimeUnavailable",
    "ImageNotFound",
    "ContainerNotFound",
    "InvalidRequest",
    "RuntimeOperationFailed",
    "explain",
    "runtime_errors",
]
