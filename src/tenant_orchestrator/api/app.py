from __future__ import annotations

import threading
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException as StarletteHTTPException

from tenant_orchestrator import __version__, config
from tenant_orchestrator.core.container_manager import ContainerManager
from tenant_orchestrator.core.errors import InvalidRequest, OrchestratorError
from tenant_orchestrator.core.templates import Template, TemplateCatalog, load_catalog
from tenant_orchestrator.utils.logger import logger

app = FastAPI(title="Tenant Orchestrator API", version=__version__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type"],
)

# -------- Error responses: always {"error": "..."} --------

@app.exception_handler(OrchestratorError)
async def orchestrator_error_handler(request: Request, exc: OrchestratorError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})

@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    logger.debug(f"Rejected {request.method} {request.url.path}: {exc.errors()}")
    return JSONResponse(status_code=400, content={"error": "Invalid request"})

@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})

# -------- Shared components (created on first use) --------

_catalog: Optional[TemplateCatalog] = None
_manager: Optional[ContainerManager] = None
_lock = threading.Lock()

def get_catalog() -> TemplateCatalog:
    global _catalog
    if _catalog is None:
        with _lock:
            if _catalog is None:
                _catalog = load_catalog(config.TEMPLATES_FILE)
    return _catalog

STARTUP_CONNECT_RETRIES = 3

def _build_manager(max_retries: int) -> ContainerManager:
    global _manager
    if _manager is None:
        catalog = get_catalog()
        with _lock:
            if _manager is None:
                _manager = ContainerManager(catalog=catalog, max_retries=max_retries)
    return _manager

def get_manager() -> ContainerManager:
    """Docker-backed manager; connecting is deferred so the app imports without a daemon.

    Requests make a single connection attempt and fail fast with RuntimeUnavailable.
    """
    return _build_manager(max_retries=1)

# -------- Schemas --------

class LaunchBody(BaseModel):
    template: Optional[str] = None

class LaunchResponse(BaseModel):
    message: str
    container_id: str
    template: Template
    tenant_id: str
    url: str

class TenantView(BaseModel):
    id: str
    full_id: str
    image: str
    state: str
    status: str
    names: List[str]
    url: str
    tenant_id: str
    template_id: str
    template_name: str
    created_at: Optional[str] = None

class ContainersResponse(BaseModel):
    containers: List[TenantView]

class TemplatesResponse(BaseModel):
    templates: List[Template]

class ControlResponse(BaseModel):
    message: str
    container_id: str
    action: str

class DeleteResponse(BaseModel):
    message: str
    container_id: str
    warning: Optional[str] = None

class LogsResponse(BaseModel):
    logs: str
    container_id: str
    truncated: bool = False

class InspectResponse(BaseModel):
    details: Dict[str, Any]
    container_id: str

# -------- Utilities --------

async def _requested_template(request: Request) -> Optional[str]:
    """Template id from the launch body; a missing or malformed body selects the default."""
    try:
        payload = await request.json()
    except ValueError:
        logger.debug("Launch body missing or not JSON, using default template")
        return None
    if not isinstance(payload, dict):
        return None
    try:
        return LaunchBody.model_validate(payload).template
    except ValidationError:
        logger.debug(f"Launch body ignored: {payload!r}")
        return None

# -------- Service --------

@app.on_event("startup")
async def validate_startup() -> None:
    """Log the catalog and check the daemon; startup continues either way."""
    logger.info("Starting Tenant Orchestrator...")
    catalog = get_catalog()
    logger.info(f"Templates: {', '.join(t.id for t in catalog.list())}")
    try:
        await run_in_threadpool(_build_manager, STARTUP_CONNECT_RETRIES)
        logger.info("[OK] Docker connection validated")
    except OrchestratorError as e:
        logger.error(f"[FAIL] Docker connection failed: {e.message}")

@app.get("/health")
def health():
    """Basic health check - just returns OK if the service is running"""
    return {"status": "OK"}

@app.get("/health/detailed")
def health_detailed():
    """Health check including the Docker daemon connection"""
    health_status: Dict[str, Any] = {
        "status": "OK",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "components": {},
    }
    try:
        manager = get_manager()
        if manager.ping():
            health_status["components"]["docker"] = {"status": "OK", "message": "Connected"}
        else:
            health_status["components"]["docker"] = {"status": "ERROR", "message": "Ping failed"}
            health_status["status"] = "DEGRADED"
        health_status["components"]["registry"] = {
            "status": "OK",
            "message": f"Indexing {len(manager.registry.list_all())} tenants",
        }
    except OrchestratorError as e:
        health_status["components"]["docker"] = {"status": "ERROR", "message": e.message}
        health_status["status"] = "DEGRADED"
    return health_status

# -------- Routes --------

@app.get("/api/templates", response_model=TemplatesResponse)
def list_templates(catalog: TemplateCatalog = Depends(get_catalog)):
    return {"templates": catalog.list()}

@app.post("/launch", response_model=LaunchResponse, include_in_schema=False)
@app.post("/api/launch", response_model=LaunchResponse)
async def launch(request: Request, manager: ContainerManager = Depends(get_manager)):
    """Provision a new tenant from a template (unknown ids fall back to the first template)"""
    template_id = await _requested_template(request)
    return await run_in_threadpool(manager.launch, template_id)

@app.delete("/api/launch", include_in_schema=False)
@app.delete("/api/launch/", include_in_schema=False)
def delete_without_id():
    raise InvalidRequest("Container ID is required")

@app.delete("/api/launch/{container_id}", response_model=DeleteResponse, response_model_exclude_none=True)
def delete_tenant(container_id: str, manager: ContainerManager = Depends(get_manager)):
    """Stops and removes a tenant container; its data volume is kept"""
    return manager.delete(container_id)

@app.get("/api/containers", response_model=ContainersResponse)
def list_containers(manager: ContainerManager = Depends(get_manager)):
    """Tenants reconstructed from container labels, in the daemon's listing order"""
    return {"containers": manager.list_tenants()}

@app.get("/api/containers/{container_id}/logs", response_model=LogsResponse)
def container_logs(container_id: str, manager: ContainerManager = Depends(get_manager)):
    return manager.logs(container_id)

@app.get("/api/containers/{container_id}/inspect", response_model=InspectResponse)
def container_inspect(container_id: str, manager: ContainerManager = Depends(get_manager)):
    return {"details": manager.inspect(container_id), "container_id": container_id}

@app.post("/api/containers/{container_id}/{action}", response_model=ControlResponse)
def container_control(container_id: str, action: str, manager: ContainerManager = Depends(get_manager)):
    """start | stop | restart"""
    return manager.control(container_id, action)
