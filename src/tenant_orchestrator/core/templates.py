from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from tenant_orchestrator.utils.logger import logger


class Template(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Catalog key used by launch requests")
    name: str
    description: str = ""
    image: str = Field(..., description="Image reference in the local image store")
    port: str = Field(..., description="Container port the app listens on")


DEFAULT_TEMPLATES: List[Template] = [
    Template(
        id="app_template",
        name="Basic Web App",
        description="A simple web application with health monitoring",
        image="app_template:latest",
        port="8081",
    ),
    Template(
        id="note_template",
        name="Notes App",
        description="A note-taking application with CRUD operations",
        image="note_template:latest",
        port="8081",
    ),
]


class TemplateCatalog:
    """Fixed, ordered set of launchable templates.

    ``resolve`` never fails: an unknown or empty id falls back to the first
    registered template.
    """

    def __init__(self, templates: Optional[Iterable[Template]] = None) -> None:
        self._templates: List[Template] = list(DEFAULT_TEMPLATES if templates is None else templates)
        if not self._templates:
            raise ValueError("Template catalog must contain at least one template")

    def list(self) -> List[Template]:
        return list(self._templates)

    def get(self, template_id: Optional[str]) -> Optional[Template]:
        return next((t for t in self._templates if t.id == template_id), None)

    def resolve(self, template_id: Optional[str]) -> Template:
        found = self.get(template_id)
        if found is not None:
            return found
        default = self._templates[0]
        if template_id:
            logger.warning(f"Unknown template '{template_id}', falling back to '{default.id}'")
        else:
            logger.debug(f"No template requested, using default '{default.id}'")
        return default


def load_catalog(path: Optional[str] = None) -> TemplateCatalog:
    """Build the catalog from a JSON file, or the built-in templates when no path is given."""
    if not path:
        return TemplateCatalog()

    raw = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(raw, list):
        raise ValueError(f"{path}: expected a JSON list of templates")
    templates = [Template(**{**item, "port": str(item.get("port", ""))}) for item in raw]
    logger.info(f"Loaded {len(templates)} templates from {path}")
    return TemplateCatalog(templates)
