"""
Unit tests for the template catalog.
"""

import json
import logging

import pytest
from pydantic import ValidationError

from tenant_orchestrator.core.templates import DEFAULT_TEMPLATES, Template, TemplateCatalog, load_catalog


class TestTemplateCatalog:
    def test_list_keeps_registration_order(self, catalog: TemplateCatalog):
        assert [t.id for t in catalog.list()] == ["app_template", "note_template"]

    def test_list_returns_a_copy(self, catalog: TemplateCatalog):
        catalog.list().clear()
        assert len(catalog.list()) == 2

    def test_resolve_known_id(self, catalog: TemplateCatalog):
        tmpl = catalog.resolve("note_template")
        assert tmpl.name == "Notes App"
        assert tmpl.image == "note_template:latest"
        assert tmpl.port == "8081"

    def test_unknown_id_falls_back_to_first_template(self, catalog: TemplateCatalog, caplog):
        """An unknown id is not an error: the first registered template is used."""
        with caplog.at_level(logging.WARNING):
            tmpl = catalog.resolve("does-not-exist")

        assert tmpl.id == "app_template"
        assert "does-not-exist" in caplog.text

    @pytest.mark.parametrize("template_id", [None, ""])
    def test_missing_id_uses_first_template(self, catalog: TemplateCatalog, template_id):
        assert catalog.resolve(template_id).id == "app_template"

    def test_fallback_follows_catalog_order(self):
        custom = TemplateCatalog([DEFAULT_TEMPLATES[1], DEFAULT_TEMPLATES[0]])
        assert custom.resolve("nope").id == "note_template"

    def test_empty_catalog_is_rejected(self):
        with pytest.raises(ValueError):
            TemplateCatalog([])

    def test_templates_are_immutable(self, catalog: TemplateCatalog):
        tmpl = catalog.resolve("app_template")
        with pytest.raises(ValidationError):
            tmpl.image = "other:latest"


class TestLoadCatalog:
    def test_no_path_gives_builtin_templates(self):
        assert [t.id for t in load_catalog(None).list()] == ["app_template", "note_template"]

    def test_loads_json_file_and_normalizes_port(self, tmp_path):
        path = tmp_path / "templates.json"
        path.write_text(json.dumps([
            {"id": "wiki", "name": "Wiki", "image": "wiki:1.0", "port": 3000},
            {"id": "blog", "name": "Blog", "description": "Static blog", "image": "blog:2", "port": "8080"},
        ]))

        catalog = load_catalog(str(path))

        assert [t.id for t in catalog.list()] == ["wiki", "blog"]
        assert catalog.resolve("wiki") == Template(id="wiki", name="Wiki", image="wiki:1.0", port="3000")
        assert catalog.resolve("unknown").id == "wiki"

    def test_rejects_non_list_document(self, tmp_path):
        path = tmp_path / "templates.json"
        path.write_text(json.dumps({"id": "wiki"}))

        with pytest.raises(ValueError):
            load_catalog(str(path))
