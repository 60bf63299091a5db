from __future__ import annotations

from flask import Flask, jsonify

from ..common.principal import current_officer_code, officer_required
from ..common.serialization import to_jsonable
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/projects/<project_id>/overview", methods=["GET"], endpoint="api_project_overview")
    @officer_required
    def project_overview(project_id: str):
        overview = container.oversight_service.project_overview(current_officer_code(), project_id)
        return jsonify({"ok": True, "overview": to_jsonable(overview)})

    @app.route("/api/oversight/projects", methods=["GET"], endpoint="api_oversight_projects")
    @officer_required
    def oversight_projects():
        rows = container.oversight_service.portfolio(current_officer_code())
        return jsonify({"ok": True, "projects": to_jsonable(rows)})
