from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.principal import current_officer_code, officer_required
from ..common.serialization import to_jsonable
from ..common.validators import optional_coordinate, require_non_empty
from ..core.enums import VisitType
from ..core.exceptions import ValidationError
from ..container import Container
from ..geo.geofence import is_near_project


def register(app: Flask, container: Container) -> None:
    @app.route("/api/visits", methods=["POST"], endpoint="api_record_visit")
    @officer_required
    def record_visit():
        form = request.form
        project_id = require_non_empty(form.get("projectId"), "projectId")
        try:
            visit_type = VisitType(form.get("visitType") or VisitType.SITE.value)
        except ValueError:
            raise ValidationError("visitType must be 'site' or 'office'")

        lat = optional_coordinate(form.get("lat"), low=-90, high=90)
        lng = optional_coordinate(form.get("lng"), low=-180, high=180)
        accuracy = optional_coordinate(form.get("accuracy"), low=0, high=1e7)

        face = request.files.get("face")
        if face is None:
            raise ValidationError("Face image is required")

        visit = container.visit_service.record_visit(
            current_officer_code(),
            project_id,
            visit_type,
            lat,
            lng,
            accuracy,
            face.read(),
        )

        near_project = None
        if visit.gps is not None:
            project = container.projects_repo.get_by_id(project_id)
            if project is not None:
                near_project = is_near_project(
                    project,
                    visit.gps,
                    container.near_project_margin_meters,
                )

        return jsonify({"ok": True, "visit": to_jsonable(visit), "nearProject": near_project}), 201

    @app.route("/api/projects/<project_id>/attendance", methods=["GET"], endpoint="api_project_attendance")
    @officer_required
    def project_attendance(project_id: str):
        by_actor, by_role = container.visit_service.attendance(current_officer_code(), project_id)
        return jsonify({"ok": True, "byActor": to_jsonable(by_actor), "byRole": to_jsonable(by_role)})
