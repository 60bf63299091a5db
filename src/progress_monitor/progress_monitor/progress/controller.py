from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.principal import current_officer_code, officer_required
from ..common.serialization import to_jsonable
from ..common.validators import require_non_empty, require_number
from ..container import Container


def _json_body() -> dict:
    return request.get_json(silent=True) or {}


def register(app: Flask, container: Container) -> None:
    @app.route("/api/progress", methods=["POST"], endpoint="api_report_progress")
    @officer_required
    def report_progress():
        form = request.form
        event_id, rollup = container.progress_service.report_progress(
            current_officer_code(),
            require_non_empty(form.get("projectId"), "projectId"),
            require_non_empty(form.get("packageId"), "packageId"),
            int(require_number(form.get("stageId"), "stageId")),
            form.get("percent"),
            [f.read() for f in request.files.getlist("photos")],
            note=form.get("note"),
            zone=form.get("zone"),
            je_comment=form.get("jeComment"),
        )
        return jsonify({"ok": True, "eventId": event_id, "rollup": to_jsonable(rollup)}), 201

    @app.route("/api/progress/<int:event_id>/comment", methods=["POST"], endpoint="api_comment_progress")
    @officer_required
    def comment_progress(event_id: int):
        body = _json_body()
        container.progress_service.comment_on_event(
            current_officer_code(),
            require_non_empty(body.get("projectId"), "projectId"),
            event_id,
            body.get("comment"),
        )
        return jsonify({"ok": True})

    @app.route("/api/stages/verify", methods=["POST"], endpoint="api_verify_stage")
    @officer_required
    def verify_stage():
        body = _json_body()
        verification, rollup = container.progress_service.verify_stage(
            current_officer_code(),
            require_non_empty(body.get("projectId"), "projectId"),
            require_non_empty(body.get("packageId"), "packageId"),
            int(require_number(body.get("stageId"), "stageId")),
            int(require_number(body.get("eventId"), "eventId")),
            body.get("percent"),
            body.get("sdoComment"),
        )
        return jsonify({"ok": True, "verification": to_jsonable(verification), "rollup": to_jsonable(rollup)})

    @app.route("/api/stages", methods=["POST"], endpoint="api_create_stage")
    @officer_required
    def create_stage():
        body = _json_body()
        stage = container.progress_service.create_stage(
            current_officer_code(),
            require_non_empty(body.get("projectId"), "projectId"),
            require_non_empty(body.get("packageId"), "packageId"),
            body.get("name"),
            body.get("order"),
            body.get("weightPercent"),
        )
        return jsonify({"ok": True, "stage": to_jsonable(stage)}), 201

    @app.route("/api/stages", methods=["GET"], endpoint="api_list_stages")
    @officer_required
    def list_stages():
        stages = container.progress_service.list_stages(
            current_officer_code(),
            require_non_empty(request.args.get("projectId"), "projectId"),
            require_non_empty(request.args.get("packageId"), "packageId"),
        )
        return jsonify({"ok": True, "stages": to_jsonable(stages)})
