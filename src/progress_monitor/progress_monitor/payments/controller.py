from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.principal import current_officer_code, officer_required
from ..common.serialization import to_jsonable
from ..common.validators import require_non_empty
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/payments", methods=["POST"], endpoint="api_add_payment")
    @officer_required
    def add_payment():
        body = request.get_json(silent=True) or {}
        payment, rollup = container.payment_service.add_payment(
            current_officer_code(),
            require_non_empty(body.get("projectId"), "projectId"),
            body.get("billNo"),
            body.get("billDate"),
            body.get("amount"),
            package_id=body.get("packageId") or None,
        )
        return (
            jsonify(
                {
                    "ok": True,
                    "payment": to_jsonable(payment),
                    "projectFinancialPercent": rollup.project_financial_percent,
                    "packageFinancialPercent": rollup.package_financial_percent,
                }
            ),
            201,
        )
