from __future__ import annotations

from functools import wraps

from flask import g, jsonify, request

OFFICER_HEADER = "X-Officer-Code"


def officer_required(view):
    """The upstream gateway authenticates and forwards the officer code in a header."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        code = (request.headers.get(OFFICER_HEADER) or "").strip()
        if not code:
            return jsonify({"ok": False, "error": f"Missing {OFFICER_HEADER} header"}), 401
        g.officer_code = code
        return view(*args, **kwargs)

    return wrapper


def current_officer_code() -> str:
    return g.officer_code
