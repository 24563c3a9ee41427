from flask import Blueprint, request, jsonify

from services import case_study_store as store

cases_public_bp = Blueprint("cases_public", __name__, url_prefix="/api")


@cases_public_bp.get("/case-studies")
def list_cases_public():
    limit = request.args.get("limit", 50, type=int)
    if limit < 1 or limit > 50: limit = 50
    try:
        items = store.list_by_date(limit=limit)
    except store.StoreError:
        return jsonify({"code": "STORE_ERROR", "message": "Error loading case studies"}), 503
    return jsonify({"items": [c.to_dict(with_content=False) for c in items]})


@cases_public_bp.get("/case-studies/<slug>")
def get_case_public(slug):
    c = store.get_by_slug(slug)
    if c is None:
        return jsonify({"code": "NOT_FOUND", "message": "case study not found"}), 404
    try:
        related = store.select_related(c)
    except store.StoreError:
        related = []
    data = c.to_dict()
    data["related"] = [r.to_dict(with_content=False) for r in related]
    return jsonify(data)
