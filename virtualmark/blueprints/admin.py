"""
Admin JSON API for posts and case studies.

Both content kinds share one set of routes, keyed by table name. Writes go
through the kind's ``ContentRepository``; content-layer exceptions are turned
into JSON responses by the app-wide handlers in ``blueprints.errors``.
"""
from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request
from flask_login import current_user

from virtualmark.content import get_content
from virtualmark.content.repository import ContentRepository
from virtualmark.decorators import admin_required
from virtualmark.extensions import limiter

bp = Blueprint("admin", __name__)

TABLES = "any(posts, cases)"
WRITE_LIMIT = "10 per minute; 150 per hour"


def serialize(record) -> dict:
    return record.model_dump(mode="json", by_alias=True)


def _repository(table: str) -> ContentRepository:
    return get_content().repository(table)


def _body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


@bp.get("/api/dashboard")
@admin_required
def dashboard():
    return jsonify({"status": "ok", "stats": get_content().dashboard()}), 200


@bp.get(f"/api/<{TABLES}:table>")
@admin_required
def list_records(table: str):
    repo = _repository(table)
    records = repo.list()
    stats = get_content().dashboard()[table]
    return jsonify({"items": [serialize(r) for r in records], "stats": stats}), 200


@bp.get(f"/api/<{TABLES}:table>/blank")
@admin_required
def blank_record(table: str):
    """Field defaults for the "new" form."""
    repo = _repository(table)
    if table == "posts":
        draft = repo.new_draft(
            author=current_user.username,
            image_url=current_app.config.get("DEFAULT_POST_IMAGE", ""),
            read_time=current_app.config.get("DEFAULT_READ_TIME", "5 min"),
        )
    else:
        draft = repo.new_draft()
    return jsonify({"item": serialize(draft.record)}), 200


@bp.get(f"/api/<{TABLES}:table>/<record_id>")
@admin_required
def get_record(table: str, record_id: str):
    record = _repository(table).get(record_id)
    if record is None:
        return jsonify({"error": "not_found", "message": "resource not found"}), 404
    return jsonify({"item": serialize(record)}), 200


@bp.post(f"/api/<{TABLES}:table>")
@limiter.limit(WRITE_LIMIT)
@admin_required
def create_record(table: str):
    repo = _repository(table)
    record = repo.kind.parse({**_body(), "id": ""})
    created = repo.create(record)
    return jsonify({"status": "ok", "item": serialize(created)}), 201


@bp.put(f"/api/<{TABLES}:table>/<record_id>")
@limiter.limit(WRITE_LIMIT)
@admin_required
def update_record(table: str, record_id: str):
    repo = _repository(table)
    if repo.get(record_id) is None:
        return jsonify({"error": "not_found", "message": "resource not found"}), 404
    record = repo.kind.parse({**_body(), "id": record_id})
    updated = repo.update(record)
    return jsonify({"status": "ok", "item": serialize(updated)}), 200


@bp.post(f"/api/<{TABLES}:table>/<record_id>/status")
@limiter.limit(WRITE_LIMIT)
@admin_required
def toggle_record_status(table: str, record_id: str):
    updated = _repository(table).toggle_status(record_id)
    return jsonify({"status": "ok", "item": serialize(updated)}), 200


@bp.delete(f"/api/<{TABLES}:table>/<record_id>")
@limiter.limit(WRITE_LIMIT)
@admin_required
def delete_record(table: str, record_id: str):
    repo = _repository(table)
    if repo.get(record_id) is None:
        return jsonify({"error": "not_found", "message": "resource not found"}), 404
    repo.delete(record_id)
    current_app.logger.info(f"{repo.kind.name} {record_id} deleted by {current_user.username}")
    return jsonify({"status": "ok"}), 200


@bp.post(f"/api/<{TABLES}:table>/refresh")
@admin_required
def refresh_records(table: str):
    records = _repository(table).refresh()
    return jsonify({"status": "ok", "count": len(records)}), 200
