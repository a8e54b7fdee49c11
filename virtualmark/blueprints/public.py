from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request

from virtualmark.blueprints.admin import serialize
from virtualmark.content import get_content
from virtualmark.content import queries
from virtualmark.schemas.content import BLOG_CATEGORIES

bp = Blueprint("public", __name__)


def _page_arg() -> int:
    try:
        return int(request.args.get("page", 1))
    except ValueError:
        return 1


@bp.get("/posts")
def list_posts():
    posts = get_content().posts.list()
    query = request.args.get("q", "")
    category = request.args.get("category", queries.ALL)

    matches = queries.search_posts(posts, query=query, category=category)
    page = queries.paginate(matches, _page_arg(), current_app.config.get("POSTS_PER_PAGE", 6))
    featured = queries.featured_post(matches)
    return jsonify(
        {
            "items": [serialize(p) for p in page.items],
            "page": page.page,
            "pages": page.pages,
            "total": page.total,
            "featured": serialize(featured) if featured else None,
            "categories": [queries.ALL, *BLOG_CATEGORIES],
        }
    ), 200


@bp.get("/posts/recent")
def recent_posts():
    limit = current_app.config.get("RECENT_POSTS_LIMIT", 5)
    posts = queries.recent_posts(get_content().posts.list(), limit=limit)
    return jsonify({"items": [serialize(p) for p in posts]}), 200


@bp.get("/posts/<post_id>")
def get_post(post_id: str):
    repo = get_content().posts
    post = repo.get(post_id)
    if post is None or not post.is_published:
        return jsonify({"error": "not_found", "message": "resource not found"}), 404
    limit = current_app.config.get("RELATED_POSTS_LIMIT", 3)
    related = queries.related_posts(repo.list(), post, limit=limit)
    return jsonify({"post": serialize(post), "related": [serialize(p) for p in related]}), 200


@bp.get("/cases")
def list_cases():
    cases = get_content().cases.list()
    matches = queries.filter_cases(
        cases,
        industry=request.args.get("industry", queries.ALL),
        query=request.args.get("q", ""),
    )
    return jsonify(
        {
            "items": [serialize(c) for c in matches],
            "featured": [serialize(c) for c in queries.featured_cases(cases)],
            "industries": queries.industries(queries.published(cases)),
        }
    ), 200


@bp.get("/cases/<slug>")
def get_case(slug: str):
    case = queries.find_case_by_slug(queries.published(get_content().cases.list()), slug)
    if case is None:
        return jsonify({"error": "not_found", "message": "resource not found"}), 404
    return jsonify({"case": serialize(case)}), 200
