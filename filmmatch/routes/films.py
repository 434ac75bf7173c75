from flask import Blueprint, request, jsonify

from filmmatch.errors import ValidationError
from filmmatch.identity import resolve_current_user_id
from filmmatch.services import queries, toggles
from filmmatch.services.recommendations import get_recommendations
from filmmatch.transactions import request_cancellation

bp = Blueprint("films", __name__)


@bp.route("", methods=["GET"])
def list_films():
    """
    GET /api/films?categoryId=<id>&search=<text>
    Catalog listing with optional category filter and title search.
    """
    resolve_current_user_id()
    result = queries.get_all_films(
        category_id=request.args.get("categoryId") or None,
        search=request.args.get("search") or None,
    )
    return jsonify(result.to_dict())


@bp.route("/<film_id>", methods=["GET"])
def get_film(film_id):
    resolve_current_user_id()
    return jsonify(queries.get_film(film_id).to_dict())


@bp.route("/<film_id>/like", methods=["POST"])
def toggle_like(film_id):
    """
    POST /api/films/<film_id>/like
    Like the film, or remove the like if it is already liked.

    Returns: {"filmId": ..., "state": "liked" | "neutral", "createdAt": ..., "updatedAt": ...}
    """
    user_id = resolve_current_user_id()
    result = toggles.toggle_like(user_id, film_id, cancellation=request_cancellation())
    return jsonify(result.to_dict())


@bp.route("/<film_id>/dislike", methods=["POST"])
def toggle_dislike(film_id):
    """
    POST /api/films/<film_id>/dislike
    Dislike the film, or remove the dislike if it is already disliked.
    """
    user_id = resolve_current_user_id()
    result = toggles.toggle_dislike(user_id, film_id, cancellation=request_cancellation())
    return jsonify(result.to_dict())


@bp.route("/<film_id>/bookmark", methods=["POST"])
def bookmark(film_id):
    user_id = resolve_current_user_id()
    result = toggles.bookmark_film(user_id, film_id, cancellation=request_cancellation())
    return jsonify(result.to_dict())


@bp.route("/<film_id>/bookmark", methods=["DELETE"])
def unbookmark(film_id):
    user_id = resolve_current_user_id()
    result = toggles.unbookmark_film(user_id, film_id, cancellation=request_cancellation())
    return jsonify(result.to_dict())


@bp.route("/liked", methods=["GET"])
def liked_films():
    user_id = resolve_current_user_id()
    return jsonify(queries.get_liked_films(user_id).to_dict())


@bp.route("/disliked", methods=["GET"])
def disliked_films():
    """
    GET /api/films/disliked?userId=<id>
    Disliked films of the acting user, or of another user when userId is given.
    """
    user_id = resolve_current_user_id()
    result = queries.get_disliked_films(user_id, target_user_id=request.args.get("userId") or None)
    return jsonify(result.to_dict())


@bp.route("/bookmarked", methods=["GET"])
def bookmarked_films():
    user_id = resolve_current_user_id()
    return jsonify(queries.get_bookmarked_films(user_id).to_dict())


@bp.route("/recommendations", methods=["GET"])
def recommendations():
    """
    GET /api/films/recommendations?limit=<n>
    Ranked films the user has not liked or disliked yet.
    """
    user_id = resolve_current_user_id()
    limit = None
    if "limit" in request.args:
        limit = request.args.get("limit", type=int)
        if limit is None or limit <= 0:
            raise ValidationError("limit must be a positive integer")
    return jsonify(get_recommendations(user_id, limit=limit).to_dict())
