from flask import Blueprint, request, jsonify

from filmmatch.identity import resolve_current_user_id
from filmmatch.services import queries

bp = Blueprint("users", __name__)


@bp.route("/me", methods=["GET"])
def current_user():
    user_id = resolve_current_user_id()
    return jsonify(queries.get_username_by_id(user_id).to_dict())


@bp.route("/usernames", methods=["GET"])
def usernames():
    """
    GET /api/users/usernames?query=<text>
    Active users whose name contains the query.
    """
    resolve_current_user_id()
    return jsonify(queries.get_usernames(request.args.get("query") or None).to_dict())


@bp.route("/<user_id>/username", methods=["GET"])
def username_by_id(user_id):
    resolve_current_user_id()
    return jsonify(queries.get_username_by_id(user_id).to_dict())
