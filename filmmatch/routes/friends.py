from flask import Blueprint, request, jsonify

from filmmatch.errors import ValidationError
from filmmatch.identity import resolve_current_user_id
from filmmatch.services import friends
from filmmatch.transactions import request_cancellation

bp = Blueprint("friends", __name__)


@bp.route("", methods=["GET"])
def user_friends():
    user_id = resolve_current_user_id()
    return jsonify(friends.get_all_user_friends(user_id).to_dict())


@bp.route("/possible", methods=["GET"])
def possible_friends():
    """
    GET /api/friends/possible?search=<name>
    Users without an existing friendship or pending request with the acting user.
    """
    user_id = resolve_current_user_id()
    result = friends.get_all_possible_friends(user_id, search=request.args.get("search") or None)
    return jsonify(result.to_dict())


@bp.route("/<friend_id>", methods=["DELETE"])
def delete_friend(friend_id):
    user_id = resolve_current_user_id()
    friends.delete_friend(user_id, friend_id, cancellation=request_cancellation())
    return "", 204


@bp.route("/requests", methods=["POST"])
def send_request():
    """
    POST /api/friends/requests
    Send a friend request.

    Expected JSON body (receiverId may also be passed as a query parameter):
    {
        "receiverId": "<user id>",
        "message": "optional text"
    }
    """
    user_id = resolve_current_user_id()
    data = request.get_json(silent=True) or {}
    receiver_id = data.get("receiverId") or request.args.get("receiverId")
    if not receiver_id:
        raise ValidationError("Missing required field: receiverId")

    message = data.get("message") or request.args.get("message") or ""
    result = friends.send_friend_request(user_id, receiver_id, message, cancellation=request_cancellation())
    return jsonify(result.to_dict()), 201


@bp.route("/requests", methods=["GET"])
def friend_requests():
    user_id = resolve_current_user_id()
    result = friends.get_all_friend_requests(user_id, search=request.args.get("search") or None)
    return jsonify(result.to_dict())


@bp.route("/requests/<request_id>/accept", methods=["POST"])
def accept_request(request_id):
    user_id = resolve_current_user_id()
    result = friends.accept_friend_request(user_id, request_id, cancellation=request_cancellation())
    return jsonify(result.to_dict())


@bp.route("/requests/<request_id>/decline", methods=["POST"])
def decline_request(request_id):
    user_id = resolve_current_user_id()
    result = friends.decline_friend_request(user_id, request_id, cancellation=request_cancellation())
    return jsonify(result.to_dict())
