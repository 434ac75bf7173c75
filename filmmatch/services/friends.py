"""
Friend graph: friend-request lifecycle and symmetric friendship rows.

State machine per ordered (sender, receiver) pair:

    NoRequest --send--> Pending --accept--> Friends --delete--> NoRequest
                           \\--decline--> NoRequest

Accepting writes two UserFriend rows (A->B and B->A) in the same unit of work;
deleting a friendship soft-deletes both.
"""

from typing import Optional, Set

from sqlalchemy import and_, or_

from filmmatch.errors import ConflictError, NotFoundError, ValidationError
from filmmatch.logging_config import get_logger
from filmmatch.metrics import track_friend_transition
from filmmatch.models import db, User, FriendRequest, UserFriend
from filmmatch.notifications import get_notification_sender
from filmmatch.schemas import (
    FriendList, FriendSummary, FriendRequestList, FriendRequestSummary,
    FriendRequestResult, UserList,
)
from filmmatch.services.queries import get_active_user, search_pattern, to_user_summary
from filmmatch.transactions import CancellationToken, unit_of_work

logger = get_logger(__name__)


def friend_ids(user_id: str) -> Set[str]:
    """Ids of the user's current friends whose accounts are still active."""
    rows = (
        db.session.query(UserFriend.friend_id)
        .join(User, User.id == UserFriend.friend_id)
        .filter(
            UserFriend.user_id == user_id,
            UserFriend.is_deleted.is_(False),
            User.is_deleted.is_(False),
        )
        .all()
    )
    return {friend_id for (friend_id,) in rows}


def _pending_between(first_id: str, second_id: str):
    """Pending requests between two users, in either direction."""
    return FriendRequest.active().filter(
        FriendRequest.is_accepted.is_(False),
        or_(
            and_(FriendRequest.sender_id == first_id, FriendRequest.receiver_id == second_id),
            and_(FriendRequest.sender_id == second_id, FriendRequest.receiver_id == first_id),
        ),
    )


def _friendship_rows(user_id: str, friend_id: str):
    return UserFriend.active().filter(
        or_(
            and_(UserFriend.user_id == user_id, UserFriend.friend_id == friend_id),
            and_(UserFriend.user_id == friend_id, UserFriend.friend_id == user_id),
        )
    ).all()


def _request_for_receiver(user_id: str, request_id: str) -> FriendRequest:
    """
    Load a request addressed to ``user_id``.

    Raises:
        NotFoundError: No such request for this receiver, or its sender is gone
        ConflictError: The request was already accepted or declined
    """
    friend_request = (
        FriendRequest.query
        .join(User, User.id == FriendRequest.sender_id)
        .filter(
            FriendRequest.id == request_id,
            FriendRequest.receiver_id == user_id,
            User.is_deleted.is_(False),
        )
        .first()
    )
    if friend_request is None:
        raise NotFoundError(f"Friend request {request_id} not found", entity="friend_request")
    if not friend_request.is_pending:
        raise ConflictError(f"Friend request {request_id} is already resolved", entity="friend_request")
    return friend_request


def send_friend_request(
    sender_id: str,
    receiver_id: str,
    message: str = "",
    cancellation: Optional[CancellationToken] = None,
) -> FriendRequestResult:
    """
    Create a pending friend request.

    Raises:
        ValidationError: Self request, or a pending request already exists either way
        NotFoundError: The receiver does not exist
        ConflictError: The users are already friends
    """
    if sender_id == receiver_id:
        raise ValidationError("You cannot send a friend request to yourself", entity="friend_request")

    with unit_of_work("send_friend_request", cancellation) as session:
        get_active_user(receiver_id)

        if receiver_id in friend_ids(sender_id):
            raise ConflictError("Users are already friends", entity="friendship")
        if _pending_between(sender_id, receiver_id).first() is not None:
            raise ValidationError("A pending friend request already exists", entity="friend_request")

        friend_request = FriendRequest(sender_id=sender_id, receiver_id=receiver_id, message=message or "")
        session.add(friend_request)
        session.flush()
        request_id = friend_request.id

    track_friend_transition('sent')
    logger.info("friend_request_sent", friend_request_id=request_id, receiver_id=receiver_id)
    get_notification_sender().notify(receiver_id, "You have a new friend request")
    return FriendRequestResult(request_id=request_id, is_accepted=False, message="Friend request sent")


def accept_friend_request(
    user_id: str,
    request_id: str,
    cancellation: Optional[CancellationToken] = None,
) -> FriendRequestResult:
    """
    Accept a pending request addressed to ``user_id`` and create both friendship rows.

    Raises:
        NotFoundError: No such request for this receiver
        ConflictError: The request was already resolved
    """
    with unit_of_work("accept_friend_request", cancellation) as session:
        friend_request = _request_for_receiver(user_id, request_id)
        sender_id = friend_request.sender_id

        friend_request.is_accepted = True
        friend_request.soft_delete()

        existing = {(row.user_id, row.friend_id) for row in _friendship_rows(user_id, sender_id)}
        for pair in ((user_id, sender_id), (sender_id, user_id)):
            if pair not in existing:
                session.add(UserFriend(user_id=pair[0], friend_id=pair[1]))

    track_friend_transition('accepted')
    logger.info("friend_request_accepted", friend_request_id=request_id, sender_id=sender_id)
    get_notification_sender().notify(sender_id, "Your friend request was accepted")
    return FriendRequestResult(request_id=request_id, is_accepted=True, message="Friend request accepted")


def decline_friend_request(
    user_id: str,
    request_id: str,
    cancellation: Optional[CancellationToken] = None,
) -> FriendRequestResult:
    """
    Decline a pending request; no friendship rows are created.

    Raises:
        NotFoundError: No such request for this receiver
        ConflictError: The request was already resolved
    """
    with unit_of_work("decline_friend_request", cancellation):
        friend_request = _request_for_receiver(user_id, request_id)
        friend_request.soft_delete()

    track_friend_transition('declined')
    logger.info("friend_request_declined", friend_request_id=request_id)
    return FriendRequestResult(request_id=request_id, is_accepted=False, message="Friend request declined")


def delete_friend(user_id: str, friend_id: str, cancellation: Optional[CancellationToken] = None):
    """
    End a friendship by soft-deleting both symmetric rows.

    Raises:
        NotFoundError: The users are not friends
    """
    with unit_of_work("delete_friend", cancellation):
        rows = _friendship_rows(user_id, friend_id)
        if not rows:
            raise NotFoundError(f"Friendship with {friend_id} not found", entity="friendship")
        for row in rows:
            row.soft_delete()

    track_friend_transition('friend_deleted')
    logger.info("friend_deleted", friend_id=friend_id, rows=len(rows))


def get_all_user_friends(user_id: str) -> FriendList:
    rows = (
        db.session.query(UserFriend, User)
        .join(User, User.id == UserFriend.friend_id)
        .filter(
            UserFriend.user_id == user_id,
            UserFriend.is_deleted.is_(False),
            User.is_deleted.is_(False),
        )
        .order_by(UserFriend.created_at, UserFriend.id)
        .all()
    )
    friends = [
        FriendSummary(
            id=user.id,
            name=user.name,
            has_subscription=user.has_subscription,
            friends_since=friendship.created_at,
        )
        for friendship, user in rows
    ]
    logger.info("user_friends_listed", count=len(friends))
    return FriendList(friends=friends)


def get_all_possible_friends(user_id: str, search: Optional[str] = None) -> UserList:
    """
    Active users the acting user could befriend.

    Excludes the user, existing friends and anyone with a pending request in
    either direction.
    """
    excluded = friend_ids(user_id)
    excluded.add(user_id)

    pending = (
        db.session.query(FriendRequest.sender_id, FriendRequest.receiver_id)
        .filter(
            FriendRequest.is_deleted.is_(False),
            FriendRequest.is_accepted.is_(False),
            or_(FriendRequest.sender_id == user_id, FriendRequest.receiver_id == user_id),
        )
        .all()
    )
    for sender_id, receiver_id in pending:
        excluded.add(sender_id)
        excluded.add(receiver_id)

    query = User.active().filter(User.id.notin_(excluded))
    if search:
        query = query.filter(User.name.ilike(search_pattern(search), escape="\\"))
    users = query.order_by(User.created_at, User.id).all()

    logger.info("possible_friends_listed", count=len(users))
    return UserList(users=[to_user_summary(user) for user in users])


def get_all_friend_requests(user_id: str, search: Optional[str] = None) -> FriendRequestList:
    """Pending requests addressed to the user, optionally filtered by sender name."""
    query = (
        db.session.query(FriendRequest, User)
        .join(User, User.id == FriendRequest.sender_id)
        .filter(
            FriendRequest.receiver_id == user_id,
            FriendRequest.is_deleted.is_(False),
            FriendRequest.is_accepted.is_(False),
            User.is_deleted.is_(False),
        )
    )
    if search:
        query = query.filter(User.name.ilike(search_pattern(search), escape="\\"))
    rows = query.order_by(FriendRequest.created_at, FriendRequest.id).all()

    requests = [
        FriendRequestSummary(
            id=friend_request.id,
            sender=to_user_summary(sender),
            receiver_id=friend_request.receiver_id,
            message=friend_request.message,
            is_accepted=friend_request.is_accepted,
            created_at=friend_request.created_at,
        )
        for friend_request, sender in rows
    ]
    logger.info("friend_requests_listed", count=len(requests))
    return FriendRequestList(requests=requests)
