"""
Tests for the friend-request lifecycle and friendship queries.
"""

from unittest.mock import patch

import pytest

from filmmatch.errors import ConflictError, NotFoundError, ValidationError
from filmmatch.models import db, FriendRequest, UserFriend
from filmmatch.services.friends import (
    send_friend_request,
    accept_friend_request,
    decline_friend_request,
    delete_friend,
    get_all_user_friends,
    get_all_possible_friends,
    get_all_friend_requests,
    friend_ids,
)


def befriend(sender, receiver):
    result = send_friend_request(sender.id, receiver.id)
    accept_friend_request(receiver.id, result.request_id)


class TestSendFriendRequest:

    def test_creates_pending_request(self, alice, bob):
        result = send_friend_request(alice.id, bob.id, "Watch Dune with me?")

        friend_request = db.session.get(FriendRequest, result.request_id)
        assert friend_request.sender_id == alice.id
        assert friend_request.receiver_id == bob.id
        assert friend_request.message == "Watch Dune with me?"
        assert friend_request.is_pending

    def test_self_request_rejected(self, alice):
        with pytest.raises(ValidationError):
            send_friend_request(alice.id, alice.id)
        assert FriendRequest.query.count() == 0

    def test_duplicate_pending_rejected(self, alice, bob):
        send_friend_request(alice.id, bob.id)

        with pytest.raises(ValidationError):
            send_friend_request(alice.id, bob.id)
        assert FriendRequest.query.count() == 1

    def test_reverse_pending_rejected(self, alice, bob):
        send_friend_request(alice.id, bob.id)

        with pytest.raises(ValidationError):
            send_friend_request(bob.id, alice.id)

    def test_already_friends_rejected(self, alice, bob):
        befriend(alice, bob)

        with pytest.raises(ConflictError):
            send_friend_request(bob.id, alice.id)

    def test_unknown_receiver(self, alice):
        with pytest.raises(NotFoundError):
            send_friend_request(alice.id, "missing-user")

    def test_can_send_again_after_decline(self, alice, bob):
        first = send_friend_request(alice.id, bob.id)
        decline_friend_request(bob.id, first.request_id)

        second = send_friend_request(alice.id, bob.id)
        assert second.request_id != first.request_id

    def test_receiver_is_notified(self, alice, bob):
        with patch("filmmatch.notifications.NotificationSender.notify") as mock_notify:
            send_friend_request(alice.id, bob.id)

        mock_notify.assert_called_once_with(bob.id, "You have a new friend request")


class TestAcceptFriendRequest:

    def test_creates_symmetric_rows(self, alice, bob):
        result = send_friend_request(alice.id, bob.id)
        accepted = accept_friend_request(bob.id, result.request_id)

        assert accepted.is_accepted is True
        rows = UserFriend.active().all()
        assert len(rows) == 2
        assert {(row.user_id, row.friend_id) for row in rows} == {(alice.id, bob.id), (bob.id, alice.id)}

        friend_request = db.session.get(FriendRequest, result.request_id)
        assert friend_request.is_accepted
        assert not friend_request.is_pending

    def test_accept_twice_conflicts(self, alice, bob):
        result = send_friend_request(alice.id, bob.id)
        accept_friend_request(bob.id, result.request_id)

        with pytest.raises(ConflictError):
            accept_friend_request(bob.id, result.request_id)
        assert UserFriend.active().count() == 2

    def test_only_receiver_can_accept(self, alice, bob):
        result = send_friend_request(alice.id, bob.id)

        with pytest.raises(NotFoundError):
            accept_friend_request(alice.id, result.request_id)
        assert UserFriend.query.count() == 0

    def test_unknown_request(self, bob):
        with pytest.raises(NotFoundError):
            accept_friend_request(bob.id, "missing-request")

    def test_accept_declined_request_conflicts(self, alice, bob):
        result = send_friend_request(alice.id, bob.id)
        decline_friend_request(bob.id, result.request_id)

        with pytest.raises(ConflictError):
            accept_friend_request(bob.id, result.request_id)

    def test_sender_is_notified(self, alice, bob):
        result = send_friend_request(alice.id, bob.id)

        with patch("filmmatch.notifications.NotificationSender.notify") as mock_notify:
            accept_friend_request(bob.id, result.request_id)

        mock_notify.assert_called_once_with(alice.id, "Your friend request was accepted")


class TestDeclineFriendRequest:

    def test_decline_creates_no_friendship(self, alice, bob):
        result = send_friend_request(alice.id, bob.id)
        declined = decline_friend_request(bob.id, result.request_id)

        assert declined.is_accepted is False
        assert UserFriend.query.count() == 0
        assert get_all_friend_requests(bob.id).requests == []


class TestDeleteFriend:

    def test_removes_both_rows(self, alice, bob):
        befriend(alice, bob)
        delete_friend(alice.id, bob.id)

        assert UserFriend.active().count() == 0
        assert get_all_user_friends(alice.id).friends == []
        assert get_all_user_friends(bob.id).friends == []

    def test_rows_are_soft_deleted(self, alice, bob):
        befriend(alice, bob)
        delete_friend(bob.id, alice.id)

        rows = UserFriend.query.all()
        assert len(rows) == 2
        assert all(row.is_deleted for row in rows)

    def test_not_friends(self, alice, bob):
        with pytest.raises(NotFoundError):
            delete_friend(alice.id, bob.id)

    def test_can_befriend_again(self, alice, bob):
        befriend(alice, bob)
        delete_friend(alice.id, bob.id)
        befriend(bob, alice)

        assert friend_ids(alice.id) == {bob.id}
        assert friend_ids(bob.id) == {alice.id}


class TestFriendQueries:

    def test_user_friends_from_both_sides(self, alice, bob, carol):
        befriend(alice, bob)
        befriend(carol, alice)

        alice_friends = [friend.id for friend in get_all_user_friends(alice.id).friends]
        assert sorted(alice_friends) == sorted([bob.id, carol.id])
        assert [friend.id for friend in get_all_user_friends(bob.id).friends] == [alice.id]

    def test_possible_friends_excludes_self_friends_and_pending(self, make_user, alice, bob, carol):
        dave = make_user("Dave")
        erin = make_user("Erin")
        befriend(alice, bob)
        send_friend_request(alice.id, carol.id)
        send_friend_request(dave.id, alice.id)

        possible = get_all_possible_friends(alice.id)
        assert [user.id for user in possible.users] == [erin.id]

    def test_possible_friends_ordered_by_creation(self, alice, bob, carol):
        possible = get_all_possible_friends(alice.id)
        assert [user.name for user in possible.users] == ["Bob", "Carol"]

    def test_possible_friends_skips_deleted_users(self, alice, bob, carol):
        carol.soft_delete()
        db.session.commit()

        possible = get_all_possible_friends(alice.id)
        assert [user.id for user in possible.users] == [bob.id]

    def test_possible_friends_search(self, alice, bob, carol):
        possible = get_all_possible_friends(alice.id, search="car")
        assert [user.name for user in possible.users] == ["Carol"]

    def test_friend_requests_addressed_to_user(self, alice, bob, carol):
        send_friend_request(bob.id, alice.id, "hi")
        send_friend_request(carol.id, alice.id)

        requests = get_all_friend_requests(alice.id).requests
        assert [request.sender.name for request in requests] == ["Bob", "Carol"]
        assert requests[0].message == "hi"
        assert get_all_friend_requests(bob.id).requests == []

    def test_friend_requests_search(self, alice, bob, carol):
        send_friend_request(bob.id, alice.id)
        send_friend_request(carol.id, alice.id)

        requests = get_all_friend_requests(alice.id, search="bo").requests
        assert [request.sender.id for request in requests] == [bob.id]

    def test_search_wildcards_match_literally(self, alice, bob, carol, make_user):
        make_user("Under_Score")

        assert get_all_possible_friends(alice.id, search="%").users == []
        possible = get_all_possible_friends(alice.id, search="_")
        assert [user.name for user in possible.users] == ["Under_Score"]


class TestDeletedCounterparts:

    def test_request_from_deleted_sender_cannot_be_accepted(self, alice, bob):
        result = send_friend_request(alice.id, bob.id)
        alice.soft_delete()
        db.session.commit()

        with pytest.raises(NotFoundError):
            accept_friend_request(bob.id, result.request_id)
        assert UserFriend.active().count() == 0

    def test_request_from_deleted_sender_cannot_be_declined(self, alice, bob):
        result = send_friend_request(alice.id, bob.id)
        alice.soft_delete()
        db.session.commit()

        with pytest.raises(NotFoundError):
            decline_friend_request(bob.id, result.request_id)

    def test_deleted_friend_not_in_friend_ids(self, alice, bob):
        befriend(alice, bob)
        bob.soft_delete()
        db.session.commit()

        assert friend_ids(alice.id) == set()


class TestPendingPairGuard:

    def test_database_rejects_crossed_pending_requests(self, alice, bob):
        from sqlalchemy.exc import IntegrityError

        db.session.add(FriendRequest(sender_id=alice.id, receiver_id=bob.id))
        db.session.commit()

        db.session.add(FriendRequest(sender_id=bob.id, receiver_id=alice.id))
        with pytest.raises(IntegrityError):
            db.session.commit()
        db.session.rollback()

        assert FriendRequest.active().count() == 1

    def test_resolved_request_frees_the_pair(self, alice, bob):
        first = send_friend_request(alice.id, bob.id)
        decline_friend_request(bob.id, first.request_id)

        second = send_friend_request(bob.id, alice.id)
        pair_keys = {request.pair_key for request in FriendRequest.query.all()}
        assert len(pair_keys) == 1
        assert second.request_id != first.request_id
