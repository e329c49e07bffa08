"""Upvote toggle through the API and directly against the service."""

import unittest
from unittest.mock import MagicMock

from fastapi.testclient import TestClient
from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError

from campus_pulse.core.errors import NotFoundError
from campus_pulse.models import PingVote, User
from campus_pulse.services.votes import has_voted, toggle_vote
from helpers import ApiTestCase


class TestVoteApi(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.author = self.make_user("author")
        self.voter = self.make_user("voter")
        self.ping_id = self.post_ping(self.headers_for(self.author)).json()["pingId"]

    def vote(self, user, ping_id: int | None = None):
        return self.client.post(
            f"/pings/{ping_id or self.ping_id}/vote", headers=self.headers_for(user)
        )

    def feed_row(self) -> dict:
        return next(p for p in self.client.get("/pings").json() if p["id"] == self.ping_id)

    def test_toggle_on_then_off(self) -> None:
        first = self.vote(self.voter)
        self.assertEqual(first.status_code, 200)
        self.assertEqual(first.json(), {"message": "Upvoted!", "voted": True})
        self.assertEqual(self.stored_ping(self.ping_id).upvotes, 1)

        second = self.vote(self.voter)
        self.assertEqual(second.json(), {"message": "Vote removed", "voted": False})
        self.assertEqual(self.stored_ping(self.ping_id).upvotes, 0)
        self.assertEqual(self.session().query(PingVote).count(), 0)

    def test_votes_from_two_users(self) -> None:
        self.vote(self.voter)
        self.vote(self.author)
        row = self.feed_row()
        self.assertEqual(row["vote_count"], 2)
        self.assertEqual(row["upvotes"], 2)

    def test_counter_matches_rows_after_many_toggles(self) -> None:
        for _ in range(5):
            self.vote(self.voter)
        self.vote(self.author)
        row = self.feed_row()
        self.assertEqual(row["upvotes"], row["vote_count"])
        self.assertEqual(row["vote_count"], 2)

    def test_missing_ping(self) -> None:
        response = self.vote(self.voter, ping_id=9999)
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json(), {"message": "Ping not found"})

    def test_requires_token(self) -> None:
        response = self.client.post(f"/pings/{self.ping_id}/vote")
        self.assertEqual(response.status_code, 401)

    def test_vote_from_deleted_account_is_not_reported_as_stored(self) -> None:
        headers = self.headers_for(self.voter)
        db = self.session()
        db.execute(delete(User).where(User.id == self.voter.id))
        db.commit()

        client = TestClient(self.app, raise_server_exceptions=False)
        with self.assertLogs("campus_pulse.core.errors", level="ERROR"):
            response = client.post(f"/pings/{self.ping_id}/vote", headers=headers)
        self.assertEqual(response.status_code, 500)
        self.assertEqual(self.session().query(PingVote).count(), 0)
        self.assertEqual(self.stored_ping(self.ping_id).upvotes, 0)


class TestToggleVoteService(ApiTestCase):
    def test_toggle_in_session(self) -> None:
        user = self.make_user("voter")
        ping_id = self.post_ping(self.headers_for(user)).json()["pingId"]
        db = self.session()

        self.assertTrue(toggle_vote(db, user.id, ping_id))
        self.assertTrue(has_voted(db, user.id, ping_id))
        self.assertFalse(toggle_vote(db, user.id, ping_id))
        self.assertFalse(has_voted(db, user.id, ping_id))

    def test_unknown_ping_raises(self) -> None:
        user = self.make_user("voter")
        with self.assertRaises(NotFoundError):
            toggle_vote(self.session(), user.id, 4242)


def _result(first=None, rowcount=0) -> MagicMock:
    result = MagicMock()
    result.first.return_value = first
    result.rowcount = rowcount
    return result


class TestToggleVoteCollision(unittest.TestCase):
    """Insert races are simulated on a mocked session; SQLite cannot interleave two writers."""

    def setUp(self) -> None:
        self.db = MagicMock()
        self.db.flush.side_effect = IntegrityError("INSERT INTO ping_votes", {}, Exception("UNIQUE"))

    def test_row_inserted_by_concurrent_request_counts_as_voted(self) -> None:
        # ping lock, delete (nothing removed), then the re-check after rollback
        self.db.execute.side_effect = [_result(first=(7,)), _result(), _result(first=(1,))]

        self.assertTrue(toggle_vote(self.db, user_id=3, ping_id=7))
        self.db.rollback.assert_called_once()
        self.db.commit.assert_not_called()

    def test_other_integrity_errors_propagate(self) -> None:
        self.db.execute.side_effect = [_result(first=(7,)), _result(), _result(first=None)]

        with self.assertRaises(IntegrityError):
            toggle_vote(self.db, user_id=3, ping_id=7)
        self.db.rollback.assert_called_once()


if __name__ == "__main__":
    unittest.main()
