"""
Unit tests for the in-memory attempt log.
"""

from datetime import datetime, timedelta

from src.db.attempt_log import InMemoryAttemptLog

START = datetime(2025, 1, 6, 9, 0)


class TestInMemoryAttemptLog:
    def _log(self, make_attempt):
        log = InMemoryAttemptLog()
        for i in range(6):
            topic = "Trees" if i % 2 else "Arrays"
            log.append("u1", make_attempt(accuracy=i % 2, topic=topic, timestamp=START + timedelta(minutes=i)))
        log.append("u1", make_attempt(subject="Python", timestamp=START))
        log.append("u2", make_attempt(timestamp=START))
        return log

    def test_recent_is_newest_first_and_limited(self, make_attempt):
        recent = self._log(make_attempt).recent("u1", "DSA", limit=3)

        assert [a.timestamp.minute for a in recent] == [5, 4, 3]

    def test_recent_topic_scope(self, make_attempt):
        recent = self._log(make_attempt).recent("u1", "DSA", topic="Trees")

        assert len(recent) == 3
        assert all(a.topic == "Trees" for a in recent)

    def test_history_oldest_first(self, make_attempt):
        history = self._log(make_attempt).history("u1", "DSA")

        assert [a.timestamp.minute for a in history] == [0, 1, 2, 3, 4, 5]

    def test_history_across_subjects(self, make_attempt):
        log = self._log(make_attempt)

        assert len(log.history("u1")) == 7
        assert len(log) == 8

    def test_insertion_order_without_timestamps(self, make_attempt):
        first, second = make_attempt(accuracy=1), make_attempt(accuracy=0)
        log = InMemoryAttemptLog.for_user("u1", [first, second])

        assert log.recent("u1", "DSA") == [second, first]
        assert log.history("u1", "DSA") == [first, second]
