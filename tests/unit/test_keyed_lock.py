"""
Unit tests for the per-profile lock registry.
"""

import gc

from src.study.study_service import KeyedLock


class TestKeyedLock:
    def test_same_key_shares_lock(self):
        locks = KeyedLock()
        first = locks.get(("u1", "DSA"))

        assert locks.get(("u1", "DSA")) is first
        assert locks.get(("u2", "DSA")) is not first

    def test_unused_locks_are_dropped(self):
        locks = KeyedLock()
        held = locks.get(("u1", "DSA"))
        for user in range(50):
            with locks.get((f"user-{user}", "DSA")):
                pass
        gc.collect()

        assert len(locks) == 1
        assert locks.get(("u1", "DSA")) is held
