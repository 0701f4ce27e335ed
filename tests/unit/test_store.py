"""
Тесты хранилища на SQLite в памяти.
"""
import unittest
from datetime import timedelta
from unittest.mock import patch

from sqlalchemy import false
from sqlalchemy.exc import OperationalError

from hrtests.database import create_db_engine
from hrtests.exceptions import StoreError
from hrtests.store import SESSION_TTL, ResultStore
from tests.mocks.fakes import TickingClock


def make_store(clock=None):
    store = ResultStore(create_db_engine("sqlite://"), clock=clock or TickingClock())
    store.init_schema()
    return store


class TestUpsertUser(unittest.TestCase):

    def setUp(self):
        self.store = make_store()

    def test_first_submission_creates_user(self):
        result = self.store.upsert_user("Алиса", "@alice", "broker")

        self.assertTrue(result.is_new)
        user = self.store.get_user("@alice")
        self.assertEqual(user.id, result.id)
        self.assertEqual(user.full_name, "Алиса")
        self.assertTrue(user.is_active)

    def test_repeat_submission_touches_last_login(self):
        first = self.store.upsert_user("Алиса", "@alice", "broker")
        before = self.store.get_user("@alice").last_login

        second = self.store.upsert_user("Алиса П.", "@alice", "manager")

        self.assertFalse(second.is_new)
        self.assertEqual(second.id, first.id)
        user = self.store.get_user("@alice")
        self.assertGreater(user.last_login, before)
        # имя и должность не перезаписываются
        self.assertEqual(user.full_name, "Алиса")
        self.assertEqual(user.role, "broker")

    def test_role_defaults_to_broker(self):
        self.store.upsert_user("Боб", "@bob", None)
        self.assertEqual(self.store.get_user("@bob").role, "broker")

    def test_lost_insert_race_updates_existing_row(self):
        self.store.upsert_user("Алиса", "@alice", "broker")

        # другая вставка успела раньше: первый SELECT её ещё не видит
        real_session = self.store.Session

        def session_missing_first_lookup():
            db = real_session()
            original_query = db.query
            calls = {"n": 0}

            def query(*args, **kwargs):
                q = original_query(*args, **kwargs)
                calls["n"] += 1
                if calls["n"] == 1:
                    return q.filter(false())
                return q

            db.query = query
            return db

        with patch.object(self.store, "Session", session_missing_first_lookup):
            result = self.store.upsert_user("Алиса", "@alice", "broker")

        self.assertFalse(result.is_new)
        self.assertEqual(len(self.store.list_users()), 1)

    def test_unknown_user(self):
        self.assertIsNone(self.store.get_user("@nobody"))


class TestResults(unittest.TestCase):

    def setUp(self):
        self.store = make_store()
        self.alice = self.store.upsert_user("Алиса", "@alice", "broker").id
        self.bob = self.store.upsert_user("Боб", "@bob", "manager").id

    def save(self, user_id, test_name="EQ", score=30, passed=True, test_type="emotional_intelligence", max_score=40):
        return self.store.save_test_result(
            user_id=user_id,
            test_name=test_name,
            test_type=test_type,
            score=score,
            max_score=max_score,
            passed=passed,
            answers={"score": score},
            analysis={"tier": "EXCELLENT", "text": "Отлично"},
        )

    def test_results_are_append_only(self):
        first = self.save(self.alice)
        second = self.save(self.alice)

        self.assertNotEqual(first, second)
        results = self.store.results_for_user(self.alice)
        self.assertEqual([r.id for r in results], [second, first])

    def test_json_blobs_are_decoded(self):
        self.save(self.alice)
        result = self.store.all_results()[0]

        self.assertEqual(result.answers, {"score": 30})
        self.assertEqual(result.analysis["text"], "Отлично")
        self.assertEqual(result.telegram, "@alice")
        self.assertEqual(result.full_name, "Алиса")

    def test_results_for_role(self):
        self.save(self.alice)
        self.save(self.bob)

        results = self.store.results_for_role("manager")
        self.assertEqual([r.user_id for r in results], [self.bob])

    def test_test_stats_average_is_mean(self):
        self.save(self.alice, score=30, passed=True)
        self.save(self.bob, score=18, passed=False)
        self.save(self.bob, score=27, passed=True)
        self.save(self.alice, test_name="DISC", test_type="personality", score=12, max_score=24)

        stats = self.store.test_stats()

        self.assertEqual(stats[0].test_name, "EQ")
        self.assertEqual(stats[0].total_attempts, 3)
        self.assertEqual(stats[0].passed_count, 2)
        self.assertAlmostEqual(stats[0].avg_score, 25.0)
        self.assertEqual(stats[0].max_score, 30)
        self.assertEqual(stats[0].min_score, 18)
        self.assertEqual(stats[1].test_name, "DISC")

    def test_nullable_score(self):
        self.store.save_test_result(
            user_id=self.alice, test_name="KFU", test_type="screening",
            score=None, max_score=8, passed=True,
        )
        stat = self.store.test_stats()[0]
        self.assertIsNone(stat.avg_score)
        self.assertIsNone(self.store.all_results()[0].answers)


class TestUsersAndRoles(unittest.TestCase):

    def test_list_users_newest_first(self):
        store = make_store()
        store.upsert_user("Алиса", "@alice", "broker")
        store.upsert_user("Боб", "@bob", "manager")

        self.assertEqual([u.telegram for u in store.list_users()], ["@bob", "@alice"])

    def test_role_stats(self):
        store = make_store()
        store.upsert_user("Алиса", "@alice", "broker")
        store.upsert_user("Вера", "@vera", "broker")
        store.upsert_user("Боб", "@bob", "manager")

        stats = store.role_stats()

        self.assertEqual([(s.role, s.count, s.active_count) for s in stats], [("broker", 2, 2), ("manager", 1, 1)])


class TestSessions(unittest.TestCase):

    def setUp(self):
        self.clock = TickingClock()
        self.store = make_store(self.clock)
        self.user_id = self.store.upsert_user("Алиса", "@alice", "broker").id

    def test_session_lives_exactly_one_day(self):
        self.store.create_session(self.user_id, {"testCompleted": "EQ"})

        session = self.store.active_sessions()[0]
        self.assertEqual(session.expires_at - session.created_at, SESSION_TTL)
        self.assertEqual(SESSION_TTL, timedelta(hours=24))
        self.assertEqual(session.session_data, {"testCompleted": "EQ"})
        self.assertEqual(session.telegram, "@alice")

    def test_expired_sessions_are_not_active(self):
        self.store.create_session(self.user_id, {"testCompleted": "EQ"})
        self.clock.advance(timedelta(hours=25))
        fresh = self.store.create_session(self.user_id, {"testCompleted": "DISC"})

        active = self.store.active_sessions()

        self.assertEqual([s.id for s in active], [fresh])

    def test_session_expires_exactly_at_ttl(self):
        clock = TickingClock(step=timedelta(0))
        store = make_store(clock)
        user_id = store.upsert_user("Боб", "@bob", "manager").id
        session_id = store.create_session(user_id, {"testCompleted": "EQ"})

        clock.advance(SESSION_TTL - timedelta(seconds=1))
        self.assertEqual([s.id for s in store.active_sessions()], [session_id])

        # expires_at == now: сессия уже не активна
        clock.advance(timedelta(seconds=1))
        self.assertEqual(store.active_sessions(), [])


class TestStoreErrors(unittest.TestCase):

    def test_database_errors_become_store_errors(self):
        store = make_store()
        with patch.object(store, "Session") as session_factory:
            session_factory.return_value.query.side_effect = OperationalError("SELECT", {}, Exception("disk I/O error"))
            with self.assertRaises(StoreError):
                store.list_users()


if __name__ == "__main__":
    unittest.main()
