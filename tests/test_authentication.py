"""Tests for lumasms.services.authentication: login, registration conflicts, sessions and actor resolution."""

import os
import tempfile
import threading
import unittest
from unittest.mock import MagicMock, patch

import bcrypt
from db_support import create_user, make_session_factory

from lumasms.core.security import create_session_token
from lumasms.schemas.results import (
    AuthFailed,
    Conflict,
    Created,
    InvalidInput,
    LoggedIn,
    LoggedOut,
)
from lumasms.services.authentication import (
    check_login,
    login,
    logout,
    register,
    resolve_actor,
)
from lumasms.services.user_store import UserStore


class _DbTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.engine, factory = make_session_factory()
        self.db = factory()

    def tearDown(self) -> None:
        self.db.close()
        self.engine.dispose()


class TestLogin(_DbTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.uid = create_user(self.db, "alice", "pw1", "a@x.com")

    def test_success_returns_subject(self) -> None:
        result = login(self.db, "alice", "pw1")
        self.assertIsInstance(result, LoggedIn)
        self.assertEqual(result.subject.uid, self.uid)
        self.assertEqual(result.subject.username, "alice")

    def test_missing_credentials_are_invalid_input(self) -> None:
        self.assertIsInstance(login(self.db, "", "pw1"), InvalidInput)
        self.assertIsInstance(login(self.db, "alice", ""), InvalidInput)
        self.assertIsInstance(login(self.db, " \t", "pw1"), InvalidInput)

    def test_unknown_user_and_wrong_password_are_indistinguishable(self) -> None:
        unknown = login(self.db, "nobody", "pw1")
        wrong = login(self.db, "alice", "nope")
        self.assertIsInstance(unknown, AuthFailed)
        self.assertEqual(unknown, wrong)

    def test_unknown_user_still_runs_one_bcrypt_comparison(self) -> None:
        with patch("lumasms.core.security.bcrypt.checkpw", wraps=bcrypt.checkpw) as checkpw:
            login(self.db, "nobody", "pw1")
        self.assertEqual(checkpw.call_count, 1)

    def test_wrong_password_runs_one_bcrypt_comparison(self) -> None:
        with patch("lumasms.core.security.bcrypt.checkpw", wraps=bcrypt.checkpw) as checkpw:
            login(self.db, "alice", "nope")
        self.assertEqual(checkpw.call_count, 1)

    def test_username_match_is_case_sensitive(self) -> None:
        self.assertIsInstance(login(self.db, "ALICE", "pw1"), AuthFailed)

    def test_empty_stored_hash_never_authenticates(self) -> None:
        UserStore(self.db).update(self.uid, {"password_hash": ""})
        self.assertIsInstance(login(self.db, "alice", ""), InvalidInput)
        self.assertIsInstance(login(self.db, "alice", "pw1"), AuthFailed)


class TestRegister(_DbTestCase):
    def test_creates_member_account(self) -> None:
        result = register(self.db, " bob ", "pw", "bob@x.com", ip="10.0.0.1")
        self.assertIsInstance(result, Created)
        user = UserStore(self.db).get(result.uid)
        self.assertEqual(user.username, "bob")
        self.assertEqual(user.gid, 3)
        self.assertEqual(user.registered_ip, "10.0.0.1")
        self.assertNotEqual(user.password_hash, "pw")
        self.assertIsInstance(login(self.db, "bob", "pw"), LoggedIn)

    def test_missing_fields_are_invalid_input(self) -> None:
        self.assertIsInstance(register(self.db, "", "pw", "a@x.com"), InvalidInput)
        self.assertIsInstance(register(self.db, "bob", "", "a@x.com"), InvalidInput)
        self.assertIsInstance(register(self.db, "bob", "pw", ""), InvalidInput)

    def test_overlong_password_is_invalid_input(self) -> None:
        result = register(self.db, "bob", "x" * 129, "a@x.com")
        self.assertEqual(result, InvalidInput(field="password", detail="Invalid password length."))

    def test_username_conflict_ignores_case(self) -> None:
        create_user(self.db, "alice", email="a@x.com")
        self.assertEqual(register(self.db, "ALICE", "pw", "other@x.com"), Conflict(field="username"))

    def test_email_conflict_ignores_case(self) -> None:
        create_user(self.db, "alice", email="a@x.com")
        self.assertEqual(register(self.db, "carol", "pw", "A@X.COM"), Conflict(field="email"))

    def test_lost_race_maps_unique_index_violation_to_conflict(self) -> None:
        create_user(self.db, "alice", email="a@x.com")
        # Both pre-checks pass as they would for a concurrent registration; the index decides.
        with patch.object(UserStore, "exists_username", return_value=False), patch.object(
            UserStore, "exists_email", return_value=False
        ):
            by_name = register(self.db, "Alice", "pw", "new@x.com")
            by_email = register(self.db, "dave", "pw", "a@x.com")
        self.assertEqual(by_name, Conflict(field="username"))
        self.assertEqual(by_email, Conflict(field="email"))
        self.assertEqual(len(UserStore(self.db).find()), 1)


class TestConcurrentRegistration(unittest.TestCase):
    """Two sessions registering the same name at once: the unique index lets exactly one through."""

    def setUp(self) -> None:
        self.tmp = tempfile.TemporaryDirectory()
        url = "sqlite:///" + os.path.join(self.tmp.name, "accounts.db")
        self.engine, self.factory = make_session_factory(url)

    def tearDown(self) -> None:
        self.engine.dispose()
        self.tmp.cleanup()

    def test_exactly_one_created(self) -> None:
        barrier = threading.Barrier(2)
        results = []

        def attempt(email: str) -> None:
            with self.factory() as db:
                barrier.wait()
                results.append(register(db, "alice", "pw1", email))

        threads = [threading.Thread(target=attempt, args=(f"a{i}@x.com",)) for i in range(2)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        self.assertEqual(sorted(r.kind for r in results), ["conflict", "created"])
        conflict = next(r for r in results if isinstance(r, Conflict))
        self.assertEqual(conflict.field, "username")
        with self.factory() as db:
            self.assertEqual(len(UserStore(db).find(username="alice")), 1)


class TestLogout(unittest.TestCase):
    def test_invalidates_transport(self) -> None:
        transport = MagicMock()
        self.assertIsInstance(logout(transport), LoggedOut)
        transport.invalidate.assert_called_once_with()


class TestSessionResolution(_DbTestCase):
    def test_check_login_with_valid_token(self) -> None:
        uid = create_user(self.db, "alice")
        subject = check_login(self.db, create_session_token(uid, "alice"))
        self.assertEqual(subject.uid, uid)

    def test_missing_or_garbage_token(self) -> None:
        self.assertIsNone(check_login(self.db, None))
        self.assertIsNone(check_login(self.db, "logout"))
        self.assertIsNone(resolve_actor(self.db, "not.a.jwt"))

    def test_token_for_deleted_user(self) -> None:
        uid = create_user(self.db, "alice")
        token = create_session_token(uid, "alice")
        UserStore(self.db).delete(uid)
        self.assertIsNone(check_login(self.db, token))
        self.assertIsNone(resolve_actor(self.db, token))

    def test_actor_reflects_group_and_ban_flags(self) -> None:
        staff_uid = create_user(self.db, "staffer", gid=2, can_comment=False)
        actor = resolve_actor(self.db, create_session_token(staff_uid, "staffer"))
        self.assertTrue(actor.staff_user)
        self.assertFalse(actor.staff_root)
        self.assertFalse(actor.can_comment)
        self.assertTrue(actor.is_banned)

    def test_root_actor(self) -> None:
        root_uid = create_user(self.db, "admin", gid=1)
        actor = resolve_actor(self.db, create_session_token(root_uid, "admin"))
        self.assertTrue(actor.staff_user)
        self.assertTrue(actor.staff_root)
        self.assertFalse(actor.is_banned)
