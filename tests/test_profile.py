"""Tests for lumasms.services.profile: batch updates under the field policy, password and email changes."""

import unittest
from unittest.mock import MagicMock, patch

from db_support import create_user, make_actor, make_session_factory

from lumasms.schemas.results import (
    AuthFailed,
    Conflict,
    FieldDenied,
    InvalidInput,
    LoggedIn,
    NotAuthenticated,
    NotFound,
    NothingToUpdate,
    PermissionDenied,
    SamePassword,
    Updated,
)
from lumasms.services.authentication import login
from lumasms.services.profile import change_email, change_password, update_profile
from lumasms.services.user_store import UserStore


class _ProfileTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.engine, factory = make_session_factory()
        self.db = factory()
        self.alice_uid = create_user(self.db, "alice", "pw1", "a@x.com")
        self.bob_uid = create_user(self.db, "bob", "pw2", "b@x.com")
        self.alice = make_actor(uid=self.alice_uid, username="alice")
        self.staff = make_actor(uid=self.bob_uid, username="bob", staff_user=True)
        self.root = make_actor(uid=self.bob_uid, username="bob", staff_user=True, staff_root=True)

    def tearDown(self) -> None:
        self.db.close()
        self.engine.dispose()

    def user(self, uid: int):
        self.db.expire_all()
        return UserStore(self.db).get(uid)


class TestUpdateProfileGuards(_ProfileTestCase):
    def test_not_authenticated(self) -> None:
        self.assertIsInstance(update_profile(self.db, None, self.alice_uid, [{"can_msg": False}]), NotAuthenticated)

    def test_non_staff_cannot_touch_another_user(self) -> None:
        result = update_profile(self.db, self.alice, self.bob_uid, [{"can_msg": False}])
        self.assertEqual(result, PermissionDenied(reason="NOT_OWNER"))
        self.assertTrue(self.user(self.bob_uid).can_msg)

    def test_banned_actor_is_denied(self) -> None:
        banned = make_actor(uid=self.alice_uid, username="alice", can_submit=False)
        result = update_profile(self.db, banned, self.alice_uid, [{"can_msg": True}])
        self.assertEqual(result, PermissionDenied(reason="BANNED"))

    def test_empty_changes_write_nothing(self) -> None:
        db = MagicMock()
        self.assertIsInstance(update_profile(db, self.alice, self.alice_uid, []), NothingToUpdate)
        db.query.assert_not_called()
        db.commit.assert_not_called()

    def test_malformed_changes(self) -> None:
        result = update_profile(self.db, self.alice, self.alice_uid, [{"can_msg": False, "can_submit": False}])
        self.assertIsInstance(result, InvalidInput)


class TestUpdateProfilePolicy(_ProfileTestCase):
    def test_owner_updates_open_field(self) -> None:
        result = update_profile(self.db, self.alice, self.alice_uid, [{"can_msg": "false"}])
        self.assertEqual(result, Updated(count=1))
        self.assertFalse(self.user(self.alice_uid).can_msg)

    def test_owner_cannot_set_email_directly(self) -> None:
        result = update_profile(self.db, self.alice, self.alice_uid, [{"email": "new@x.com"}])
        self.assertEqual(result, FieldDenied(field="email", reason="SENSITIVE"))

    def test_read_only_field_denied(self) -> None:
        result = update_profile(self.db, self.root, self.alice_uid, [{"last_ip": "1.1.1.1"}])
        self.assertEqual(result, FieldDenied(field="last_ip", reason="READ_ONLY"))

    def test_batch_is_all_or_nothing(self) -> None:
        changes = [{"can_msg": False}, {"username": "mallory"}]
        result = update_profile(self.db, self.alice, self.alice_uid, changes)
        self.assertEqual(result, FieldDenied(field="username", reason="STAFF_ONLY"))
        user = self.user(self.alice_uid)
        self.assertTrue(user.can_msg)
        self.assertEqual(user.username, "alice")

    def test_staff_non_root_cannot_assign_root_group(self) -> None:
        for value in (1, "1"):
            with self.subTest(value=value):
                result = update_profile(self.db, self.staff, self.alice_uid, [{"gid": value}])
                self.assertEqual(result, FieldDenied(field="gid", reason="ROOT_ONLY"))
        self.assertEqual(self.user(self.alice_uid).gid, 3)

    def test_control_characters_cannot_smuggle_root_group(self) -> None:
        for target, value in ((self.alice_uid, "\x011"), (self.alice_uid, "1\x00"), (self.bob_uid, "1\x7f")):
            with self.subTest(target=target, value=value):
                result = update_profile(self.db, self.staff, target, [{"gid": value}])
                self.assertEqual(result, FieldDenied(field="gid", reason="ROOT_ONLY"))
                self.assertEqual(self.user(target).gid, 3)

    def test_root_group_value_is_written_sanitized(self) -> None:
        self.assertEqual(update_profile(self.db, self.root, self.alice_uid, [{"gid": "\x011"}]), Updated(count=1))
        self.assertEqual(self.user(self.alice_uid).gid, 1)

    def test_unknown_group_is_invalid_input(self) -> None:
        result = update_profile(self.db, self.root, self.alice_uid, [{"gid": 42}])
        self.assertEqual(result, InvalidInput(field="gid", detail="Unknown group."))
        self.assertEqual(self.user(self.alice_uid).gid, 3)

    def test_staff_moves_user_to_staff_group_and_renames(self) -> None:
        result = update_profile(self.db, self.staff, self.alice_uid, [{"gid": "2"}, {"username": "alicia"}])
        self.assertEqual(result, Updated(count=1))
        user = self.user(self.alice_uid)
        self.assertEqual(user.gid, 2)
        self.assertEqual(user.username, "alicia")

    def test_root_assigns_root_group(self) -> None:
        self.assertEqual(update_profile(self.db, self.root, self.alice_uid, [{"gid": 1}]), Updated(count=1))
        self.assertEqual(self.user(self.alice_uid).gid, 1)

    def test_rename_to_taken_name_is_conflict(self) -> None:
        result = update_profile(self.db, self.staff, self.alice_uid, [{"username": "BOB"}])
        self.assertEqual(result, Conflict(field="username"))

    def test_uncoercible_value_is_invalid_input(self) -> None:
        result = update_profile(self.db, self.alice, self.alice_uid, [{"can_msg": "maybe"}])
        self.assertIsInstance(result, InvalidInput)
        self.assertEqual(result.field, "can_msg")

    def test_unknown_field_is_invalid_input(self) -> None:
        result = update_profile(self.db, self.alice, self.alice_uid, [{"nickname": "al"}])
        self.assertIsInstance(result, InvalidInput)

    def test_missing_target_is_not_found(self) -> None:
        self.assertIsInstance(update_profile(self.db, self.staff, 9999, [{"can_msg": False}]), NotFound)


class TestChangePassword(_ProfileTestCase):
    def test_same_password_checked_before_anything_else(self) -> None:
        db = MagicMock()
        self.assertIsInstance(change_password(db, self.alice, "pw1", "pw1"), SamePassword)
        self.assertEqual(db.method_calls, [])

    def test_wrong_old_password(self) -> None:
        self.assertIsInstance(change_password(self.db, self.alice, "bad", "pw9"), AuthFailed)
        self.assertIsInstance(login(self.db, "alice", "pw1"), LoggedIn)

    def test_not_authenticated(self) -> None:
        self.assertIsInstance(change_password(self.db, None, "pw1", "pw9"), NotAuthenticated)

    def test_changes_password(self) -> None:
        self.assertEqual(change_password(self.db, self.alice, "pw1", "pw9"), Updated(count=1))
        self.assertIsInstance(login(self.db, "alice", "pw9"), LoggedIn)
        self.assertIsInstance(login(self.db, "alice", "pw1"), AuthFailed)

    def test_banned_owner_cannot_change_password(self) -> None:
        banned = make_actor(uid=self.alice_uid, username="alice", can_msg=False)
        self.assertEqual(change_password(self.db, banned, "pw1", "pw9"), PermissionDenied(reason="BANNED"))


class TestChangeEmail(_ProfileTestCase):
    def test_changes_email(self) -> None:
        self.assertEqual(change_email(self.db, self.alice, "pw1", "new@x.com"), Updated(count=1))
        self.assertEqual(self.user(self.alice_uid).email, "new@x.com")

    def test_wrong_password(self) -> None:
        self.assertIsInstance(change_email(self.db, self.alice, "bad", "new@x.com"), AuthFailed)

    def test_taken_email_is_conflict(self) -> None:
        self.assertEqual(change_email(self.db, self.alice, "pw1", "B@x.com"), Conflict(field="email"))
        self.assertEqual(self.user(self.alice_uid).email, "a@x.com")

    def test_lost_race_maps_to_conflict(self) -> None:
        with patch.object(UserStore, "exists_email", return_value=False):
            result = change_email(self.db, self.alice, "pw1", "b@x.com")
        self.assertEqual(result, Conflict(field="email"))

    def test_empty_email(self) -> None:
        self.assertIsInstance(change_email(self.db, self.alice, "pw1", "  "), InvalidInput)
