"""Tests for the user store backends.

Every test runs against both the in-memory and the SQLite-backed store.
"""

import pytest

from src.userauth.core.exceptions import DuplicateKeyError
from src.userauth.core.storage.user_store import UserStore
from src.userauth.entities.user import User


def make_user(email="a@x.com", phone="+1000", first_name="ann", **extra) -> User:
    return User(
        email=email,
        phone=phone,
        first_name=first_name,
        password_hash="$2b$04$hash",
        **extra,
    )


class TestUserStore:
    def test_create_and_get(self, user_store: UserStore):
        user = user_store.create(make_user())

        loaded = user_store.get(user.id)

        assert loaded is not None
        assert loaded.id == user.id
        assert loaded.email == "a@x.com"
        assert loaded.password_hash == "$2b$04$hash"

    def test_get_missing_returns_none(self, user_store: UserStore):
        assert user_store.get("missing") is None

    def test_duplicate_email_rejected(self, user_store: UserStore):
        user_store.create(make_user())

        with pytest.raises(DuplicateKeyError):
            user_store.create(make_user(phone="+2000"))

    def test_duplicate_phone_rejected(self, user_store: UserStore):
        user_store.create(make_user())

        with pytest.raises(DuplicateKeyError):
            user_store.create(make_user(email="b@x.com"))

    def test_find_one_by_field(self, user_store: UserStore):
        created = user_store.create(make_user(email_verification_token="tok"))

        assert user_store.find_one(email="a@x.com").id == created.id
        assert user_store.find_one(email_verification_token="tok").id == created.id
        assert user_store.find_one(email="nobody@x.com") is None

    def test_find_any_matches_either_predicate(self, user_store: UserStore):
        created = user_store.create(make_user())

        by_phone = user_store.find_any([{"email": "other@x.com"}, {"phone": "+1000"}])
        by_email = user_store.find_any([{"email": "a@x.com"}, {"phone": "+9"}])
        neither = user_store.find_any([{"email": "other@x.com"}, {"phone": "+9"}])

        assert by_phone.id == created.id
        assert by_email.id == created.id
        assert neither is None

    def test_find_rejects_unknown_fields(self, user_store: UserStore):
        with pytest.raises(ValueError):
            user_store.find_one(nickname="x")

    def test_update_fields_touches_only_named_fields(self, user_store: UserStore):
        created = user_store.create(make_user(first_name="bea", last_name="lee"))

        updated = user_store.update_fields(created.id, {"refresh_token": "rt"})

        assert updated.refresh_token == "rt"
        assert updated.first_name == "bea"
        assert updated.last_name == "lee"
        assert updated.password_hash == created.password_hash
        assert updated.email == created.email
        assert user_store.get(created.id).refresh_token == "rt"

    def test_update_fields_normalizes(self, user_store: UserStore):
        created = user_store.create(make_user())

        updated = user_store.update_fields(created.id, {"email": " NEW@X.com "})

        assert updated.email == "new@x.com"

    def test_update_fields_missing_user(self, user_store: UserStore):
        assert user_store.update_fields("missing", {"refresh_token": None}) is None

    def test_update_fields_rejects_immutable(self, user_store: UserStore):
        created = user_store.create(make_user())

        with pytest.raises(ValueError):
            user_store.update_fields(created.id, {"id": "other"})

    def test_update_fields_enforces_uniqueness(self, user_store: UserStore):
        user_store.create(make_user())
        other = user_store.create(make_user(email="b@x.com", phone="+2000"))

        with pytest.raises(DuplicateKeyError):
            user_store.update_fields(other.id, {"email": "a@x.com"})

        assert user_store.get(other.id).email == "b@x.com"

    def test_delete(self, user_store: UserStore):
        created = user_store.create(make_user())

        assert user_store.delete(created.id) is True
        assert user_store.get(created.id) is None
        assert user_store.delete(created.id) is False

    def test_list_users_ordered_and_limited(self, user_store: UserStore):
        first = user_store.create(make_user())
        user_store.create(make_user(email="b@x.com", phone="+2000"))

        users = user_store.list_users(limit=1)

        assert [u.id for u in users] == [first.id]
        assert len(user_store.list_users()) == 2

    def test_is_available(self, user_store: UserStore):
        assert user_store.is_available() is True
