import pytest

from civic_frontend.models import Session, User
from civic_frontend.session import (
    ROUTE_ADMIN,
    ROUTE_CITIZEN,
    SessionStore,
    require_role,
    route_for_role,
)


def test_save_and_load_round_trip():
    storage = {}
    store = SessionStore(storage)
    store.save(Session("tok", User("Asha", "a@example.com", "citizen")))

    assert storage["token"] == "tok"
    assert storage["user"] == {"name": "Asha", "email": "a@example.com", "role": "citizen"}
    assert store.load() == Session("tok", User("Asha", "a@example.com", "citizen"))


def test_load_without_token_is_none():
    assert SessionStore({"user": {"name": "x", "role": "admin"}}).load() is None


def test_clear_removes_only_session_keys():
    storage = {"token": "tok", "user": {}, "other": 1}
    SessionStore(storage).clear()
    assert storage == {"other": 1}


def test_guard_accepts_matching_role():
    store = SessionStore({"token": "tok", "user": {"name": "Ravi", "email": "r@example.com", "role": "admin"}})
    session = require_role(store, "admin")
    assert session is not None
    assert session.user.name == "Ravi"


def test_guard_rejects_role_mismatch_and_missing_session():
    citizen = SessionStore({"token": "tok", "user": {"name": "Asha", "role": "citizen"}})
    assert require_role(citizen, "admin") is None
    assert require_role(SessionStore({}), "citizen") is None


def test_guard_rejects_user_without_token():
    store = SessionStore({"user": {"name": "Asha", "role": "citizen"}})
    assert require_role(store, "citizen") is None


def test_route_for_role():
    assert route_for_role("admin") == ROUTE_ADMIN
    assert route_for_role("citizen") == ROUTE_CITIZEN


def test_store_rebuilt_from_browser_storage_passes_guard():
    original = SessionStore({})
    original.save(Session("tok", User("Asha", "a@example.com", "citizen")))
    persisted = original.persisted()

    reloaded = SessionStore({})
    restored = reloaded.restore(persisted)

    assert persisted["token"] == "tok"
    assert isinstance(persisted["user"], str)
    assert restored == Session("tok", User("Asha", "a@example.com", "citizen"))
    assert require_role(reloaded, "citizen") == restored
    assert require_role(reloaded, "admin") is None


def test_persisted_is_none_when_signed_out():
    assert SessionStore({}).persisted() is None


@pytest.mark.parametrize(
    "persisted",
    [
        None,
        0,
        {"token": None, "user": None},
        {"token": "tok", "user": None},
        {"token": "tok", "user": "{not json"},
        {"token": "tok", "user": '"just a string"'},
    ],
)
def test_restore_ignores_missing_or_unreadable_values(persisted):
    storage = {}
    assert SessionStore(storage).restore(persisted) is None
    assert storage == {}
