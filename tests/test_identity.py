import pytest

from app.core.exceptions import InputValidationError
from app.services import identity


def test_same_email_twice_reuses_record_and_takes_new_name(store):
    first = identity.login(store, "Layla", "Layla@Example.com")
    second = identity.login(store, "Layla Haddad", "layla@example.com")

    users = store.load_user_directory()
    matching = [u for u in users if u.email.lower() == "layla@example.com"]
    assert len(matching) == 1
    assert matching[0].name == "Layla Haddad"
    assert second.id == first.id == "layla@example.com"


def test_no_email_always_creates_new_identity(store):
    first = identity.login(store, "Omar")
    second = identity.login(store, "Omar")

    assert first.id != second.id
    assert len(store.load_user_directory()) == 2


def test_login_sets_active_session(store):
    user = identity.login(store, "Omar", "omar@example.com")
    assert store.load_session() == user


def test_new_user_gets_avatar_seeded_by_name(store):
    user = identity.login(store, "Omar Khalil")
    assert user.avatar == "https://api.dicebear.com/7.x/micah/svg?seed=Omar%20Khalil"


@pytest.mark.parametrize("name", ["", "   "])
def test_blank_name_is_rejected_without_state_change(store, name):
    with pytest.raises(InputValidationError):
        identity.login(store, name, "x@example.com")
    assert store.load_user_directory() == []
    assert store.load_session() is None


def test_logout_clears_session_but_keeps_directory(store):
    identity.login(store, "Omar", "omar@example.com")
    identity.logout(store)
    assert store.load_session() is None
    assert len(store.load_user_directory()) == 1
