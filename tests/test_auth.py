"""Tests for identity and auth-state subscriptions."""
from auth import IdentityProvider, User, user_from_headers


def test_subscribe_delivers_current_state():
    provider = IdentityProvider(User("jane@example.com"))
    seen = []
    provider.subscribe(seen.append)
    assert seen == [User("jane@example.com")]


def test_handlers_fire_once_per_transition():
    provider = IdentityProvider()
    seen = []
    provider.subscribe(seen.append)

    assert provider.update(User("jane@example.com"))
    assert not provider.update(User("jane@example.com"))
    assert provider.update(None)

    assert seen == [None, User("jane@example.com"), None]


def test_unsubscribe_stops_notifications():
    provider = IdentityProvider()
    seen = []
    unsubscribe = provider.subscribe(seen.append)
    unsubscribe()
    unsubscribe()

    provider.update(User("jane@example.com"))
    assert seen == [None]


def test_user_from_proxy_header():
    user = user_from_headers({"X-Forwarded-Email": " Jane@Example.com ", "X-Forwarded-User": "Jane"})
    assert user == User("jane@example.com", "Jane")


def test_user_from_custom_header():
    user = user_from_headers({"X-Auth-Email": "jane@example.com"}, header_name="X-Auth-Email")
    assert user.email == "jane@example.com"


def test_dev_fallback_and_anonymous():
    assert user_from_headers({}, dev_email="dev@localhost") == User("dev@localhost")
    assert user_from_headers({}) is None
