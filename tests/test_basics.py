"""Basic unit tests for the OneBotHub package."""

from OneBotHub import (
    Bot,
    DuplicateOrEmptyName,
    FilterPolicy,
    OneBotHubError,
    PluginLoadError,
    StaleReplyAction,
    TransportError,
    __version__,
)


def test_version():
    assert __version__ == "0.1.0"


def test_public_exports():
    assert Bot is not None
    assert FilterPolicy is not None


def test_error_hierarchy():
    assert issubclass(DuplicateOrEmptyName, OneBotHubError)
    assert issubclass(StaleReplyAction, OneBotHubError)
    assert issubclass(TransportError, OneBotHubError)
    assert issubclass(PluginLoadError, OneBotHubError)


def test_error_attributes():
    err = TransportError("boom", action="send_msg", retcode=100)
    assert err.code == "transport_error"
    assert str(err) == "boom"
    assert err.action == "send_msg"
    assert err.retcode == 100

    dup = DuplicateOrEmptyName("taken", name="quote")
    assert dup.code == "duplicate_or_empty_name"
    assert dup.details == {"name": "quote"}
