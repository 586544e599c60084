"""Command matching on the first text segment."""

import pytest

from conftest import SELF_ID, at, group_message, text
from OneBotHub.message import MessageEnvelope
from OneBotHub.pack.command import CommandMatcher

matcher = CommandMatcher([".", ". "])


def envelope(*segments):
    return MessageEnvelope.from_raw(group_message(*segments))


@pytest.mark.parametrize("body", [".quote", ". quote", "say .quote now"])
def test_prefixed_command_matches(body):
    assert matcher.matches(envelope(text(body)), "quote")


@pytest.mark.parametrize("body", ["xquote", "quote", ".Quote", ""])
def test_non_matching_text(body):
    assert not matcher.matches(envelope(text(body)), "quote")


def test_only_first_text_segment_is_examined():
    env = envelope(text("hello"), at(1), text(".quote"))
    assert not matcher.matches(env, "quote")


def test_leading_non_text_segments_are_skipped():
    env = envelope(at(1), text(".quote"))
    assert matcher.matches(env, "quote")


def test_no_text_segment():
    assert not matcher.matches(envelope(at(1)), "quote")


def test_command_list():
    env = envelope(text(".收录"))
    assert matcher.matches(env, ["语录", "收录"])
    assert not matcher.matches(env, ["语录"])


def test_require_mention():
    plain = envelope(text(".quote"))
    mentioned = envelope(at(SELF_ID), text(".quote"))
    assert not matcher.matches(plain, "quote", require_mention=True)
    assert matcher.matches(mentioned, "quote", require_mention=True)


def test_candidates_are_cartesian_product():
    assert matcher.candidates(["a", "b"]) == [".a", ".b", ". a", ". b"]
    assert matcher.candidates("a") == [".a", ". a"]
