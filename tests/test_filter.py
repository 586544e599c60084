"""Admission policy: group allow-list, private and temporary toggles."""

import pytest

from conftest import GROUP_ID, group_message, private_message
from OneBotHub.kernel.filter import FilterPolicy
from OneBotHub.message import MessageEnvelope

GROUP = MessageEnvelope.from_raw(group_message())
FRIEND = MessageEnvelope.from_raw(private_message())
TEMPORARY = MessageEnvelope.from_raw(private_message(sub_type="group"))


def test_null_groups_rejects_every_group():
    policy = FilterPolicy(allowed_groups=None, allow_private=True, allow_temporary=True)
    assert not policy.accepts(GROUP)
    assert policy.accepts(FRIEND)


def test_empty_groups_accepts_every_group():
    policy = FilterPolicy(allowed_groups=set(), allow_private=False)
    assert policy.accepts(GROUP)
    other = MessageEnvelope.from_raw(group_message(group_id=1))
    assert policy.accepts(other)


def test_group_in_allow_list():
    policy = FilterPolicy(allowed_groups={GROUP_ID}, allow_private=False)
    assert policy.accepts(GROUP)


def test_group_not_in_allow_list():
    policy = FilterPolicy(allowed_groups={GROUP_ID + 1}, allow_private=False)
    assert not policy.accepts(GROUP)


def test_private_toggle():
    assert not FilterPolicy(allow_private=False).accepts(FRIEND)
    assert FilterPolicy(allow_private=True).accepts(FRIEND)


def test_temporary_rejected_even_when_private_allowed():
    policy = FilterPolicy(allow_private=True, allow_temporary=False)
    assert not policy.accepts(TEMPORARY)
    assert policy.accepts(FRIEND)


def test_other_kind_never_accepted():
    payload = private_message()
    payload["message_type"] = "guild"
    policy = FilterPolicy(allowed_groups=[], allow_private=True, allow_temporary=True)
    assert not policy.accepts(MessageEnvelope.from_raw(payload))


def test_allowed_groups_can_be_reassigned():
    policy = FilterPolicy(allowed_groups=None)
    assert not policy.accepts(GROUP)
    policy.allowed_groups = [GROUP_ID]
    assert policy.allowed_groups == frozenset({GROUP_ID})
    assert policy.accepts(GROUP)


def test_prefixes_keep_order_and_drop_duplicates():
    policy = FilterPolicy(prefixes=[".", ". ", "."])
    assert policy.prefixes == (".", ". ")


def test_prefixes_must_not_be_empty():
    with pytest.raises(ValueError):
        FilterPolicy(prefixes=[])
    policy = FilterPolicy()
    with pytest.raises(ValueError):
        policy.prefixes = ()


def test_from_config():
    policy = FilterPolicy.from_config(
        {"groups": None, "allow_private": False, "allow_temporary": True, "prefixes": ["!"]}
    )
    assert policy.allowed_groups is None
    assert not policy.allow_private
    assert policy.allow_temporary
    assert policy.prefixes == ("!",)
