"""Fan-out and fault isolation of the dispatch supervisor."""

import asyncio
import logging

import pytest

from conftest import group_message, private_message, text
from OneBotHub.errors import HandlerFailure
from OneBotHub.kernel.signal_hub import SignalKind
from OneBotHub.pack.base import Plugin


class Recorder(Plugin):
    def __init__(self, name, calls):
        self.name = name
        self.calls = calls

    async def run(self, bot, envelope):
        self.calls.append((self.name, envelope.message_id))


class Failing(Plugin):
    name = "failing"

    async def run(self, bot, envelope):
        raise RuntimeError("boom")


class SyncFailing(Plugin):
    name = "sync-failing"

    def run(self, bot, envelope):
        raise ValueError("sync boom")


@pytest.mark.asyncio
async def test_failing_plugin_does_not_affect_others(bot, caplog):
    calls = []
    for i in range(5):
        if i == 2:
            bot.load_plugin(Failing())
        else:
            bot.load_plugin(Recorder(f"p{i}", calls))

    with caplog.at_level(logging.ERROR):
        results = await asyncio.gather(*bot.handle_event(group_message(message_id=7)))

    assert sorted(calls) == [("p0", 7), ("p1", 7), ("p3", 7), ("p4", 7)]
    failures = [r for r in results if r is not None]
    assert len(failures) == 1
    assert isinstance(failures[0], HandlerFailure)
    assert failures[0].handler_kind == "plugin"
    assert failures[0].handler_name == "failing"
    assert isinstance(failures[0].error, RuntimeError)
    assert any("failing" in r.getMessage() for r in caplog.records)


@pytest.mark.asyncio
async def test_synchronous_plugin_failure_is_isolated(bot):
    calls = []
    bot.load_plugin(SyncFailing())
    bot.load_plugin(Recorder("after", calls))

    results = await asyncio.gather(*bot.handle_event(group_message()))

    assert calls == [("after", 1)]
    assert [r.handler_name for r in results if r] == ["sync-failing"]


@pytest.mark.asyncio
async def test_listener_failures_are_isolated(bot):
    seen = []

    def sync_bad(envelope):
        raise KeyError("sync")

    async def async_bad(envelope):
        raise RuntimeError("async")

    async def good(envelope):
        seen.append(envelope.message_id)

    bot.add_listener(sync_bad)
    bot.add_listener(async_bad)
    bot.add_listener(good)
    bot.add_listener(lambda envelope: seen.append("sync"))

    results = await asyncio.gather(*bot.handle_event(group_message(message_id=3)))

    assert seen == [3, "sync"]
    failures = [r for r in results if r]
    assert [f.handler_kind for f in failures] == ["listener", "listener"]
    assert failures[0].handler_name.endswith("sync_bad")


@pytest.mark.asyncio
async def test_each_handler_receives_envelope_once(bot):
    calls = []
    bot.load_plugin(Recorder("only", calls))
    received = []
    bot.add_listener(received.append)

    await asyncio.gather(*bot.handle_event(group_message(message_id=5)))

    assert calls == [("only", 5)]
    assert [env.message_id for env in received] == [5]


@pytest.mark.asyncio
async def test_initiation_follows_registration_order(bot):
    order = []

    def make_listener(tag):
        async def listener(envelope):
            order.append(tag)
        return listener

    class Ordered(Plugin):
        def __init__(self, name):
            self.name = name

        async def run(self, bot, envelope):
            order.append(self.name)

    for tag in ("l1", "l2", "l3"):
        bot.add_listener(make_listener(tag))
    for name in ("p1", "p2", "p3"):
        bot.load_plugin(Ordered(name))

    await asyncio.gather(*bot.handle_event(group_message()))

    listeners = [t for t in order if t.startswith("l")]
    plugins = [t for t in order if t.startswith("p")]
    assert listeners == ["l1", "l2", "l3"]
    assert plugins == ["p1", "p2", "p3"]


@pytest.mark.asyncio
async def test_rejected_envelope_invokes_nothing(bot):
    calls = []
    bot.load_plugin(Recorder("p", calls))
    bot.add_listener(lambda env: calls.append("listener"))
    bot.policy.allowed_groups = None

    assert bot.handle_event(group_message()) == []
    bot.policy.allow_private = False
    assert bot.handle_event(private_message()) == []

    await asyncio.sleep(0)
    assert calls == []


@pytest.mark.asyncio
async def test_next_envelope_not_blocked_by_slow_handler(bot):
    release = asyncio.Event()
    finished = []

    class Slow(Plugin):
        name = "slow"

        async def run(self, bot, envelope):
            if envelope.message_id == 1:
                await release.wait()
            finished.append(envelope.message_id)

    bot.load_plugin(Slow())

    first = bot.handle_event(group_message(message_id=1))
    second = bot.handle_event(group_message(message_id=2))
    await asyncio.gather(*second)

    assert finished == [2]
    assert not first[0].done()
    assert bot.supervisor.in_flight == 1

    release.set()
    await bot.supervisor.drain()
    assert finished == [2, 1]
    assert bot.supervisor.in_flight == 0


@pytest.mark.asyncio
async def test_handler_timeout_is_reported(bot):
    class Hanging(Plugin):
        name = "hanging"

        async def run(self, bot, envelope):
            await asyncio.sleep(10)

    bot.supervisor.handler_timeout = 0.01
    bot.load_plugin(Hanging())

    (result,) = await asyncio.gather(*bot.handle_event(group_message()))

    assert isinstance(result, HandlerFailure)
    assert isinstance(result.error, asyncio.TimeoutError)


@pytest.mark.asyncio
async def test_failures_are_emitted_on_signal_hub(bot):
    received = []
    bot.signal_hub.connect(SignalKind.HANDLER_FAILED, received.append)

    def broken_subscriber(signal):
        raise RuntimeError("subscriber")

    bot.signal_hub.connect(SignalKind.HANDLER_FAILED, broken_subscriber)
    bot.load_plugin(Failing())

    await asyncio.gather(*bot.handle_event(group_message(text(".x"))))

    assert len(received) == 1
    assert received[0].payload.handler_name == "failing"
    assert received[0].source == "supervisor"


@pytest.mark.asyncio
async def test_registration_during_dispatch_uses_snapshot(bot):
    calls = []

    class Registers(Plugin):
        name = "registers"

        async def run(self, bot, envelope):
            bot.load_plugin(Recorder("late", calls))

    bot.load_plugin(Registers())
    await asyncio.gather(*bot.handle_event(group_message(message_id=1)))
    assert calls == []

    await asyncio.gather(*bot.handle_event(group_message(message_id=2)))
    assert calls == [("late", 2)]


@pytest.mark.asyncio
async def test_drain_with_timeout(bot):
    release = asyncio.Event()

    class Waits(Plugin):
        name = "waits"

        async def run(self, bot, envelope):
            await release.wait()

    bot.load_plugin(Waits())

    bot.handle_event(group_message(message_id=1))
    asyncio.get_running_loop().call_later(0.01, release.set)
    assert await bot.supervisor.drain(timeout=1.0) == 0

    release.clear()
    (task,) = bot.handle_event(group_message(message_id=2))
    assert await bot.supervisor.drain(timeout=0.01) == 1
    assert task.cancelled()
    assert bot.supervisor.in_flight == 0
