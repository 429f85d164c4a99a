import asyncio

import pytest

from tools.web.suggestions import SuggestionService
from utils.debouncer import Debouncer


class RecordingLookup:
    def __init__(self):
        self.calls: list[str] = []

    async def __call__(self, text: str) -> str:
        self.calls.append(text)
        return text.upper()


def test_burst_of_triggers_runs_only_the_last():
    lookup = RecordingLookup()

    async def scenario():
        debouncer = Debouncer(lookup, delay_s=0.02)
        futures = [debouncer.trigger(text) for text in ("s", "so", "sol")]
        result = await futures[-1]
        return futures, result

    futures, result = asyncio.run(scenario())
    assert lookup.calls == ["sol"]
    assert result == "SOL"
    assert all(f.cancelled() for f in futures[:-1])


def test_calls_after_quiet_period_both_run():
    lookup = RecordingLookup()

    async def scenario():
        debouncer = Debouncer(lookup, delay_s=0.01)
        first = await debouncer.trigger("wind")
        second = await debouncer.trigger("tide")
        return first, second

    assert asyncio.run(scenario()) == ("WIND", "TIDE")
    assert lookup.calls == ["wind", "tide"]


def test_cancel_drops_pending_call():
    lookup = RecordingLookup()

    async def scenario():
        debouncer = Debouncer(lookup, delay_s=0.01)
        future = debouncer.trigger("wind")
        assert debouncer.pending
        debouncer.cancel()
        await asyncio.sleep(0.03)
        return debouncer, future

    debouncer, future = asyncio.run(scenario())
    assert future.cancelled()
    assert not debouncer.pending
    assert lookup.calls == []


def test_flush_runs_pending_call_immediately():
    lookup = RecordingLookup()

    async def scenario():
        debouncer = Debouncer(lookup, delay_s=10)
        future = debouncer.trigger("wave")
        result = await debouncer.flush()
        return future, result

    future, result = asyncio.run(scenario())
    assert result == "WAVE"
    assert future.result() == "WAVE"
    assert lookup.calls == ["wave"]


def test_flush_without_pending_call_is_a_no_op():
    assert asyncio.run(Debouncer(RecordingLookup()).flush()) is None


def test_exception_is_delivered_to_future():
    async def failing(text):
        raise RuntimeError("boom")

    async def scenario():
        return await Debouncer(failing, delay_s=0).trigger("x")

    with pytest.raises(RuntimeError, match="boom"):
        asyncio.run(scenario())


def test_negative_delay_is_rejected():
    with pytest.raises(ValueError):
        Debouncer(RecordingLookup(), delay_s=-1)


class FakeSuggestionClient:
    def __init__(self, fail=False):
        self.fail = fail
        self.calls: list[str] = []

    async def suggest(self, text):
        self.calls.append(text)
        if self.fail:
            raise RuntimeError("suggestion backend down")
        return [f"{text} energy", f"{text} panels"]


def test_suggestion_service_debounces_keystrokes():
    client = FakeSuggestionClient()

    async def scenario():
        service = SuggestionService(client, delay_s=0.02)
        service.suggest_debounced("so")
        return await service.suggest_debounced("solar")

    assert asyncio.run(scenario()) == ["solar energy", "solar panels"]
    assert client.calls == ["solar"]


def test_suggestion_errors_yield_empty_list():
    service = SuggestionService(FakeSuggestionClient(fail=True))
    assert asyncio.run(service.suggest("solar")) == []
