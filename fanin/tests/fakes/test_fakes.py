"""Unit tests for fake adapter implementations.

These tests verify that fake adapters work correctly as test doubles
and can be used confidently in tests of core domain logic.
"""

import asyncio

import pytest

from fanin.core.models import AggregationPolicy, Outcome, Task
from fanin.tests.fakes import FakeMicroservicePort, FakeOutcomeObserverPort


class TestFakeMicroservicePort:
    """Tests for FakeMicroservicePort."""

    @pytest.mark.asyncio
    async def test_default_reply(self) -> None:
        service = FakeMicroservicePort("Alpha")
        assert await service.retrieve("hello") == "Alpha:HELLO"
        assert service.received_messages == ["hello"]
        assert service.retrieve_call_count == 1

    @pytest.mark.asyncio
    async def test_canned_reply(self) -> None:
        assert await FakeMicroservicePort("A", reply="fixed").retrieve("x") == "fixed"

    @pytest.mark.asyncio
    async def test_configured_error(self) -> None:
        service = FakeMicroservicePort("A")
        service.set_error(RuntimeError("down"))

        with pytest.raises(RuntimeError, match="down"):
            await service.retrieve("x")
        assert service.completed_call_count == 1

    @pytest.mark.asyncio
    async def test_gate_holds_call_open(self) -> None:
        gate = asyncio.Event()
        service = FakeMicroservicePort("A", gate=gate)

        call = asyncio.create_task(service.retrieve("x"))
        await asyncio.sleep(0)
        assert service.retrieve_call_count == 1
        assert service.completed_call_count == 0

        gate.set()
        assert await call == "A:X"

    @pytest.mark.asyncio
    async def test_reset(self) -> None:
        service = FakeMicroservicePort("A", error=RuntimeError("x"))
        with pytest.raises(RuntimeError):
            await service.retrieve("m")

        service.reset()

        assert service.retrieve_call_count == 0
        assert service.received_messages == []
        assert await service.retrieve("m") == "A:M"


class TestFakeOutcomeObserverPort:
    """Tests for FakeOutcomeObserverPort."""

    @pytest.fixture
    def outcome(self) -> Outcome:
        task = Task(index=2, service=FakeMicroservicePort("B"), message="m")
        return Outcome(task=task, error=RuntimeError("down"))

    @pytest.mark.asyncio
    async def test_records_failures(self, outcome: Outcome) -> None:
        observer = FakeOutcomeObserverPort()
        await observer.record_failure(AggregationPolicy.FAIL_PARTIAL, outcome)

        assert observer.recorded == [(AggregationPolicy.FAIL_PARTIAL, outcome)]
        assert observer.recorded_indexes() == [2]

    @pytest.mark.asyncio
    async def test_should_fail(self, outcome: Outcome) -> None:
        observer = FakeOutcomeObserverPort()
        observer.set_should_fail(True, "broken")

        with pytest.raises(RuntimeError, match="broken"):
            await observer.record_failure(AggregationPolicy.FAIL_SOFT, outcome)
        assert observer.record_call_count == 1
        assert observer.recorded == []

        observer.reset()
        assert observer.should_fail is False
