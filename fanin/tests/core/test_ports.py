"""Unit tests for port interface contracts and domain models.

Tests verify that port abstract base classes are properly defined,
that implementations must satisfy the interface contract, and that
the domain models enforce their invariants.
"""

import pytest

from fanin.core.aggregator import Aggregator
from fanin.core.models import (
    AggregationPolicy,
    AggregationReport,
    Outcome,
    Task,
)
from fanin.core.ports import AggregatorPort, MicroservicePort, OutcomeObserverPort
from fanin.tests.fakes import FakeMicroservicePort


# ============================================================================
# Test Fixtures
# ============================================================================


@pytest.fixture
def task() -> Task:
    """Create a sample task."""
    return Task(index=0, service=FakeMicroservicePort("Alpha"), message="hello")


# ============================================================================
# Test Port Abstraction
# ============================================================================


class TestPortAbstraction:
    """Tests that ports are properly abstract and cannot be instantiated."""

    def test_microservice_port_is_abstract(self) -> None:
        with pytest.raises(TypeError):
            MicroservicePort()  # type: ignore

    def test_outcome_observer_port_is_abstract(self) -> None:
        with pytest.raises(TypeError):
            OutcomeObserverPort()  # type: ignore

    def test_aggregator_port_is_abstract(self) -> None:
        with pytest.raises(TypeError):
            AggregatorPort()  # type: ignore

    def test_incomplete_microservice_rejected(self) -> None:
        """A service without retrieve() cannot be created."""

        class NameOnly(MicroservicePort):
            @property
            def service_id(self) -> str:
                return "x"

        with pytest.raises(TypeError):
            NameOnly()  # type: ignore

    def test_aggregator_implements_port(self) -> None:
        assert isinstance(Aggregator(), AggregatorPort)


# ============================================================================
# Test Domain Models
# ============================================================================


class TestTask:
    def test_service_id_comes_from_service(self, task: Task) -> None:
        assert task.service_id == "Alpha"

    def test_negative_index_rejected(self) -> None:
        with pytest.raises(ValueError, match="index"):
            Task(index=-1, service=FakeMicroservicePort("A"), message="m")

    def test_is_immutable(self, task: Task) -> None:
        with pytest.raises(AttributeError):
            task.message = "other"  # type: ignore[misc]


class TestOutcome:
    def test_success(self, task: Task) -> None:
        outcome = Outcome(task=task, value="Alpha:HELLO")
        assert outcome.succeeded
        assert outcome.index == 0
        assert not outcome.recovered

    def test_failure(self, task: Task) -> None:
        outcome = Outcome(task=task, error=RuntimeError("down"))
        assert not outcome.succeeded

    def test_requires_value_or_error(self, task: Task) -> None:
        with pytest.raises(ValueError):
            Outcome(task=task)

    def test_rejects_value_and_error_unless_recovered(self, task: Task) -> None:
        with pytest.raises(ValueError):
            Outcome(task=task, value="v", error=RuntimeError("e"))

    def test_recover_substitutes_fallback(self, task: Task) -> None:
        error = RuntimeError("down")
        recovered = Outcome(task=task, error=error).recover("N/A")

        assert recovered.succeeded
        assert recovered.recovered
        assert recovered.value == "N/A"
        assert recovered.error is error

    def test_recover_keeps_success(self, task: Task) -> None:
        outcome = Outcome(task=task, value="Alpha:HELLO")
        assert outcome.recover("N/A") is outcome


class TestAggregationPolicy:
    def test_values_are_command_names(self) -> None:
        assert [p.value for p in AggregationPolicy] == [
            "fail_fast",
            "fail_partial",
            "fail_soft",
            "completion_order",
        ]

    def test_lookup_by_name(self) -> None:
        assert AggregationPolicy("fail_soft") is AggregationPolicy.FAIL_SOFT


class TestAggregationReport:
    def test_success_report(self) -> None:
        report = AggregationReport(
            policy=AggregationPolicy.FAIL_PARTIAL,
            task_count=3,
            elapsed_seconds=0.1,
            result=["a", "b"],
        )
        assert report.succeeded

    def test_error_report(self) -> None:
        report = AggregationReport(
            policy=AggregationPolicy.FAIL_FAST,
            task_count=2,
            elapsed_seconds=0.1,
            error="RuntimeError: down",
        )
        assert not report.succeeded
