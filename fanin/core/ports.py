"""Port interfaces for the fanin aggregator.

These abstract base classes define the boundaries between core
domain logic and external adapters. Implementations live in the
adapters/ package.

Port Interface Categories:

1. **Driven Ports** (core calls out to adapters)
   - MicroservicePort: The remote capability being fanned out to
   - OutcomeObserverPort: Hook at the per-task recovery point

2. **Driving Ports** (adapters/external systems call into core)
   - AggregatorPort: Entry point for the four aggregation strategies
"""

import asyncio
from abc import ABC, abstractmethod
from collections.abc import Sequence

from .models import AggregateResult, AggregationPolicy, Outcome


# ============================================================================
# DRIVEN PORTS (Core calls out to adapters)
# ============================================================================


class MicroservicePort(ABC):
    """Port for a single asynchronous service capability.

    The aggregator treats every call as a black box that eventually
    settles exactly once. It assumes nothing about latency, retries or
    idempotence.
    """

    @property
    @abstractmethod
    def service_id(self) -> str:
        """Stable name of the service, used in logs only."""

    @abstractmethod
    async def retrieve(self, message: str) -> str:
        """Ask the service for a value derived from ``message``.

        Args:
            message: Input string for this call.

        Returns:
            The service's success value.

        Raises:
            Exception: Any error means the call failed. Adapters should
                raise ServiceInvocationFailure or a subclass.
        """


class OutcomeObserverPort(ABC):
    """Port notified whenever a task failure is absorbed.

    Fail-Soft and Fail-Partial hide failures from the caller. An observer
    is where callers regain that information (logging, metrics). Observer
    errors are logged by the aggregator and never affect the aggregate.
    """

    @abstractmethod
    async def record_failure(
        self, policy: AggregationPolicy, outcome: Outcome
    ) -> None:
        """Record a failed task whose error will not reach the caller.

        Args:
            policy: The policy that absorbed the failure.
            outcome: The failed outcome. For Fail-Soft it is the recovered
                outcome, carrying both the fallback value and the error.
        """


# ============================================================================
# DRIVING PORTS (Adapters call into core)
# ============================================================================


class AggregatorPort(ABC):
    """Port for fanning one request out to many services.

    Every method is synchronous and returns an ``asyncio.Task`` handle at
    once; it must be called from inside a running event loop. All service
    calls are scheduled before the method returns. ``messages`` is either
    a sequence paired with ``services`` by index or a single string sent
    to every service.

    Raises (synchronously):
        AggregationInputError: If the inputs cannot be paired.
    """

    @abstractmethod
    def fail_fast(
        self,
        services: Sequence[MicroservicePort],
        messages: str | Sequence[str],
    ) -> "asyncio.Task[str]":
        """Join every value with a space, or fail if any call failed."""

    @abstractmethod
    def fail_partial(
        self,
        services: Sequence[MicroservicePort],
        messages: str | Sequence[str],
    ) -> "asyncio.Task[list[str]]":
        """List the successful values in submission order."""

    @abstractmethod
    def fail_soft(
        self,
        services: Sequence[MicroservicePort],
        messages: str | Sequence[str],
        fallback: str,
    ) -> "asyncio.Task[str]":
        """Join every value with a space, substituting ``fallback`` for failures."""

    @abstractmethod
    def completion_order(
        self,
        services: Sequence[MicroservicePort],
        messages: str | Sequence[str],
    ) -> "asyncio.Task[list[str]]":
        """List the values in the order the calls finished."""

    @abstractmethod
    def aggregate(
        self,
        policy: AggregationPolicy,
        services: Sequence[MicroservicePort],
        messages: str | Sequence[str],
        fallback: str | None = None,
    ) -> "asyncio.Task[AggregateResult]":
        """Run the strategy named by ``policy``."""
