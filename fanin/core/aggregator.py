"""Fan-out/fan-in aggregation over concurrent microservice calls.

Every strategy follows the same shape:

1. Pair services with messages into Tasks (validation happens here,
   before anything runs).
2. Launch one asyncio task per Task. Each one converts the service's
   result or error into an Outcome, so the launch layer never drops or
   raises an outcome.
3. Return a handle for the reduction, which waits on the fan-in barrier
   and then applies the policy.
"""

import asyncio
import logging
from collections.abc import Coroutine, Sequence
from typing import Any, TypeVar

from .exceptions import AggregationInputError, ServiceInvocationFailure
from .models import AggregateResult, AggregationPolicy, Outcome, Task
from .ports import AggregatorPort, MicroservicePort, OutcomeObserverPort

logger = logging.getLogger(__name__)

T = TypeVar("T")

SEPARATOR = " "


def build_tasks(
    services: Sequence[MicroservicePort],
    messages: str | Sequence[str],
) -> list[Task]:
    """Pair services with messages by index.

    A single string is shared by every service.

    Raises:
        AggregationInputError: If the sequences differ in length or a
            message is not a string.
    """
    if isinstance(services, str) or not isinstance(services, Sequence):
        raise AggregationInputError("services must be a sequence of services")

    if isinstance(messages, str):
        paired = [messages] * len(services)
    else:
        paired = list(messages)
        if len(paired) != len(services):
            raise AggregationInputError(
                f"got {len(services)} services but {len(paired)} messages"
            )

    for index, message in enumerate(paired):
        if not isinstance(message, str):
            raise AggregationInputError(
                f"message {index} must be a string, got {type(message).__name__}"
            )

    return [
        Task(index=index, service=service, message=message)
        for index, (service, message) in enumerate(zip(services, paired))
    ]


async def settle(handle: "asyncio.Future[T]", timeout: float | None = None) -> T:
    """Wait for an aggregate handle, giving up after ``timeout`` seconds.

    The handle is shielded: when the deadline passes, TimeoutError is
    raised here but the aggregation and its service calls keep running.
    """
    return await asyncio.wait_for(asyncio.shield(handle), timeout)


def _first_failure(outcomes: Sequence[Outcome]) -> Outcome | None:
    """Lowest-index failed outcome, if any."""
    for outcome in outcomes:
        if not outcome.succeeded:
            return outcome
    return None


class Aggregator(AggregatorPort):
    """Implements the four aggregation strategies.

    The aggregator keeps no state between calls. The optional observer is
    told about every failure that Fail-Partial or Fail-Soft absorbs.
    """

    def __init__(self, observer: OutcomeObserverPort | None = None):
        self.observer = observer

    # ------------------------------------------------------------------
    # Strategies
    # ------------------------------------------------------------------

    def process(
        self, services: Sequence[MicroservicePort], message: str
    ) -> "asyncio.Task[str]":
        """Send one message to every service and join the replies (Fail-Fast)."""
        return self.fail_fast(services, message)

    def fail_fast(
        self,
        services: Sequence[MicroservicePort],
        messages: str | Sequence[str],
    ) -> "asyncio.Task[str]":
        tasks = build_tasks(services, messages)
        handles = self._launch(tasks, AggregationPolicy.FAIL_FAST)
        return self._spawn(self._join_all(handles), AggregationPolicy.FAIL_FAST)

    def fail_partial(
        self,
        services: Sequence[MicroservicePort],
        messages: str | Sequence[str],
    ) -> "asyncio.Task[list[str]]":
        tasks = build_tasks(services, messages)
        handles = self._launch(tasks, AggregationPolicy.FAIL_PARTIAL)
        return self._spawn(
            self._keep_successes(handles), AggregationPolicy.FAIL_PARTIAL
        )

    def fail_soft(
        self,
        services: Sequence[MicroservicePort],
        messages: str | Sequence[str],
        fallback: str,
    ) -> "asyncio.Task[str]":
        if not isinstance(fallback, str):
            raise AggregationInputError(
                f"fallback must be a string, got {type(fallback).__name__}"
            )
        tasks = build_tasks(services, messages)
        handles = self._launch(tasks, AggregationPolicy.FAIL_SOFT, fallback)
        return self._spawn(self._join_all(handles), AggregationPolicy.FAIL_SOFT)

    def completion_order(
        self,
        services: Sequence[MicroservicePort],
        messages: str | Sequence[str],
    ) -> "asyncio.Task[list[str]]":
        tasks = build_tasks(services, messages)
        handles = self._launch(tasks, AggregationPolicy.COMPLETION_ORDER)
        return self._spawn(
            self._collect_in_completion_order(handles),
            AggregationPolicy.COMPLETION_ORDER,
        )

    def aggregate(
        self,
        policy: AggregationPolicy | str,
        services: Sequence[MicroservicePort],
        messages: str | Sequence[str],
        fallback: str | None = None,
    ) -> "asyncio.Task[AggregateResult]":
        try:
            policy = AggregationPolicy(policy)
        except ValueError as e:
            raise AggregationInputError(f"Unknown policy: {policy}") from e

        if policy is AggregationPolicy.FAIL_FAST:
            return self.fail_fast(services, messages)
        if policy is AggregationPolicy.FAIL_PARTIAL:
            return self.fail_partial(services, messages)
        if policy is AggregationPolicy.FAIL_SOFT:
            if fallback is None:
                raise AggregationInputError("fail_soft requires a fallback value")
            return self.fail_soft(services, messages, fallback)
        return self.completion_order(services, messages)

    # ------------------------------------------------------------------
    # Invocation
    # ------------------------------------------------------------------

    def _launch(
        self,
        tasks: list[Task],
        policy: AggregationPolicy,
        fallback: str | None = None,
    ) -> list["asyncio.Task[Outcome]"]:
        """Schedule every task on the running loop, in submission order."""
        loop = asyncio.get_running_loop()
        logger.debug(f"Launching {len(tasks)} tasks under {policy.value}")
        return [
            loop.create_task(
                self._invoke(task, policy, fallback),
                name=f"fanin-{policy.value}-{task.index}",
            )
            for task in tasks
        ]

    def _spawn(
        self, reduction: Coroutine[Any, Any, T], policy: AggregationPolicy
    ) -> "asyncio.Task[T]":
        return asyncio.get_running_loop().create_task(
            reduction, name=f"fanin-{policy.value}"
        )

    async def _invoke(
        self,
        task: Task,
        policy: AggregationPolicy,
        fallback: str | None,
    ) -> Outcome:
        """Run one service call and capture how it settled."""
        try:
            value = await task.service.retrieve(task.message)
            if not isinstance(value, str):
                raise ServiceInvocationFailure(
                    task.service_id,
                    f"{task.service_id} returned {type(value).__name__}, expected str",
                )
        except Exception as e:
            outcome = Outcome(task=task, error=e)
        else:
            return Outcome(task=task, value=value)

        if fallback is not None:
            outcome = outcome.recover(fallback)

        if policy in (AggregationPolicy.FAIL_PARTIAL, AggregationPolicy.FAIL_SOFT):
            logger.warning(
                f"Task {task.index} ({task.service_id}) failed under "
                f"{policy.value}: {outcome.error}"
            )
            await self._notify(policy, outcome)

        return outcome

    async def _notify(self, policy: AggregationPolicy, outcome: Outcome) -> None:
        if self.observer is None:
            return
        try:
            await self.observer.record_failure(policy, outcome)
        except Exception as e:
            logger.error(
                f"Outcome observer failed for task {outcome.index}: {e}",
                exc_info=True,
            )

    # ------------------------------------------------------------------
    # Reductions
    # ------------------------------------------------------------------

    @staticmethod
    async def _wait_all(handles: list["asyncio.Task[Outcome]"]) -> list[Outcome]:
        """Fan-in barrier: returns once every task has settled.

        asyncio.wait does not cancel the tasks if the waiter is cancelled.
        """
        if handles:
            await asyncio.wait(handles)
        return [handle.result() for handle in handles]

    async def _join_all(self, handles: list["asyncio.Task[Outcome]"]) -> str:
        outcomes = await self._wait_all(handles)
        failure = _first_failure(outcomes)
        if failure is not None:
            logger.error(
                f"Aborting aggregate: task {failure.index} "
                f"({failure.task.service_id}) failed: {failure.error}"
            )
            raise failure.error
        return SEPARATOR.join(outcome.value for outcome in outcomes)

    async def _keep_successes(
        self, handles: list["asyncio.Task[Outcome]"]
    ) -> list[str]:
        outcomes = await self._wait_all(handles)
        return [outcome.value for outcome in outcomes if outcome.succeeded]

    async def _collect_in_completion_order(
        self, handles: list["asyncio.Task[Outcome]"]
    ) -> list[str]:
        # Only this coroutine appends to `finished`, so no lock is needed.
        finished: list[str] = []
        failures: list[Outcome] = []
        for next_settled in asyncio.as_completed(handles):
            outcome = await next_settled
            if outcome.succeeded:
                finished.append(outcome.value)
            else:
                failures.append(outcome)

        if failures:
            failure = min(failures, key=lambda o: o.index)
            logger.error(
                f"Aborting completion-order aggregate: task {failure.index} "
                f"({failure.task.service_id}) failed: {failure.error}"
            )
            raise failure.error
        return finished
