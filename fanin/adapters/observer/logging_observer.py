"""Logging outcome observer.

Implements OutcomeObserverPort by logging every failure that a lenient
policy hides from the caller, and keeping per-service counts.
"""

import logging
from collections import Counter
from typing import Any

from fanin.core.models import AggregationPolicy, Outcome
from fanin.core.ports import OutcomeObserverPort

logger = logging.getLogger(__name__)


class LoggingOutcomeObserver(OutcomeObserverPort):
    """Logs absorbed failures at WARNING and tallies them per service."""

    def __init__(self, level: int = logging.WARNING):
        self.level = level
        self.failures_by_service: Counter[str] = Counter()

    async def record_failure(
        self, policy: AggregationPolicy, outcome: Outcome
    ) -> None:
        service_id = outcome.task.service_id
        self.failures_by_service[service_id] += 1

        if outcome.recovered:
            action = f"substituted {outcome.value!r}"
        else:
            action = "dropped"

        logger.log(
            self.level,
            f"[{policy.value}] task {outcome.index} ({service_id}) {action}: "
            f"{type(outcome.error).__name__}: {outcome.error}",
        )

    def summary(self) -> dict[str, Any]:
        """Failure counts seen so far."""
        return {
            "total_failures": sum(self.failures_by_service.values()),
            "by_service": dict(self.failures_by_service),
        }

    def reset(self) -> None:
        self.failures_by_service.clear()
