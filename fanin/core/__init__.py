"""Core domain logic for the fanin aggregator.

This package contains zero external dependencies and represents
the pure composition logic of the application. Service implementations
and other integrations are handled by the adapters package.
"""

from .aggregator import Aggregator, build_tasks, settle
from .exceptions import AggregationInputError, ServiceInvocationFailure
from .models import (
    AggregateResult,
    AggregationPolicy,
    AggregationReport,
    Outcome,
    Task,
)
from .ports import AggregatorPort, MicroservicePort, OutcomeObserverPort

__all__ = [
    "AggregateResult",
    "AggregationInputError",
    "AggregationPolicy",
    "AggregationReport",
    "Aggregator",
    "AggregatorPort",
    "MicroservicePort",
    "Outcome",
    "OutcomeObserverPort",
    "ServiceInvocationFailure",
    "Task",
    "build_tasks",
    "settle",
]
