"""Domain models for the fanin aggregator.

All models in this module use only Python standard library types,
ensuring zero external dependencies in the core domain.
"""

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, TypeAlias

if TYPE_CHECKING:
    from .ports import MicroservicePort


class AggregationPolicy(str, Enum):
    """How the outcomes of one fan-out are reduced to a single result.

    - FAIL_FAST: any failure fails the aggregate
    - FAIL_PARTIAL: failures are dropped, successes returned as a list
    - FAIL_SOFT: failures are replaced by a caller-supplied fallback
    - COMPLETION_ORDER: successes listed in the order they finished
    """

    FAIL_FAST = "fail_fast"
    FAIL_PARTIAL = "fail_partial"
    FAIL_SOFT = "fail_soft"
    COMPLETION_ORDER = "completion_order"


AggregateResult: TypeAlias = str | list[str]


@dataclass(frozen=True)
class Task:
    """One (service, message) pairing submitted for concurrent execution.

    Identity is the submission index, not the service: the same service
    may appear several times in one fan-out.
    """

    index: int
    service: "MicroservicePort"
    message: str

    def __post_init__(self) -> None:
        """Validate task invariants on creation."""
        if self.index < 0:
            raise ValueError(f"index must be non-negative, got {self.index}")

    @property
    def service_id(self) -> str:
        return self.service.service_id


@dataclass(frozen=True)
class Outcome:
    """The settled result of one Task.

    Exactly one of ``value`` and ``error`` is set, except for recovered
    outcomes, which carry the substituted value and the error it replaced.
    """

    task: Task
    value: str | None = None
    error: BaseException | None = None
    recovered: bool = False

    def __post_init__(self) -> None:
        """Validate outcome invariants on creation."""
        if self.recovered:
            if self.value is None or self.error is None:
                raise ValueError("recovered outcome needs both value and error")
        elif (self.value is None) == (self.error is None):
            raise ValueError("outcome must carry exactly one of value or error")

    @property
    def index(self) -> int:
        return self.task.index

    @property
    def succeeded(self) -> bool:
        """True when the outcome carries a usable value (real or substituted)."""
        return self.value is not None

    def recover(self, fallback: str) -> "Outcome":
        """Return a successful copy of a failed outcome using ``fallback``."""
        if self.error is None:
            return self
        return Outcome(task=self.task, value=fallback, error=self.error, recovered=True)


@dataclass(frozen=True)
class AggregationReport:
    """Summary of one aggregation run, as reported by the CLI."""

    policy: AggregationPolicy
    task_count: int
    elapsed_seconds: float
    result: AggregateResult | None = None
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None
