"""In-process microservice adapters.

These stand in for remote services: they settle asynchronously after a
configurable latency and never touch the network.
"""

import asyncio
import logging
import random
from collections.abc import Callable

from fanin.core.exceptions import ServiceInvocationFailure
from fanin.core.ports import MicroservicePort

logger = logging.getLogger(__name__)


class SimulatedMicroservice(MicroservicePort):
    """Replies with ``"<service_id>:<MESSAGE>"`` after a random delay.

    The message is upper-cased, so ``Alpha`` answering ``hello`` yields
    ``Alpha:HELLO``.
    """

    def __init__(
        self,
        service_id: str,
        min_latency_ms: int = 0,
        max_latency_ms: int = 0,
        rng: random.Random | None = None,
    ):
        """Initialize the simulated service.

        Args:
            service_id: Name used as the reply prefix.
            min_latency_ms: Lower bound of the simulated latency.
            max_latency_ms: Upper bound of the simulated latency.
            rng: Random source, for reproducible latencies in tests.

        Raises:
            ValueError: If the latency bounds are negative or inverted.
        """
        if not service_id or not service_id.strip():
            raise ValueError("service_id must be a non-empty string")
        if min_latency_ms < 0 or max_latency_ms < min_latency_ms:
            raise ValueError(
                f"invalid latency bounds: {min_latency_ms}..{max_latency_ms} ms"
            )
        self._service_id = service_id
        self.min_latency_ms = min_latency_ms
        self.max_latency_ms = max_latency_ms
        self._rng = rng or random.Random()

    @property
    def service_id(self) -> str:
        return self._service_id

    async def retrieve(self, message: str) -> str:
        delay_ms = self._rng.uniform(self.min_latency_ms, self.max_latency_ms)
        if delay_ms > 0:
            await asyncio.sleep(delay_ms / 1000)
        logger.debug(f"{self.service_id} answered after {delay_ms:.1f} ms")
        return f"{self.service_id}:{message.upper()}"


class FailingMicroservice(SimulatedMicroservice):
    """Always fails with ServiceInvocationFailure after its latency."""

    def __init__(
        self,
        service_id: str,
        reason: str = "service unavailable",
        min_latency_ms: int = 0,
        max_latency_ms: int = 0,
        rng: random.Random | None = None,
    ):
        super().__init__(service_id, min_latency_ms, max_latency_ms, rng)
        self.reason = reason

    async def retrieve(self, message: str) -> str:
        await super().retrieve(message)
        raise ServiceInvocationFailure(self.service_id, self.reason)


class CallableMicroservice(MicroservicePort):
    """Adapts a blocking ``message -> str`` function to MicroservicePort.

    Each call runs in the default thread pool, so blocking work in one
    service does not hold up the others or the event loop.
    """

    def __init__(self, service_id: str, func: Callable[[str], str]):
        if not service_id or not service_id.strip():
            raise ValueError("service_id must be a non-empty string")
        self._service_id = service_id
        self.func = func

    @property
    def service_id(self) -> str:
        return self._service_id

    async def retrieve(self, message: str) -> str:
        try:
            return await asyncio.to_thread(self.func, message)
        except ServiceInvocationFailure:
            raise
        except Exception as e:
            raise ServiceInvocationFailure(self.service_id, str(e)) from e
