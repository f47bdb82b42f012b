"""Error types for the fanin aggregator."""


class ServiceInvocationFailure(Exception):
    """A microservice call settled with an error.

    Service adapters raise this (or a subclass). The aggregator treats
    any Exception raised by a service the same way and never wraps it,
    so callers of Fail-Fast see the original error object.
    """

    def __init__(self, service_id: str, message: str):
        super().__init__(message)
        self.service_id = service_id


class AggregationInputError(ValueError):
    """The caller passed inputs that cannot be aggregated.

    Raised synchronously, before any task is launched.
    """
