"""Microservice adapters.

Implementations of MicroservicePort:
- SimulatedMicroservice: in-process service with random latency
- FailingMicroservice: always fails, for exercising failure policies
- CallableMicroservice: wraps a blocking callable, run in a worker thread
"""

from .simulated import CallableMicroservice, FailingMicroservice, SimulatedMicroservice

__all__ = ["CallableMicroservice", "FailingMicroservice", "SimulatedMicroservice"]
