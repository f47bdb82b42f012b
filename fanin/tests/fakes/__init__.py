"""Fake/mock implementations of core ports for testing.

These in-memory implementations allow core domain logic to be tested
without real services:

- FakeMicroservicePort: Configurable replies, errors, delays and gates
- FakeOutcomeObserverPort: Captured absorbed failures for assertion
"""

from .observer import FakeOutcomeObserverPort
from .service import FakeMicroservicePort

__all__ = [
    "FakeMicroservicePort",
    "FakeOutcomeObserverPort",
]
