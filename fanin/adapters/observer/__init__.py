"""Outcome observer adapters.

- LoggingOutcomeObserver: logs and counts failures absorbed by Fail-Soft and Fail-Partial
"""

from .logging_observer import LoggingOutcomeObserver

__all__ = ["LoggingOutcomeObserver"]
