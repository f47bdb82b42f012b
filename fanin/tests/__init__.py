"""Test suite for the fanin aggregator.

Organized into three categories:

1. core/: Unit tests for core domain logic
   - Minimal dependencies, fast execution
   - Uses in-memory fakes for ports

2. adapters/: Tests for adapter implementations
   - Simulated services and outcome observers
   - Validates adapter behavior and error handling

3. fakes/: Port implementations for testing
   - In-memory implementations of MicroservicePort and OutcomeObserverPort
   - Used by core unit tests
"""
