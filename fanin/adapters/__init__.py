"""External adapters for the fanin aggregator.

This package holds the concrete collaborators of the core and provides
implementations of the core port interfaces.

Adapter Organization:

- services/: Microservice implementations (simulated, failing, thread-backed)
- observer/: Hooks notified of absorbed task failures
- cli/: Command-line interface commands
"""
