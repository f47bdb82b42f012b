"""Composition root for the fanin aggregator.

This module is the ONLY location that imports both core domain logic
and concrete adapter implementations. All wiring of dependencies
happens here, creating a clear entry point for the application.

Module Structure:
- Configuration loading via config module
- Adapter instantiation
- Core service initialization
- Dependency injection
- Entry point selection (once, CLI)
"""

import asyncio
import json
import logging
import sys
from typing import Any

from fanin.adapters.cli.commands import CLICommandHandler, run_command
from fanin.adapters.observer.logging_observer import LoggingOutcomeObserver
from fanin.adapters.services.simulated import FailingMicroservice, SimulatedMicroservice
from fanin.config import Settings, load_settings
from fanin.core.aggregator import Aggregator
from fanin.core.ports import MicroservicePort


def build_services(settings: Settings) -> list[MicroservicePort]:
    """Instantiate one simulated service per configured name.

    Names listed in ``failing_services`` get a service that always fails.
    """
    failing = set(settings.failing_services)
    services: list[MicroservicePort] = []
    for name in settings.services:
        if name in failing:
            services.append(
                FailingMicroservice(
                    name,
                    min_latency_ms=settings.service_min_latency_ms,
                    max_latency_ms=settings.service_max_latency_ms,
                )
            )
        else:
            services.append(
                SimulatedMicroservice(
                    name,
                    min_latency_ms=settings.service_min_latency_ms,
                    max_latency_ms=settings.service_max_latency_ms,
                )
            )
    return services


async def _run_cli_interactive(cli_handler: CLICommandHandler) -> None:
    """Run interactive CLI loop.

    Provides a REPL-like interface for aggregation commands.

    Args:
        cli_handler: CLICommandHandler instance for executing commands.
    """
    logger = logging.getLogger(__name__)
    logger.info("Starting interactive CLI. Type 'help' for available commands or 'exit' to quit.")

    loop = asyncio.get_running_loop()

    while True:
        try:
            # Read command from stdin in a thread to avoid blocking
            command_line = await loop.run_in_executor(None, input, "fanin> ")
            command_line = command_line.strip()

            if not command_line:
                continue

            if command_line.lower() == "exit":
                logger.info("Exiting CLI")
                break

            if command_line.lower() == "help":
                _print_cli_help()
                continue

            parts = command_line.split(maxsplit=1)
            command = parts[0].lower()
            args_str = parts[1] if len(parts) > 1 else ""

            try:
                args = json.loads(args_str) if args_str else {}
            except json.JSONDecodeError:
                logger.error("Invalid JSON arguments. Use 'help' for command syntax.")
                continue

            try:
                result = await run_command(cli_handler, command, args)
                _print_result(result)
            except Exception as e:
                logger.error(f"Command execution error: {e}", exc_info=True)
                _print_result({"status": "error", "message": str(e)})

        except EOFError:
            # Ctrl+D to exit
            logger.info("EOF received, exiting CLI")
            break
        except KeyboardInterrupt:
            logger.info("Interrupted by user")
            continue


def _print_result(result: dict[str, Any]) -> None:
    if isinstance(result.get("data"), str):
        print(result["data"])
    else:
        print(json.dumps(result, indent=2, default=str))


def _print_cli_help() -> None:
    """Print CLI help message."""
    help_text = """
Available Commands (JSON format):

  fail_fast
    Join every reply; fail if any service fails.
    Example: fail_fast {"messages": "hello"}

  fail_partial
    List only the replies that succeeded.
    Example: fail_partial {"messages": ["x", "y", "z"]}

  fail_soft
    Join every reply, substituting a fallback for failures.
    Optional: fallback
    Example: fail_soft {"messages": "msg", "fallback": "N/A"}

  completion_order
    List replies in the order services finished.
    Example: completion_order {"messages": "ping", "format": "text"}

  services
    List the configured services.

  help
    Show this help message.

  exit
    Exit the CLI.

All aggregation commands require "messages" (one string shared by every
service, or a list with one message per service) and accept "timeout"
(seconds) and "format" ("json" or "text").
    """
    print(help_text)


def configure_logging(log_level: str, log_format: str) -> None:
    """Configure application logging.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_format: Log format (json, text).
    """
    level = getattr(logging, log_level, logging.INFO)

    if log_format == "json":
        format_str = '{"time": "%(asctime)s", "level": "%(levelname)s", "name": "%(name)s", "message": "%(message)s"}'
    else:
        format_str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=level,
        format=format_str,
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
    )


async def bootstrap(settings: Settings | None = None) -> dict[str, Any] | None:
    """Load configuration, wire adapters, and run the selected mode.

    This is the composition root: the single place where all components
    are instantiated and wired together.

    Steps:
    1. Load configuration from environment
    2. Configure logging
    3. Instantiate adapters with configuration
    4. Initialize the aggregator
    5. Select and start run mode

    Returns:
        The command result in 'once' mode, None in 'cli' mode.
    """
    # Step 1: Load configuration
    if settings is None:
        settings = load_settings()

    # Step 2: Configure logging
    configure_logging("DEBUG" if settings.debug else settings.log_level, settings.log_format)
    logger = logging.getLogger(__name__)
    logger.info("Loading fanin aggregator...")

    # Step 3: Instantiate adapters
    services = build_services(settings)
    logger.info(
        f"Services: {', '.join(s.service_id for s in services)} "
        f"({len(settings.failing_services)} failing)"
    )
    observer = LoggingOutcomeObserver()

    # Step 4: Initialize core
    aggregator = Aggregator(observer=observer)
    cli_handler = CLICommandHandler(
        aggregator,
        services,
        timeout_seconds=settings.result_timeout_seconds,
        default_fallback=settings.fallback_value,
    )

    # Step 5: Select run mode and start
    logger.info(f"Starting in {settings.run_mode} mode...")

    if settings.run_mode == "cli":
        await _run_cli_interactive(cli_handler)
        return None

    result = await cli_handler.run_aggregation(
        settings.policy,
        settings.message_input(),
        fallback=settings.fallback_value,
    )
    _print_result(result)
    if observer.failures_by_service:
        logger.info(f"Absorbed failures: {observer.summary()}")
    return result


def main() -> None:
    """Application entry point.

    Exit codes:
        0: Aggregation succeeded (or CLI exited normally)
        1: Aggregation failed or fatal bootstrap error
        130: Interrupted by user (SIGINT/KeyboardInterrupt)
    """
    logger = logging.getLogger(__name__)
    try:
        result = asyncio.run(bootstrap())
    except KeyboardInterrupt:
        logger.warning("Shutdown requested by user (SIGINT)")
        sys.exit(130)
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        sys.exit(1)

    if result is not None and result.get("status") != "success":
        sys.exit(1)


if __name__ == "__main__":
    main()
