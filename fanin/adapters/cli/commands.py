"""CLI command implementations for fanin.

Maps CLI commands (one per aggregation policy, plus ``services``) to
AggregatorPort operations. It handles CLI-specific formatting, the
caller-side deadline, and error reporting.
"""

import asyncio
import logging
import time
from collections.abc import Sequence
from typing import Any

from fanin.core.aggregator import settle
from fanin.core.exceptions import AggregationInputError
from fanin.core.models import AggregationPolicy, AggregationReport
from fanin.core.ports import AggregatorPort, MicroservicePort

logger = logging.getLogger(__name__)


class CLICommandHandler:
    """Handles CLI commands by delegating to AggregatorPort.

    Runs one aggregation per command against a fixed set of services and
    reports the outcome as a dictionary. Failures are reported, not raised.
    """

    def __init__(
        self,
        aggregator: AggregatorPort,
        services: Sequence[MicroservicePort],
        timeout_seconds: float | None = 2.0,
        default_fallback: str = "N/A",
    ):
        """Initialize the CLI command handler.

        Args:
            aggregator: AggregatorPort implementation to execute commands.
            services: Services every command fans out to.
            timeout_seconds: Default deadline when waiting for a result.
                None waits indefinitely.
            default_fallback: Fallback for fail_soft when none is given.
        """
        self.aggregator = aggregator
        self.services = list(services)
        self.timeout_seconds = timeout_seconds
        self.default_fallback = default_fallback

    async def run_aggregation(
        self,
        policy: AggregationPolicy | str,
        messages: str | Sequence[str],
        fallback: str | None = None,
        timeout_seconds: float | None = None,
        output_format: str = "json",
    ) -> dict[str, Any]:
        """Run one aggregation and wait for it with a deadline.

        Args:
            policy: Aggregation policy name or enum member.
            messages: One message shared by all services, or one per service.
            fallback: Fail-Soft substitute; defaults to the handler's fallback.
            timeout_seconds: Overrides the handler's deadline.
            output_format: 'json' or 'text'.

        Returns:
            Dictionary with status, policy and either result or message.
        """
        if output_format not in ("json", "text"):
            return {
                "status": "error",
                "operation": "aggregate",
                "message": f"Unsupported format: {output_format}",
            }

        try:
            policy = AggregationPolicy(policy)
        except ValueError:
            return {
                "status": "error",
                "operation": "aggregate",
                "message": f"Unknown policy: {policy}",
            }

        if policy is AggregationPolicy.FAIL_SOFT and fallback is None:
            fallback = self.default_fallback
        deadline = self.timeout_seconds if timeout_seconds is None else timeout_seconds

        started = time.perf_counter()
        try:
            handle = self.aggregator.aggregate(policy, self.services, messages, fallback)
        except AggregationInputError as e:
            logger.error(f"Rejected {policy.value} request: {e}")
            return {
                "status": "error",
                "operation": "aggregate",
                "policy": policy.value,
                "message": str(e),
            }

        try:
            result = await settle(handle, deadline)
            report = AggregationReport(
                policy=policy,
                task_count=len(self.services),
                elapsed_seconds=time.perf_counter() - started,
                result=result,
            )
        except (asyncio.TimeoutError, TimeoutError):
            logger.error(f"{policy.value} did not finish within {deadline}s")
            report = AggregationReport(
                policy=policy,
                task_count=len(self.services),
                elapsed_seconds=time.perf_counter() - started,
                error=f"timed out after {deadline}s",
            )
        except Exception as e:
            logger.error(f"{policy.value} aggregate failed: {e}")
            report = AggregationReport(
                policy=policy,
                task_count=len(self.services),
                elapsed_seconds=time.perf_counter() - started,
                error=f"{type(e).__name__}: {e}",
            )

        if output_format == "text":
            return {
                "status": "success" if report.succeeded else "error",
                "operation": "aggregate",
                "policy": policy.value,
                "data": self._format_report_as_text(report),
            }
        return self._report_to_dict(report)

    async def list_services(self) -> dict[str, Any]:
        """Describe the services commands fan out to."""
        return {
            "status": "success",
            "operation": "services",
            "data": [service.service_id for service in self.services],
        }

    @staticmethod
    def _report_to_dict(report: AggregationReport) -> dict[str, Any]:
        result: dict[str, Any] = {
            "status": "success" if report.succeeded else "error",
            "operation": "aggregate",
            "policy": report.policy.value,
            "task_count": report.task_count,
            "elapsed_seconds": round(report.elapsed_seconds, 4),
        }
        if report.succeeded:
            result["result"] = report.result
        else:
            result["message"] = report.error
        return result

    @staticmethod
    def _format_report_as_text(report: AggregationReport) -> str:
        lines = [
            f"Policy: {report.policy.value}",
            f"Tasks: {report.task_count}",
            f"Elapsed: {report.elapsed_seconds:.3f}s",
        ]
        if not report.succeeded:
            lines.append(f"Error: {report.error}")
        elif isinstance(report.result, list):
            lines.append(f"Results ({len(report.result)}):")
            for i, value in enumerate(report.result, 1):
                lines.append(f"  {i}. {value}")
        else:
            lines.append(f"Result: {report.result}")
        return "\n".join(lines)


async def run_command(
    handler: CLICommandHandler,
    command: str,
    args: dict[str, Any],
) -> dict[str, Any]:
    """Run a CLI command.

    Entry point for executing CLI commands. Each policy name is a command.

    Args:
        handler: CLICommandHandler to execute against.
        command: Policy name or 'services'.
        args: Dictionary of command arguments ('messages', 'fallback',
            'timeout', 'format').

    Returns:
        Dictionary with command result.

    Raises:
        ValueError: If command is not recognized or 'messages' is missing.
    """
    if command == "services":
        return await handler.list_services()

    try:
        policy = AggregationPolicy(command)
    except ValueError:
        raise ValueError(f"Unknown command: {command}") from None

    if "messages" not in args:
        raise ValueError("Missing required parameter: messages")

    return await handler.run_aggregation(
        policy,
        args["messages"],
        fallback=args.get("fallback"),
        timeout_seconds=args.get("timeout"),
        output_format=args.get("format", "json"),
    )
