"""CLI command implementations for registry management.

Provides registry operations through a command-line interface.

This adapter maps CLI commands to RegistryPort operations. It handles
caller identity, CLI-specific result formatting and error reporting.
"""

import logging
from typing import Any

from petregistry.adapters.dispatch import OPERATIONS, UnknownOperationError, dispatch
from petregistry.core.errors import RegistryError
from petregistry.core.ports import RegistryPort

logger = logging.getLogger(__name__)


class CLICommandHandler:
    """Handles CLI commands by delegating to RegistryPort.

    Every command returns a result dictionary; registry failures come
    back as tagged errors rather than exceptions.
    """

    def __init__(self, registry: RegistryPort, identity: str):
        """Initialize the CLI command handler.

        Args:
            registry: RegistryPort implementation to execute commands.
            identity: Default caller identity for commands that need one.
        """
        self.registry = registry
        self.identity = identity

    @property
    def commands(self) -> list[str]:
        return sorted(OPERATIONS)

    async def execute(
        self, command: str, args: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        """Execute a CLI command.

        A "caller" key in args overrides the default identity.

        Args:
            command: Command name (a registry operation name).
            args: Command arguments.

        Returns:
            Dictionary with status, operation and data or error.

        Raises:
            UnknownOperationError: If command is not recognized.
        """
        args = dict(args or {})
        caller = args.pop("caller", None) or self.identity

        try:
            data = await dispatch(self.registry, command, args, caller=caller)
        except UnknownOperationError:
            raise
        except RegistryError as e:
            logger.error(f"Command {command} failed: {e.kind}: {e.detail}")
            return {
                "status": "error",
                "operation": command,
                "error": e.to_dict(),
            }

        return {
            "status": "success",
            "operation": command,
            "data": data,
        }

    def format_result_as_text(self, result: dict[str, Any]) -> str:
        """Format a command result as human-readable text.

        Args:
            result: Result dictionary returned by execute().

        Returns:
            Formatted text string.
        """
        lines = [f"{result.get('operation')}: {result.get('status')}"]

        if result.get("status") == "error":
            error = result.get("error", {})
            lines.append(f"  {error.get('kind')}: {error.get('detail')}")
            return "\n".join(lines)

        data = result.get("data")
        records = data if isinstance(data, list) else [data]
        if data is None or not records:
            lines.append("  (no records)")
        for record in records:
            if not isinstance(record, dict):
                continue
            lines.append("")
            for key, value in record.items():
                lines.append(f"  {key}: {value}")

        return "\n".join(lines)
