"""Deployment error types."""

from __future__ import annotations

from .shell_commands.types import CommandResult


class DeploymentError(Exception):
    """Raised when a deployment operation fails.

    Attributes:
        message: Short, user-facing summary
        details: Optional recovery hints or captured tool output
        returncode: Exit status of the failing external command, if any
    """

    def __init__(
        self,
        message: str,
        details: str | None = None,
        returncode: int | None = None,
    ):
        self.message = message
        self.details = details
        self.returncode = returncode
        super().__init__(message)

    @classmethod
    def from_result(
        cls, message: str, result: CommandResult, hint: str | None = None
    ) -> DeploymentError:
        """Build an error from a failed command result.

        Args:
            message: Short summary of what failed
            result: The failed command result
            hint: Optional recovery hint appended after the tool output

        Returns:
            DeploymentError carrying the command's output and exit code
        """
        output = (result.stderr or result.stdout).strip()
        parts = [p for p in (output, hint) if p]
        return cls(
            message,
            details="\n\n".join(parts) or None,
            returncode=result.returncode or None,
        )
