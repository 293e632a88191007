# Copyright(c) Microsoft Corporation.
# Licensed under the MIT License.

"""Errors raised by the mcpd daemon client."""

from typing import Optional

from .backend_api import ErrorModel


class McpdError(Exception):
    """Raised when a call to the mcpd daemon fails."""


class ToolNotFoundError(McpdError):
    def __init__(self, server_name: str, tool_name: str) -> None:
        super().__init__(f"Tool '{tool_name}' not found on server '{server_name}'")
        self.server_name = server_name
        self.tool_name = tool_name


class ToolExecutionError(McpdError):
    def __init__(
        self,
        message: str,
        server_name: str,
        tool_name: str,
        error_model: Optional[ErrorModel] = None,
    ) -> None:
        super().__init__(message)
        self.server_name = server_name
        self.tool_name = tool_name
        self.error_model = error_model


class ServerNotFoundError(McpdError):
    def __init__(self, server_name: str) -> None:
        super().__init__(f"Server '{server_name}' not found")
        self.server_name = server_name


class ServerUnhealthyError(McpdError):
    def __init__(self, server_name: str, health_status: str) -> None:
        super().__init__(
            f"Server '{server_name}' is not healthy (status: {health_status})"
        )
        self.server_name = server_name
        self.health_status = health_status


class McpdConnectionError(McpdError):
    """Raised when the daemon cannot be reached at all."""


class AuthenticationError(McpdError):
    """Raised when the daemon rejects the configured credentials."""


class McpdTimeoutError(McpdError):
    def __init__(self, operation: str, timeout: float) -> None:
        super().__init__(f"{operation} timed out after {timeout} seconds")
        self.operation = operation
        self.timeout = timeout
