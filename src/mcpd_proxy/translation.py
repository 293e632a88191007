# Copyright(c) Microsoft Corporation.
# Licensed under the MIT License.

"""Translation of backend failures into client-facing diagnostics."""

import mcp.types as types

from .errors import (
    AuthenticationError,
    McpdConnectionError,
    McpdTimeoutError,
    ServerNotFoundError,
    ServerUnhealthyError,
    ToolExecutionError,
    ToolNotFoundError,
)

# Per item kind: (label, list request, verb used in generic failures).
_KINDS: dict[str, tuple[str, str, str]] = {
    "tool": ("Tool", "tools/list", "executing"),
    "prompt": ("Prompt", "prompts/list", "generating"),
    "resource": ("Resource", "resources/list", "reading"),
}


def translate_error(error: BaseException, target: str, kind: str = "tool") -> str:
    """
    Map a failure to a user-readable diagnostic.

    Args:
        error: The exception raised while serving the request.
        target: The identifier the client asked for (namespaced name or URI).
        kind: ``tool``, ``prompt`` or ``resource``.

    Returns:
        str: The diagnostic text. Never raises.
    """
    label, list_request, verb = _KINDS.get(kind, _KINDS["tool"])
    plural = list_request.split("/")[0]

    match error:
        case ToolNotFoundError():
            return (
                f"{label} '{target}' not found. "
                f"Run the {list_request} request to see available {plural}."
            )
        case ToolExecutionError():
            message = f"{label} '{target}' execution failed: {error}"
            if error.error_model is not None and error.error_model.errors:
                details = "\n".join(
                    f"  {e.location}: {e.message}" for e in error.error_model.errors
                )
                message += f"\n\nValidation errors:\n{details}"
            return message
        case ServerNotFoundError():
            return (
                f"{label} '{target}' is not available. The underlying service "
                f"may have been removed or is not configured."
            )
        case ServerUnhealthyError():
            return f"{label} '{target}' is temporarily unavailable. Please try again later."
        case McpdConnectionError():
            return (
                "Cannot connect to mcpd daemon. "
                "Please ensure mcpd is running and accessible."
            )
        case AuthenticationError():
            return "Authentication failed. Please check your MCPD_API_KEY configuration."
        case McpdTimeoutError():
            return (
                f"{label} '{target}' execution timed out. The operation may be "
                f"taking too long. Please try again."
            )
        case _:
            return f"Error {verb} {kind} '{target}': {error}"


def error_result(error: BaseException, target: str) -> types.CallToolResult:
    """Build the tools/call response for a failed invocation."""
    return types.CallToolResult(
        content=[types.TextContent(type="text", text=translate_error(error, target))],
        isError=True,
    )
