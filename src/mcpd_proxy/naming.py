# Copyright(c) Microsoft Corporation.
# Licensed under the MIT License.

"""
Namespacing helpers for the aggregated capability surface.

Tools and prompts are exposed as ``{server}__{name}``; resources are exposed
as ``mcpd://{server}/{original_uri}``. Server identifiers are assumed not to
contain the ``__`` separator; local names may.
"""

from dataclasses import dataclass

# Separator between the owning server and the backend-local name.
NAME_SEPARATOR: str = "__"

# Scheme prefix of namespaced resource URIs.
RESOURCE_URI_PREFIX: str = "mcpd://"


class NameFormatError(ValueError):
    """Raised when a namespaced name or URI cannot be decoded."""


class InvalidNameFormatError(NameFormatError):
    """Raised when a namespaced identifier does not follow the expected scheme."""


class MissingPathError(NameFormatError):
    """Raised when a namespaced resource URI lacks a server or a path."""


@dataclass(frozen=True)
class ParsedName:
    server: str
    name: str


@dataclass(frozen=True)
class ParsedResourceUri:
    server: str
    original_uri: str


def encode_name(server: str, name: str) -> str:
    """Prefix a backend-local name with its owning server."""
    return f"{server}{NAME_SEPARATOR}{name}"


def parse_prefixed_name(full_name: str, kind: str) -> ParsedName:
    """
    Split a ``server__name`` identifier into its components.

    Only the first separator is significant: everything after it is returned
    verbatim as the local name, so ``a__b__c`` yields server ``a`` and name
    ``b__c``.

    Args:
        full_name: The namespaced identifier (e.g. ``time__get_current_time``).
        kind: Item kind used in the error message (``tool``, ``prompt``, ...).

    Returns:
        ParsedName: The owning server and the backend-local name.

    Raises:
        InvalidNameFormatError: If no separator is present.
    """
    parts = full_name.split(NAME_SEPARATOR)
    if len(parts) < 2:
        raise InvalidNameFormatError(
            f"Invalid {kind} name format: {full_name}. "
            f"Expected format: server__{kind}_name"
        )
    return ParsedName(server=parts[0], name=NAME_SEPARATOR.join(parts[1:]))


def encode_resource_uri(server: str, original_uri: str) -> str:
    """Wrap a backend resource URI in the ``mcpd://`` scheme."""
    return f"{RESOURCE_URI_PREFIX}{server}/{original_uri}"


def parse_resource_uri(uri: str) -> ParsedResourceUri:
    """
    Split an ``mcpd://server/original`` URI into its components.

    The original URI is returned verbatim, including any embedded scheme
    such as ``file:///readme.md``.

    Raises:
        InvalidNameFormatError: If the URI does not use the ``mcpd`` scheme.
        MissingPathError: If the server or the original URI is empty.
    """
    if not uri.startswith(RESOURCE_URI_PREFIX):
        raise InvalidNameFormatError(
            f"Invalid resource URI format: {uri}. Expected format: mcpd://server/uri"
        )

    server, slash, original_uri = uri[len(RESOURCE_URI_PREFIX) :].partition("/")
    if not slash or not server or not original_uri:
        raise MissingPathError(
            f"Invalid resource URI format: {uri}. Missing path after server name"
        )

    return ParsedResourceUri(server=server, original_uri=original_uri)
