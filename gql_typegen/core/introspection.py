"""Loading introspected schemas from files or a live endpoint.

JSON files are expected to hold an introspection result. SDL files
(``.graphql``/``.graphqls``) are built with graphql-core and turned into
the same introspection structure.
"""

import json
from pathlib import Path
from typing import Any

import httpx
from graphql import build_schema, get_introspection_query, introspection_from_schema

from .schema import Schema, parse_schema

SDL_SUFFIXES = (".graphql", ".graphqls", ".gql")


class GraphQLError(Exception):
    """Exception raised for GraphQL errors."""

    def __init__(self, message: str, errors: list[dict[str, Any]]):
        self.message = message
        self.errors = errors
        super().__init__(message)


def introspect_sdl(sdl: str) -> dict[str, Any]:
    """Build SDL with graphql-core and return its introspection result."""
    return introspection_from_schema(build_schema(sdl))


def load_schema_document(path: str | Path) -> Schema:
    """Load a schema from an introspection JSON file or an SDL file."""
    path = Path(path)
    content = path.read_text()
    if path.suffix in SDL_SUFFIXES:
        return parse_schema(introspect_sdl(content))
    return parse_schema(json.loads(content))


def fetch_introspection(
    url: str,
    headers: dict[str, str] | None = None,
    timeout: float = 30.0,
    transport: httpx.BaseTransport | None = None,
) -> dict[str, Any]:
    """Run the standard introspection query against an endpoint.

    Args:
        url: GraphQL endpoint URL
        headers: Extra request headers, e.g. for authentication
        timeout: Request timeout in seconds
        transport: Optional httpx transport (used by tests)

    Returns:
        The 'data' portion of the response, containing ``__schema``

    Raises:
        httpx.HTTPStatusError: If the endpoint answers with an error status
        GraphQLError: If the response contains errors
    """
    request_headers = {"Content-Type": "application/json"}
    request_headers.update(headers or {})

    with httpx.Client(timeout=timeout, headers=request_headers, transport=transport) as client:
        response = client.post(url, json={"query": get_introspection_query(descriptions=True)})
        response.raise_for_status()
        result = response.json()

    if "errors" in result:
        error_messages = "; ".join(e.get("message", str(e)) for e in result["errors"])
        raise GraphQLError(f"GraphQL errors: {error_messages}", result["errors"])

    return result.get("data", {})
