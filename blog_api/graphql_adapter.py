"""
Bridge between the Flask request and the GraphQL engine.

The adapter builds a request-scoped context (request + bearer token), hands
the parsed body to an executor and turns its result into a wire response
whose CORS headers always win over anything the executor set.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Mapping, Optional, Union

from ariadne import format_error, graphql_sync
from flask import Response
from graphql import GraphQLSchema
from werkzeug.datastructures import Headers

from .errors import ErrorKind, processing_error_response

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "
STREAMING_UNSUPPORTED = "Chunked response not supported in this simple handler yet"


@dataclass(frozen=True)
class GraphQLContext:
    request: Any
    auth_token: Optional[str] = None


@dataclass(frozen=True)
class GraphQLHTTPRequest:
    body: Any
    headers: Mapping[str, str]
    method: str
    search: str = ""


@dataclass
class GraphQLHTTPResponse:
    # body is a str for a complete result, an iterable of chunks for an incremental one
    body: Union[str, Iterable[str]]
    status: Optional[int] = None
    headers: dict[str, str] = field(default_factory=dict)

    @property
    def is_complete(self) -> bool:
        return isinstance(self.body, str)


ContextFactory = Callable[[], GraphQLContext]
Executor = Callable[[GraphQLHTTPRequest, ContextFactory], GraphQLHTTPResponse]


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    if authorization and authorization.startswith(BEARER_PREFIX):
        return authorization[len(BEARER_PREFIX):] or None
    return None


def tag_error_codes(result: dict, kind: ErrorKind) -> dict:
    """Stamp a stable `extensions.code` on every formatted error of a result."""
    for error in result.get("errors") or ():
        error["extensions"] = {**(error.get("extensions") or {}), "code": kind.value}
    return result


class AriadneExecutor:
    """Runs operations with ariadne's synchronous engine."""

    def __init__(self, schema: GraphQLSchema, debug: bool = False) -> None:
        self.schema = schema
        self.debug = debug

    def __call__(self, http_request: GraphQLHTTPRequest, context_factory: ContextFactory) -> GraphQLHTTPResponse:
        success, result = graphql_sync(
            self.schema,
            http_request.body,
            context_value=context_factory(),
            debug=self.debug,
            introspection=True,
            error_formatter=format_error,
        )
        # success is False only when the request was rejected before execution
        # (body shape, parse, validation, variable coercion); anything else ran
        kind = ErrorKind.INTERNAL_SERVER_ERROR if success else ErrorKind.VALIDATION_ERROR
        return GraphQLHTTPResponse(
            body=json.dumps(tag_error_codes(result, kind)),
            status=200 if success else 400,
            headers={"Content-Type": "application/json; charset=utf-8"},
        )


def handle_graphql(request, cors_headers: Mapping[str, str], executor: Executor) -> Response:
    try:
        body = request.get_json(force=True, silent=True)
        if body is None:
            body = {}

        auth_token = extract_bearer_token(request.headers.get("Authorization"))

        def context_factory() -> GraphQLContext:
            return GraphQLContext(request=request, auth_token=auth_token)

        http_request = GraphQLHTTPRequest(
            body=body,
            headers=dict(request.headers),
            method=request.method,
            search=request.query_string.decode("latin-1"),
        )
        result = executor(http_request, context_factory)

        headers = Headers(result.headers)
        for name, value in cors_headers.items():
            headers.set(name, value)

        if not result.is_complete:
            return Response(STREAMING_UNSUPPORTED, status=501, headers=headers, mimetype="text/plain")

        return Response(result.body, status=result.status or 200, headers=headers)

    except Exception:
        logger.exception("GraphQL Processing Error")
        return processing_error_response(cors_headers)


__all__ = [
    "GraphQLContext",
    "GraphQLHTTPRequest",
    "GraphQLHTTPResponse",
    "AriadneExecutor",
    "extract_bearer_token",
    "tag_error_codes",
    "handle_graphql",
]
