"""
Error kinds, the JSON error envelope, and the domain exceptions raised by
resolvers and collaborators.

Resolver-level failures (missing token, store errors, trophy fetch errors)
become GraphQL errors carrying their message verbatim. Adapter-level failures
are reported with the PROCESSING_ERROR envelope, and anything else ends up in
the plain-text last-resort 500.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import Mapping

from flask import Response


class ErrorKind(str, Enum):
    VALIDATION_ERROR = "VALIDATION_ERROR"
    PROCESSING_ERROR = "PROCESSING_ERROR"
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"


@dataclass(frozen=True)
class ErrorEnvelope:
    message: str
    code: ErrorKind
    status_code: int

    def to_dict(self) -> dict:
        return {"message": self.message, "code": self.code.value, "statusCode": self.status_code}


PROCESSING_ERROR = ErrorEnvelope(
    message="Error processing GraphQL request",
    code=ErrorKind.PROCESSING_ERROR,
    status_code=500,
)


class BlogApiError(Exception):
    """Base class for failures that should reach the client with their message."""


class AuthenticationRequired(BlogApiError):
    def __init__(self, action: str) -> None:
        super().__init__(f"Authentication required to {action}")
        self.action = action


class DataStoreError(BlogApiError):
    pass


class EmptyUpdate(BlogApiError):
    def __init__(self) -> None:
        super().__init__("No fields to update: pass at least one of title, content or author")


class TrophyFetchError(BlogApiError):
    pass


def error_response(envelope: ErrorEnvelope, cors_headers: Mapping[str, str]) -> Response:
    headers = dict(cors_headers)
    headers["Content-Type"] = "application/json"
    return Response(
        json.dumps({"errors": [envelope.to_dict()]}),
        status=envelope.status_code,
        headers=headers,
    )


def processing_error_response(cors_headers: Mapping[str, str]) -> Response:
    return error_response(PROCESSING_ERROR, cors_headers)


def internal_error_response(cors_headers: Mapping[str, str] | None = None) -> Response:
    """Last-resort answer when a failure escaped every other handler."""
    return Response(
        "Internal Server Error",
        status=500,
        mimetype="text/plain",
        headers=dict(cors_headers or {}),
    )


__all__ = [
    "ErrorKind",
    "ErrorEnvelope",
    "PROCESSING_ERROR",
    "BlogApiError",
    "AuthenticationRequired",
    "DataStoreError",
    "EmptyUpdate",
    "TrophyFetchError",
    "error_response",
    "processing_error_response",
    "internal_error_response",
]
