"""Caller identity dependency."""

from __future__ import annotations

from fastapi import Request

from wastesearch.application.dtos.search import CallerScope
from wastesearch.domain.exceptions import AuthenticationException


def get_caller(request: Request) -> CallerScope:
    """Return the caller placed on request.state by CallerContextMiddleware.

    Raises:
        AuthenticationException: no caller identity on the request.
    """
    caller = getattr(request.state, "caller", None)
    if caller is None:
        raise AuthenticationException()
    return caller
