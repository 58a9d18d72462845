"""Caller context middleware.

The API sits behind a gateway that authenticates the user and forwards the
identity as trusted headers: user id, identity provider and the client
numbers the user's roles grant. This middleware turns them into a
CallerScope on request.state.caller. Requests without a user id get no
caller, and endpoints that need one answer 401.
"""

import logging
from typing import Callable

from wastesearch.application.dtos.search import CallerScope
from wastesearch.core.config import Settings
from wastesearch.middleware._headers import get_header

logger = logging.getLogger(__name__)


def caller_from_headers(scope: dict, settings: Settings) -> CallerScope | None:
    """Build the CallerScope from gateway headers, or None without a user id."""
    user_id = (get_header(scope, settings.caller_id_header) or "").strip()
    if not user_id:
        return None
    provider = (get_header(scope, settings.caller_provider_header) or "").strip().upper()
    raw_clients = get_header(scope, settings.caller_clients_header) or ""
    clients = frozenset(c.strip() for c in raw_clients.split(",") if c.strip())
    return CallerScope(
        user_id=user_id,
        authorized_clients=clients,
        unrestricted=provider in settings.unrestricted_provider_set,
    )


def CallerContextMiddleware(app: Callable, settings: Settings) -> Callable:
    """Place the gateway-authenticated caller on scope state. Raw ASGI."""

    async def asgi_app(scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] == "http":
            caller = caller_from_headers(scope, settings)
            scope.setdefault("state", {})["caller"] = caller
            if caller is not None:
                logger.debug(
                    "Caller %s (unrestricted=%s, clients=%d)",
                    caller.user_id,
                    caller.unrestricted,
                    len(caller.authorized_clients),
                )
        await app(scope, receive, send)

    return asgi_app
