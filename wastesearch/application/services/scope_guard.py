"""Caller scoping: restrict a search to the clients the caller may see."""

from __future__ import annotations

import logging
from collections.abc import Collection

from wastesearch.application.dtos.search import SearchFilter
from wastesearch.core.constants import NOCLIENT
from wastesearch.domain.client_numbers import canonical_client_number
from wastesearch.domain.exceptions import ForbiddenException

logger = logging.getLogger(__name__)


def narrow(
    search_filter: SearchFilter,
    authorized_clients: Collection[str],
    unrestricted: bool,
) -> SearchFilter:
    """Return the filter narrowed to the caller's authorized clients.

    Unrestricted callers pass through unchanged. For restricted callers an
    empty authorized set always yields the NOCLIENT criterion (the pipeline
    answers with an empty page), even when client numbers were requested.
    Explicit client numbers must all be authorized; both sides are compared
    zero padded, so "10004" and "00010004" are the same client. Without
    explicit numbers the criterion becomes the authorized set.

    Raises:
        ForbiddenException: explicit client numbers outside the authorized set.
    """
    if unrestricted:
        return search_filter

    if not authorized_clients:
        logger.info("Restricted caller has no authorized clients; search denied")
        return search_filter.with_client_numbers((NOCLIENT,))

    allowed = {canonical_client_number(c) for c in authorized_clients}
    if search_filter.has_client_numbers:
        requested = tuple(canonical_client_number(c) for c in search_filter.client_numbers)
        rejected = [c for c in requested if c not in allowed]
        if rejected:
            raise ForbiddenException(rejected)
        return search_filter.with_client_numbers(requested)

    return search_filter.with_client_numbers(tuple(sorted(allowed)))
