"""HTTP middleware: timeout, request/correlation IDs, caller context.

Applied in main app; order matters (first added = outermost).
"""

from wastesearch.middleware.caller_context import CallerContextMiddleware
from wastesearch.middleware.request_context import RequestContextMiddleware
from wastesearch.middleware.timeout import TimeoutMiddleware

__all__ = [
    "CallerContextMiddleware",
    "RequestContextMiddleware",
    "TimeoutMiddleware",
]
