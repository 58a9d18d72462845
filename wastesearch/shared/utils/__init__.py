"""Shared utilities: datetime helpers."""

from wastesearch.shared.utils.datetime import ensure_utc, utc_now

__all__ = ["ensure_utc", "utc_now"]
