"""Application DTOs (frozen dataclasses)."""
