"""Shared cross-cutting helpers (telemetry, utilities). No business logic."""
