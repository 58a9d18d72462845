"""Use cases behind the API endpoints."""
