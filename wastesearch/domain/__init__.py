"""Domain exceptions and enumerations."""
