"""Core: configuration, constants, lifespan and app wiring."""
