"""Core: settings, lifespan and exception handlers (wiring only)."""
