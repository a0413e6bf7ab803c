"""Event-driven services."""
