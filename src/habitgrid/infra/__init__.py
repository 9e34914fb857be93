"""Storage infrastructure: engines, sessions and repositories."""
