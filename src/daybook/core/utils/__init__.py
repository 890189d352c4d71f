"""Small helpers shared across daybook."""
