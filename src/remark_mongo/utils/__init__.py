"""Small helpers shared across repositories and services."""
