"""Core wiring for the API app."""
