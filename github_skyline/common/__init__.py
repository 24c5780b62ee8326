"""Shared helpers (logging) for the skyline command line."""
