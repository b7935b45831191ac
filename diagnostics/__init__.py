"""Diagnostics helpers (logging setup)."""
