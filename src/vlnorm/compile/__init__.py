"""Compilation helpers for normalized unit specs."""
